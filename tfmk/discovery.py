"""Filesystem discovery of example directories and lintable files.

Both helpers walk the tree once via ``rglob`` and skip any path that
crosses a tool-cache directory (``.terraform`` and friends) or a hidden
directory below the search root.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from tfmk.constants import CACHE_DIRS

if TYPE_CHECKING:
    from tfmk.config import TfmkConfig


def _iter_matches(root: Path, pattern: str, exclude_dirs: frozenset[str] | set[str]) -> Iterator[Path]:
    """Yield files under *root* matching *pattern*, outside excluded dirs."""
    if not root.is_dir():
        return

    for entry in root.rglob(pattern):
        if not entry.is_file():
            continue
        rel_parts = entry.relative_to(root).parts
        if any(part in exclude_dirs or part.startswith(".") for part in rel_parts[:-1]):
            continue
        yield entry


def discover_dirs(
    root: str | Path,
    pattern: str = "*.tf",
    exclude_dirs: frozenset[str] | set[str] = CACHE_DIRS,
) -> list[Path]:
    """Find every directory that contains a file matching *pattern*.

    Args:
        root: Directory to search. A missing directory yields ``[]``.
        pattern: Glob matched against file names, e.g. ``"*.tf"``
        exclude_dirs: Directory names never descended into

    Returns:
        Sorted, deduplicated list of directories, each as ``root / relative``.
    """
    root = Path(root)
    return sorted({entry.parent for entry in _iter_matches(root, pattern, exclude_dirs)})


def discover_files(
    root: str | Path,
    pattern: str,
    exclude_dirs: frozenset[str] | set[str] = CACHE_DIRS,
) -> list[Path]:
    """Find files matching *pattern*, relative to *root*.

    Relative paths are what the containerized tools see under the mount
    point, so callers can pass them straight through as arguments.

    Returns:
        Sorted list of paths relative to *root*
    """
    root = Path(root)
    return sorted(entry.relative_to(root) for entry in _iter_matches(root, pattern, exclude_dirs))


def discover_example_dirs(config: TfmkConfig) -> list[Path]:
    """Example directories of the module, relative to the project dir."""
    return [
        path.relative_to(config.project_dir)
        for path in discover_dirs(config.examples_path)
    ]


def example_task_suffix(example_dir: Path, config: TfmkConfig) -> str:
    """Name fragment for an example's generated tasks.

    ``examples/complete`` becomes ``complete`` and ``examples/aws/vpc``
    becomes ``aws-vpc``.
    """
    rel = (config.project_dir / example_dir).relative_to(config.examples_path)
    return "-".join(rel.parts) or "root"

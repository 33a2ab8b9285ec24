"""Project files tfmk rewrites: the version file and the README docs section."""

from __future__ import annotations

import re
from pathlib import Path

from tfmk.constants import VERSION_PATTERN
from tfmk.exceptions import DocsMarkerError, VersionFileError
from tfmk.logging import get_logger

logger = get_logger("project_files")

_VERSION_PATTERN = re.compile(VERSION_PATTERN)


def read_version(path: Path) -> str:
    """Read the single version string from *path*.

    Raises:
        VersionFileError: If the file is missing or empty
    """
    try:
        version = path.read_text().strip()
    except FileNotFoundError as e:
        raise VersionFileError(f"Version file not found: {path}", path=str(path)) from e
    if not version:
        raise VersionFileError(f"Version file is empty: {path}", path=str(path))
    return version


def write_version(path: Path, version: str) -> None:
    """Replace the contents of *path* with exactly *version*.

    Raises:
        VersionFileError: If *version* is blank or contains whitespace
    """
    version = version.strip()
    if not _VERSION_PATTERN.match(version):
        raise VersionFileError(f"Invalid version string: {version!r}", path=str(path))

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(version)
    logger.info(f"Wrote version {version} to {path}")


def replace_generated_section(text: str, generated: str, begin_marker: str, end_marker: str) -> str:
    """Swap everything between the markers for *generated*.

    The markers themselves are kept. Content outside them is untouched.

    Raises:
        DocsMarkerError: If a marker is missing or the end precedes the begin
    """
    begin = text.find(begin_marker)
    if begin == -1:
        raise DocsMarkerError(f"Begin marker not found: {begin_marker}")
    end = text.find(end_marker, begin + len(begin_marker))
    if end == -1:
        if end_marker in text:
            raise DocsMarkerError("End marker appears before begin marker")
        raise DocsMarkerError(f"End marker not found: {end_marker}")

    body = generated.strip("\n")
    head = text[: begin + len(begin_marker)]
    tail = text[end:]
    return f"{head}\n{body}\n{tail}" if body else f"{head}\n{tail}"


def update_docs_section(path: Path, generated: str, begin_marker: str, end_marker: str) -> bool:
    """Rewrite the generated section of *path* in place.

    Returns:
        True if the file changed

    Raises:
        DocsMarkerError: If the file is missing or the markers are invalid
    """
    try:
        original = path.read_text()
    except FileNotFoundError as e:
        raise DocsMarkerError(f"Documentation file not found: {path}", path=str(path)) from e

    try:
        updated = replace_generated_section(original, generated, begin_marker, end_marker)
    except DocsMarkerError as e:
        raise DocsMarkerError(f"{e.message} in {path}", path=str(path)) from e

    if updated == original:
        logger.debug(f"{path} already up to date")
        return False
    path.write_text(updated)
    logger.info(f"Updated generated section of {path}")
    return True

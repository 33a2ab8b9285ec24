"""Pytest configuration and fixtures for tfmk tests."""

from pathlib import Path

import pytest

from tfmk.config import TfmkConfig
from tfmk.constants import DOCS_BEGIN_MARKER, DOCS_END_MARKER


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a Terraform module project with two examples.

    Returns:
        Path to the project root
    """
    (tmp_path / "main.tf").write_text('variable "name" {}\n')
    for name in ("minimal", "complete"):
        example = tmp_path / "examples" / name
        example.mkdir(parents=True)
        (example / "main.tf").write_text('module "example" {\n  source = "../../"\n}\n')

    cache = tmp_path / "examples" / "complete" / ".terraform" / "modules"
    cache.mkdir(parents=True)
    (cache / "cached.tf").write_text("")

    (tmp_path / "README.md").write_text(
        f"# module\n\n{DOCS_BEGIN_MARKER}\nold docs\n{DOCS_END_MARKER}\n\n## License\n"
    )
    (tmp_path / "VERSION").write_text("0.1.0")
    return tmp_path


@pytest.fixture
def config(project_dir: Path) -> TfmkConfig:
    """Configuration rooted at the sample project."""
    return TfmkConfig(project_dir=project_dir)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Unset credential and plugin cache variables."""
    for name in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_DEFAULT_REGION", "TF_PLUGIN_CACHE_DIR"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch

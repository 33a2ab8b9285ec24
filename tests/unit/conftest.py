"""Shared fixtures for unit tests."""

import io
from collections.abc import Callable
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def mock_run():
    """Patch subprocess.run in the executor with a successful result."""
    with patch("tfmk.command_executor.subprocess.run") as run:
        run.return_value = MagicMock(returncode=0, stdout="")
        yield run


@pytest.fixture
def fake_process() -> Callable[..., MagicMock]:
    """Build a stand-in for a Popen object that prints *stdout*."""

    def build(stdout: str = "", returncode: int = 0) -> MagicMock:
        process = MagicMock()
        process.stdout = io.StringIO(stdout)
        process.wait.return_value = returncode
        return process

    return build


@pytest.fixture
def mock_popen(fake_process):
    """Patch subprocess.Popen, used for captured steps, with an empty result."""
    with patch("tfmk.command_executor.subprocess.Popen") as popen:
        popen.return_value = fake_process()
        yield popen


@pytest.fixture
def all_binaries_present():
    """Make every binary appear to be on PATH."""
    with patch("tfmk.preflight.shutil.which", side_effect=lambda name: f"/usr/bin/{name}"):
        yield


@pytest.fixture(autouse=True)
def _reset_logging():
    """Rebind the tfmk log handler after tests that swap stderr."""
    yield
    from tfmk.logging import setup_logging

    setup_logging()

"""Version bump and release tasks."""

from __future__ import annotations

from tfmk.command_executor import CommandResult
from tfmk.config import TfmkConfig
from tfmk.constants import TaskCategory
from tfmk.invocation import Action, Invocation, Step
from tfmk.project_files import read_version, write_version
from tfmk.tasks.base import Task


def _bump(config: TfmkConfig, previous: CommandResult | None) -> None:
    write_version(config.version_path, config.release_version or "")


def bump_version(config: TfmkConfig) -> list[Step]:
    return [Action(f"write {config.paths.version_file}", _bump)]


def release(config: TfmkConfig) -> list[Step]:
    """Tag the version from the version file and push the tag."""
    version = read_version(config.version_path)
    return [
        Invocation(
            "git",
            ("tag", "-a", version, "-m", f"Release {version}"),
            cwd=config.project_dir,
            description=f"git tag {version}",
        ),
        Invocation(
            "git",
            ("push", "origin", version),
            cwd=config.project_dir,
            description=f"git push {version}",
        ),
    ]


def get_tasks(config: TfmkConfig) -> list[Task]:
    return [
        Task(
            "bump-version",
            "Bump version (usage: tfmk bump-version VERSION=x.y.z)",
            bump_version,
            TaskCategory.RELEASE,
            required=("VERSION",),
            usage="tfmk bump-version VERSION=x.y.z",
            binaries=(),
        ),
        Task(
            "release",
            "Tag and push the version in the version file",
            release,
            TaskCategory.RELEASE,
            binaries=("git",),
        ),
    ]

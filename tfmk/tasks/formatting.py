"""Format tasks: terraform, shell, markdown and json."""

from __future__ import annotations

from tfmk.config import TfmkConfig
from tfmk.constants import TaskCategory
from tfmk.discovery import discover_files
from tfmk.invocation import Step, docker_run
from tfmk.tasks.base import Task, composite
from tfmk.tasks.terraform import fmt_args, terraform


def _prettier(config: TfmkConfig, parser: str, pattern: str) -> list[Step]:
    paths = [path.as_posix() for path in discover_files(config.project_dir, pattern)]
    if not paths:
        return []
    return [
        docker_run(
            config.images.prettier,
            [f"--parser={parser}", "--write", *paths],
            config=config,
            description=f"prettier {parser}",
        )
    ]


def format_terraform(config: TfmkConfig) -> list[Step]:
    return [terraform(config, None, *fmt_args(config))]


def format_shell(config: TfmkConfig) -> list[Step]:
    scripts = [path.as_posix() for path in discover_files(config.project_dir, "*.sh")]
    if not scripts:
        return []
    return [docker_run(config.images.shfmt, ["-i", "2", "-ci", "-w", *scripts], config=config, description="shfmt")]


def format_markdown(config: TfmkConfig) -> list[Step]:
    return _prettier(config, "markdown", "*.md")


def format_json(config: TfmkConfig) -> list[Step]:
    return _prettier(config, "json", "*.json")


def get_tasks(config: TfmkConfig) -> list[Task]:
    members = [
        Task("format-terraform", "Format terraform code", format_terraform, TaskCategory.FORMAT),
        Task("format-shell", "Format shell scripts", format_shell, TaskCategory.FORMAT),
        Task("format-markdown", "Format markdown files", format_markdown, TaskCategory.FORMAT),
        Task("format-json", "Format JSON files", format_json, TaskCategory.FORMAT),
    ]
    return [composite("format", "Format code", members, TaskCategory.FORMAT), *members]

"""Setup and housekeeping tasks: install, check-requirements, clean."""

from __future__ import annotations

import shutil

from rich.console import Console
from rich.markup import escape

from tfmk.command_executor import CommandResult
from tfmk.config import TfmkConfig
from tfmk.constants import TaskCategory
from tfmk.invocation import Action, Invocation, Step
from tfmk.logging import get_logger
from tfmk.preflight import PreflightChecker
from tfmk.tasks.base import Task

console = Console()
logger = get_logger("maintenance")


def images(config: TfmkConfig) -> list[str]:
    """Every image the tasks use, terraform pinned to its version."""
    refs = [config.terraform_image]
    refs += [ref for name, ref in config.images.model_dump().items() if name != "terraform"]
    return list(dict.fromkeys(refs))


def install(config: TfmkConfig) -> list[Step]:
    return [Invocation("docker", ("pull", ref), description=f"docker pull {ref}") for ref in images(config)]


def _check(config: TfmkConfig, previous: CommandResult | None) -> None:
    checker = PreflightChecker(config.requirements.binaries, config.requirements.env_vars)
    report = checker.run_all()
    for check in report.checks:
        if check.passed:
            console.print(f"  [green]✓[/green] {escape(check.message)}")
        else:
            console.print(f"  [yellow]![/yellow] {escape(check.message)}")
            console.print(f"    [dim]{escape(check.remediation)}[/dim]")
    if report.failures:
        console.print(f"\n[yellow]{len(report.failures)} requirement(s) missing[/yellow]")
    else:
        console.print("\n[green]All requirements satisfied[/green]")


def check_requirements(config: TfmkConfig) -> list[Step]:
    return [Action("check requirements", _check)]


def _nested(parts: tuple[str, ...]) -> bool:
    # inside .git, or inside another .terraform removed along with its parent
    return ".git" in parts or ".terraform" in parts[:-1]


def _remove_caches(config: TfmkConfig, previous: CommandResult | None) -> None:
    cache_dirs = sorted(
        path
        for path in config.project_dir.rglob(".terraform")
        if path.is_dir() and not _nested(path.relative_to(config.project_dir).parts)
    )
    if not cache_dirs:
        console.print("  [dim]-[/dim] No .terraform directories found")
        return
    for path in cache_dirs:
        shutil.rmtree(path)
        logger.debug(f"Removed {path}")
        console.print(f"  [green]✓[/green] {escape(str(path.relative_to(config.project_dir)))}")


def clean(config: TfmkConfig) -> list[Step]:
    return [Action("remove .terraform directories", _remove_caches)]


def get_tasks(config: TfmkConfig) -> list[Task]:
    return [
        Task("install", "Pull the container images of every tool", install, TaskCategory.SETUP),
        Task(
            "check-requirements",
            "Check required binaries and environment variables",
            check_requirements,
            TaskCategory.SETUP,
            binaries=(),
        ),
        Task("clean", "Remove .terraform cache directories", clean, TaskCategory.MAINTENANCE, binaries=()),
    ]

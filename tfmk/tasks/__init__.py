"""tfmk task catalogue."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from tfmk.command_executor import CommandResult
from tfmk.config import TfmkConfig
from tfmk.constants import TaskCategory
from tfmk.invocation import Action, Step
from tfmk.tasks import docs, formatting, lint, maintenance, release, terraform
from tfmk.tasks.base import Task, TaskRegistry, composite

console = Console()

_MODULES = (maintenance, lint, formatting, docs, terraform, release)


def show_task_table(registry: TaskRegistry) -> None:
    """Print every task with its description, one section per category."""
    table = Table(title="tfmk tasks")
    table.add_column("Category", style="dim", no_wrap=True)
    table.add_column("Task", style="cyan", no_wrap=True)
    table.add_column("Description")
    for category in TaskCategory:
        tasks = [task for task in registry if task.category is category]
        for i, task in enumerate(tasks):
            table.add_row(
                category.value if i == 0 else "",
                task.name,
                task.description,
                end_section=i == len(tasks) - 1,
            )
    console.print(table)


def _help_task(registry: TaskRegistry) -> Task:
    def show(config: TfmkConfig, previous: CommandResult | None) -> None:
        show_task_table(registry)

    def build(config: TfmkConfig) -> list[Step]:
        return [Action("list tasks", show)]

    return Task("help", "Show this help", build, TaskCategory.SETUP, binaries=())


def build_registry(config: TfmkConfig) -> TaskRegistry:
    """All tasks for *config*, including one set per example directory."""
    registry = TaskRegistry()
    registry.register(_help_task(registry))
    for module in _MODULES:
        for task in module.get_tasks(config):
            registry.register(task)
    return registry


__all__ = ["Task", "TaskRegistry", "build_registry", "composite", "show_task_table"]

"""Command dispatcher: task name -> ordered steps, fail-fast."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.markup import escape

from tfmk.command_executor import CommandExecutor, CommandResult
from tfmk.config import TfmkConfig
from tfmk.exceptions import MissingArgumentError, StepFailedError
from tfmk.invocation import Action
from tfmk.logging import get_task_logger
from tfmk.preflight import PreflightChecker, PreflightReport
from tfmk.tasks.base import Task, TaskRegistry

console = Console()


class Dispatcher:
    """Run tasks from a registry against one configuration.

    Steps run one at a time, each to completion before the next. The first
    step that exits non-zero stops the task and every task queued after it.
    """

    def __init__(
        self,
        config: TfmkConfig,
        registry: TaskRegistry,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.executor = executor or CommandExecutor(working_dir=config.project_dir)

    def run_all(self, names: Iterable[str]) -> list[CommandResult]:
        """Run several tasks in order.

        Every name is resolved before anything runs, so a typo in the last
        target does not leave the first half executed.

        Raises:
            TaskNotFoundError: If any name is unknown
            MissingArgumentError: If a task lacks a required variable
            StepFailedError: On the first failing step
        """
        tasks = [self.registry.get(name) for name in names]
        for task in tasks:
            self.check_arguments(task)

        results: list[CommandResult] = []
        for task in tasks:
            results += self._run(task)
        return results

    def run(self, name: str) -> list[CommandResult]:
        """Run a single task by name. See :meth:`run_all`."""
        return self.run_all([name])

    def check_arguments(self, task: Task) -> None:
        """Fail if a variable the task requires is empty.

        Raises:
            MissingArgumentError: Naming the variable and the usage hint
        """
        for variable in task.required:
            value = self.config.lookup(variable)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingArgumentError(task.name, variable, task.usage or f"tfmk {task.name} {variable}=...")

    def check_requirements(self, task: Task) -> PreflightReport:
        """Warn about missing binaries and environment variables. Never fails."""
        report = PreflightChecker(task.binaries, task.env_vars).run_all()
        log = get_task_logger(task.name)
        for message in report.remediation_messages():
            log.warning(message)
        return report

    def _run(self, task: Task) -> list[CommandResult]:
        log = get_task_logger(task.name)
        self.check_requirements(task)

        steps = task.build(self.config)
        if not steps:
            console.print(f"[dim]{task.name}: nothing to do[/dim]")
            return []

        results: list[CommandResult] = []
        previous: CommandResult | None = None
        count = len(steps)

        for index, step in enumerate(steps, start=1):
            console.print(f"[bold cyan]>[/bold cyan] {task.name} ({index}/{count}) {escape(str(step))}")

            if isinstance(step, Action):
                if self.executor.dry_run:
                    log.info(f"Dry run: skipping {step.description}")
                    continue
                step.func(self.config, previous)
                continue

            stdin = previous.stdout if step.stdin_from_previous and previous is not None else None
            result = self.executor.execute(step, stdin=stdin)
            results.append(result)
            if not result.success:
                if result.stderr:
                    log.error(result.stderr)
                raise StepFailedError(task.name, index, count, step.label, result.exit_code)
            previous = result

        log.debug(f"Completed {count} step(s)")
        return results

"""Task definition and registry."""

from __future__ import annotations

import difflib
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tfmk.constants import TaskCategory
from tfmk.exceptions import TaskError, TaskNotFoundError

if TYPE_CHECKING:
    from tfmk.config import TfmkConfig
    from tfmk.invocation import Step


@dataclass(frozen=True)
class Task:
    """A named, user-invokable unit of work.

    Attributes:
        name: Name typed on the command line
        description: One line shown by ``help``
        build: Produces the ordered steps for a given configuration
        category: Grouping for ``help``
        required: Configuration variables that must be non-empty
        usage: Hint printed when a required variable is missing
        binaries: Programs that must be on PATH
        env_vars: Environment variables the steps forward
    """

    name: str
    description: str
    build: Callable[[TfmkConfig], list[Step]]
    category: TaskCategory = TaskCategory.MAINTENANCE
    required: tuple[str, ...] = ()
    usage: str = ""
    binaries: tuple[str, ...] = ("docker",)
    env_vars: tuple[str, ...] = ()


def composite(
    name: str,
    description: str,
    members: Iterable[Task],
    category: TaskCategory,
) -> Task:
    """A task that runs the steps of *members* in order."""
    members = tuple(members)

    def build(config: TfmkConfig) -> list[Step]:
        return [step for member in members for step in member.build(config)]

    return Task(
        name=name,
        description=description,
        build=build,
        category=category,
        required=_union(m.required for m in members),
        binaries=_union(m.binaries for m in members),
        env_vars=_union(m.env_vars for m in members),
    )


def _union(groups: Iterable[tuple[str, ...]]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(item for group in groups for item in group))


class TaskRegistry:
    """Tasks by name, in registration order."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {}
        for task in tasks:
            self.register(task)

    def register(self, task: Task) -> None:
        """Add *task*.

        Raises:
            TaskError: If a task with the same name is already registered
        """
        if task.name in self._tasks:
            raise TaskError(f"Task already registered: {task.name}", task.name)
        self._tasks[task.name] = task

    def get(self, name: str) -> Task:
        """Look up a task.

        Raises:
            TaskNotFoundError: With close matches as suggestions
        """
        try:
            return self._tasks[name]
        except KeyError:
            suggestions = difflib.get_close_matches(name, list(self._tasks), n=3)
            raise TaskNotFoundError(name, suggestions) from None

    def names(self) -> list[str]:
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

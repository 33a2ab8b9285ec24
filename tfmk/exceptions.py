"""tfmk exception hierarchy."""

from typing import Any


class TfmkError(Exception):
    """Base exception for all tfmk errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(TfmkError):
    """Error in tfmk configuration or a KEY=VALUE override."""

    def __init__(
        self, message: str, key: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.key = key


class TaskError(TfmkError):
    """Base error for task-related issues."""

    def __init__(
        self, message: str, task_name: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.task_name = task_name


class TaskNotFoundError(TaskError):
    """Requested task is not defined."""

    def __init__(self, task_name: str, suggestions: list[str] | None = None) -> None:
        super().__init__(f"No such task: {task_name}", task_name)
        self.suggestions = suggestions or []


class MissingArgumentError(TaskError):
    """A task was invoked without a required KEY=VALUE argument."""

    def __init__(self, task_name: str, variable: str, usage: str) -> None:
        super().__init__(f"{variable} is required for task '{task_name}'", task_name)
        self.variable = variable
        self.usage = usage


class StepFailedError(TaskError):
    """An external tool exited non-zero while running a task."""

    def __init__(
        self,
        task_name: str,
        step_index: int,
        step_count: int,
        description: str,
        exit_code: int,
    ) -> None:
        super().__init__(
            f"Task '{task_name}' failed at step {step_index}/{step_count} ({description})",
            task_name,
            {"exit_code": exit_code},
        )
        self.step_index = step_index
        self.step_count = step_count
        self.description = description
        self.exit_code = exit_code


class CommandValidationError(TfmkError):
    """Raised when an invocation fails allowlist validation."""

    pass


class ProjectFileError(TfmkError):
    """Base error for files tfmk reads and rewrites."""

    def __init__(
        self, message: str, path: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.path = path


class VersionFileError(ProjectFileError):
    """Version file missing, empty or unreadable."""

    pass


class DocsMarkerError(ProjectFileError):
    """Generated-section markers missing or out of order."""

    pass

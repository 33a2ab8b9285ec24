"""tfmk logging with coloured console or JSON output."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any


class JsonFormatter(logging.Formatter):
    """JSON formatter for machine-readable logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "ts": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields from record
        for key in ["task", "step", "command", "exit_code"]:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for human-readable output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        Args:
            record: Log record to format

        Returns:
            Colored log string
        """
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")
        context = f"[{record.task}]" if hasattr(record, "task") else ""

        return f"{color}{timestamp} {record.levelname:8s}{self.RESET} {context} {record.getMessage()}"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the tfmk namespace.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    if name.startswith("tfmk.") or name == "tfmk":
        return logging.getLogger(name)
    return logging.getLogger(f"tfmk.{name}")


def setup_logging(level: str = "info", json_output: bool = False) -> None:
    """Set up logging for the tfmk namespace.

    Logs always go to stderr so tool output on stdout stays clean.

    Args:
        level: Log level (debug, info, warning, error)
        json_output: Emit one JSON object per line instead of coloured text
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger("tfmk")
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter() if json_output else ConsoleFormatter())
    root_logger.addHandler(handler)

    root_logger.propagate = False


class TaskLoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that adds the running task's name to log records."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def get_task_logger(task_name: str) -> TaskLoggerAdapter:
    """Get a logger adapter for a specific task.

    Args:
        task_name: Task name for context

    Returns:
        TaskLoggerAdapter with task context
    """
    return TaskLoggerAdapter(get_logger("task"), {"task": task_name})


# Initialize default logging on import
setup_logging()

"""Command execution with validation and allowlisting.

This module runs task invocations by:
1. Using shell=False for all subprocess calls
2. Validating the program against an allowlist
3. Filtering environment overrides that must never be replaced
4. Logging every command execution for audit
"""

import os
import re
import subprocess
import sys
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import IO, Any

from tfmk.exceptions import CommandValidationError
from tfmk.invocation import Invocation
from tfmk.logging import get_logger

logger = get_logger(__name__)

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


class CommandCategory(Enum):
    """Categories of allowed programs."""

    CONTAINER = "container"
    TERRAFORM = "terraform"
    LINTING = "linting"
    FORMATTING = "formatting"
    DOCS = "docs"
    GIT = "git"


@dataclass
class CommandResult:
    """Result of command execution."""

    command: list[str]
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int
    success: bool
    category: CommandCategory | None = None
    dry_run: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "command": self.command,
            "exit_code": self.exit_code,
            "stdout": self.stdout[:2000] if len(self.stdout) > 2000 else self.stdout,
            "stderr": self.stderr[:2000] if len(self.stderr) > 2000 else self.stderr,
            "duration_ms": self.duration_ms,
            "success": self.success,
            "category": self.category.value if self.category else None,
            "dry_run": self.dry_run,
            "timestamp": self.timestamp.isoformat(),
        }


# Programs tasks may run. Native binaries are listed so a config can swap
# a container for a locally installed tool.
ALLOWED_PROGRAMS: dict[str, CommandCategory] = {
    "docker": CommandCategory.CONTAINER,
    "podman": CommandCategory.CONTAINER,
    "terraform": CommandCategory.TERRAFORM,
    "tflint": CommandCategory.LINTING,
    "shellcheck": CommandCategory.LINTING,
    "markdownlint": CommandCategory.LINTING,
    "yamllint": CommandCategory.LINTING,
    "jsonlint": CommandCategory.LINTING,
    "shfmt": CommandCategory.FORMATTING,
    "prettier": CommandCategory.FORMATTING,
    "terraform-docs": CommandCategory.DOCS,
    "git": CommandCategory.GIT,
}

# Environment variables an invocation may never override
DANGEROUS_ENV_VARS = {
    "LD_PRELOAD",
    "LD_LIBRARY_PATH",
    "DYLD_INSERT_LIBRARIES",
    "DYLD_LIBRARY_PATH",
    "PATH",
    "PYTHONPATH",
    "HOME",
    "USER",
    "SHELL",
}

_PROGRAM_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class CommandExecutor:
    """Executor for task invocations with validation and allowlisting."""

    def __init__(self, working_dir: Path | str | None = None, dry_run: bool = False):
        """Initialize command executor.

        Args:
            working_dir: Working directory for command execution
            dry_run: Log invocations instead of running them
        """
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.dry_run = dry_run
        self.allowlist = ALLOWED_PROGRAMS.copy()

    def validate(self, invocation: Invocation) -> tuple[bool, str, CommandCategory | None]:
        """Validate an invocation's program against the allowlist.

        Args:
            invocation: Invocation to check

        Returns:
            Tuple of (is_valid, reason, category)
        """
        program = invocation.program.strip()
        if not program:
            return False, "Empty command", None

        # Bare names only; a path or shell syntax in the program slot is refused
        if not _PROGRAM_NAME.match(program):
            return False, f"Invalid program name: {program}", None

        category = self.allowlist.get(program)
        if category is None:
            return False, f"Command not in allowlist: {program}", None
        return True, "Allowed program", category

    def execute(self, invocation: Invocation, stdin: str | None = None) -> CommandResult:
        """Execute an invocation.

        Output goes straight to the terminal unless ``invocation.capture`` is
        set. Captured stdout is kept for the next step and echoed to stderr
        line by line while the process runs.

        Args:
            invocation: What to run
            stdin: Text fed to the process; None inherits the terminal

        Returns:
            CommandResult with execution details

        Raises:
            CommandValidationError: If the program is not allowed
        """
        is_valid, reason, category = self.validate(invocation)
        if not is_valid:
            raise CommandValidationError(
                f"Command validation failed: {reason}", {"command": str(invocation)}
            )

        cmd_args = invocation.argv
        start_time = time.time()

        if self.dry_run:
            logger.info(f"Dry run: {invocation}")
            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=0,
                stdout="",
                stderr="",
                duration_ms=0,
                success=True,
                category=category,
                dry_run=True,
            )
            self._record(cmd_result)
            return cmd_result

        exec_env = os.environ.copy()
        if invocation.env:
            exec_env.update(self._validate_env_vars(dict(invocation.env)))

        exec_cwd = str(invocation.cwd or self.working_dir)

        try:
            if invocation.capture:
                exit_code, stdout = self._run_captured(cmd_args, exec_cwd, exec_env, stdin)
            else:
                result = subprocess.run(
                    cmd_args,
                    cwd=exec_cwd,
                    env=exec_env,
                    input=stdin,
                    text=True,
                    shell=False,
                )
                exit_code, stdout = result.returncode, ""

            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=exit_code,
                stdout=stdout,
                stderr="",
                duration_ms=int((time.time() - start_time) * 1000),
                success=exit_code == 0,
                category=category,
            )

        except FileNotFoundError:
            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=EXIT_NOT_FOUND,
                stdout="",
                stderr=f"Command not found: {cmd_args[0]}",
                duration_ms=int((time.time() - start_time) * 1000),
                success=False,
                category=category,
            )

        except PermissionError as e:
            cmd_result = CommandResult(
                command=cmd_args,
                exit_code=EXIT_NOT_EXECUTABLE,
                stdout="",
                stderr=str(e),
                duration_ms=int((time.time() - start_time) * 1000),
                success=False,
                category=category,
            )

        self._record(cmd_result)
        return cmd_result

    def _run_captured(
        self,
        cmd_args: list[str],
        cwd: str,
        env: dict[str, str],
        stdin: str | None,
    ) -> tuple[int, str]:
        """Run with stdout piped, copying each line to stderr as it arrives.

        Returns:
            Tuple of (exit_code, captured stdout)
        """
        process = subprocess.Popen(
            cmd_args,
            cwd=cwd,
            env=env,
            stdin=subprocess.PIPE if stdin is not None else None,
            stdout=subprocess.PIPE,
            text=True,
            shell=False,
        )

        feeder = None
        if stdin is not None:
            # stdin is written while stdout is drained
            feeder = threading.Thread(target=_feed, args=(process.stdin, stdin), daemon=True)
            feeder.start()

        lines: list[str] = []
        for line in process.stdout:
            sys.stderr.write(line)
            sys.stderr.flush()
            lines.append(line)
        process.stdout.close()

        if feeder is not None:
            feeder.join()
        return process.wait(), "".join(lines)

    def _validate_env_vars(self, env: dict[str, str]) -> dict[str, str]:
        """Drop overrides of variables that control process loading.

        Args:
            env: Environment variables to validate

        Returns:
            Validated environment variables
        """
        validated = {}
        for key, value in env.items():
            if key.upper() in DANGEROUS_ENV_VARS:
                logger.warning(f"Skipping dangerous environment variable: {key}")
                continue
            validated[key] = value
        return validated

    def _record(self, result: CommandResult) -> None:
        cmd_preview = " ".join(result.command)[:100]
        if result.success:
            logger.debug(f"Command OK: {cmd_preview} (exit={result.exit_code}, {result.duration_ms}ms)")
        else:
            logger.warning(f"Command FAILED: {cmd_preview} (exit={result.exit_code})")


def _feed(pipe: IO[str], text: str) -> None:
    try:
        pipe.write(text)
    except BrokenPipeError:
        # the process exited without reading all of its input
        pass
    finally:
        try:
            pipe.close()
        except BrokenPipeError:
            pass

"""Requirement checks run before dispatching tasks.

Verifies that the external binaries a task shells out to are on PATH and
that the environment variables it forwards are set. Every failed check
carries a remediation hint the operator can act on.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from tfmk.logging import get_logger

logger = get_logger("preflight")

INSTALL_HINTS: dict[str, str] = {
    "docker": "https://docs.docker.com/get-docker/",
    "podman": "https://podman.io/docs/installation",
    "git": "https://git-scm.com/downloads",
    "terraform": "https://developer.hashicorp.com/terraform/install",
}


@dataclass
class CheckResult:
    """Result of a single requirement check."""

    name: str
    passed: bool
    message: str
    remediation: str = ""


@dataclass
class PreflightReport:
    """Aggregate results of all requirement checks."""

    checks: list[CheckResult] = field(default_factory=list)

    @property
    def failures(self) -> list[CheckResult]:
        return [c for c in self.checks if not c.passed]

    def remediation_messages(self) -> list[str]:
        return [f"{c.message}. {c.remediation}" for c in self.failures]


class PreflightChecker:
    """Check for required binaries and environment variables."""

    def __init__(
        self,
        binaries: Iterable[str] = (),
        env_vars: Iterable[str] = (),
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.binaries = tuple(binaries)
        self.env_vars = tuple(env_vars)
        self.environ = os.environ if environ is None else environ

    def run_all(self) -> PreflightReport:
        """Run every configured check."""
        report = PreflightReport()
        for binary in self.binaries:
            report.checks.append(self.check_binary(binary))
        for name in self.env_vars:
            report.checks.append(self.check_env_var(name))

        for check in report.failures:
            logger.debug(f"Requirement missing: {check.name}")
        return report

    def check_binary(self, binary: str) -> CheckResult:
        """Check that *binary* is on PATH."""
        path = shutil.which(binary)
        if path:
            return CheckResult(
                name=f"Binary {binary}",
                passed=True,
                message=f"{binary} found at {path}",
            )

        hint = INSTALL_HINTS.get(binary)
        remediation = f"Install {binary} and make sure it is on PATH"
        if hint:
            remediation += f": {hint}"
        return CheckResult(
            name=f"Binary {binary}",
            passed=False,
            message=f"{binary} not found on PATH",
            remediation=remediation,
        )

    def check_env_var(self, name: str) -> CheckResult:
        """Check that environment variable *name* is set and non-empty."""
        if self.environ.get(name):
            return CheckResult(
                name=f"Environment {name}",
                passed=True,
                message=f"{name} is set",
            )
        return CheckResult(
            name=f"Environment {name}",
            passed=False,
            message=f"{name} is not set",
            remediation=f"Export it before running: export {name}=<value>",
        )

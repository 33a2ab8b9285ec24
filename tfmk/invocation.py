"""Steps a task is made of: external tool invocations and local actions."""

from __future__ import annotations

import shlex
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from tfmk.command_executor import CommandResult
    from tfmk.config import TfmkConfig


@dataclass(frozen=True)
class Invocation:
    """A single call to an external program.

    Attributes:
        program: Executable name, resolved on PATH
        args: Arguments after the program
        env: Extra environment variables for the process
        cwd: Working directory, defaults to the executor's
        capture: Capture stdout (echoed to stderr) for the next step
        stdin_from_previous: Feed the previous step's captured stdout on stdin
        description: Short label used in progress and error output
    """

    program: str
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    cwd: Path | None = None
    capture: bool = False
    stdin_from_previous: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    @property
    def label(self) -> str:
        return self.description or self.program

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class Action:
    """A step performed in-process, such as rewriting a project file.

    ``func`` receives the configuration and the previous step's result
    (``None`` when the action is first). It raises to fail the task.
    """

    description: str
    func: Callable[[TfmkConfig, CommandResult | None], None]

    @property
    def label(self) -> str:
        return self.description

    def __str__(self) -> str:
        return self.description


Step = Union[Invocation, Action]


def docker_run(
    image: str,
    args: Iterable[str] = (),
    *,
    config: TfmkConfig,
    workdir: str | None = None,
    forward_env: Iterable[str] = (),
    container_env: Mapping[str, str] | None = None,
    volumes: Mapping[str, str] | None = None,
    interactive: bool = True,
    capture: bool = False,
    stdin_from_previous: bool = False,
    description: str = "",
) -> Invocation:
    """Build a ``docker run`` invocation with the project mounted.

    The project directory is mounted at the configured container workdir.
    Environment variables in ``forward_env`` are passed by name only, so
    their values come from the caller's environment and never appear in
    the argument list.

    Args:
        image: Image reference, optionally tagged
        args: Arguments passed to the image entrypoint
        config: Active configuration
        workdir: Container working directory, defaults to the mount point
        forward_env: Variable names to forward into the container
        container_env: Variables set explicitly inside the container
        volumes: Extra host -> container mounts
        interactive: Keep stdin open (``-i``)
        capture: See :class:`Invocation`
        stdin_from_previous: See :class:`Invocation`
        description: See :class:`Invocation`
    """
    mount = config.paths.container_workdir
    argv = ["run", "--rm"]
    if interactive:
        argv.append("-i")
    argv += ["-v", f"{config.project_dir}:{mount}", "-w", workdir or mount]
    for host, container in (volumes or {}).items():
        argv += ["-v", f"{host}:{container}"]
    for name in forward_env:
        argv += ["-e", name]
    for name, value in (container_env or {}).items():
        argv += ["-e", f"{name}={value}"]
    argv.append(image)
    argv += list(args)

    return Invocation(
        program="docker",
        args=tuple(argv),
        capture=capture,
        stdin_from_previous=stdin_from_previous,
        description=description or image,
    )

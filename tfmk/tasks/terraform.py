"""Terraform tasks generated for every example directory."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path

from tfmk.config import TfmkConfig
from tfmk.constants import CONTAINER_PLUGIN_CACHE, TaskCategory
from tfmk.discovery import discover_example_dirs, example_task_suffix
from tfmk.exceptions import ConfigurationError
from tfmk.invocation import Invocation, Step, docker_run
from tfmk.tasks.base import Task


def version_tuple(version: str) -> tuple[int, int] | None:
    """``"0.11.9"`` -> ``(0, 11)``; None for tags like ``latest``."""
    match = re.match(r"^v?(\d+)\.(\d+)", version)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def fmt_args(config: TfmkConfig, *extra: str) -> list[str]:
    """Arguments for ``terraform fmt`` covering the whole tree.

    Terraform 0.12 stopped recursing by default and grew ``-recursive``.
    """
    args = ["fmt", *extra]
    parsed = version_tuple(config.terraform.version)
    if parsed is None or parsed >= (0, 12):
        args.append("-recursive")
    return args


def terraform(
    config: TfmkConfig,
    example_dir: Path | None,
    *args: str,
    capture: bool = False,
    environ: Mapping[str, str] | None = None,
) -> Invocation:
    """Run the Terraform image in *example_dir* (project root when None).

    Credentials are forwarded by name. When the plugin cache variable is set
    on the host, the cache is mounted and the container pointed at it.
    """
    environ = os.environ if environ is None else environ
    mount = config.paths.container_workdir
    workdir = f"{mount}/{example_dir.as_posix()}" if example_dir else mount

    volumes: dict[str, str] = {}
    container_env: dict[str, str] = {}
    cache_var = config.terraform.plugin_cache_env_var
    cache_dir = environ.get(cache_var)
    if cache_dir:
        volumes[cache_dir] = CONTAINER_PLUGIN_CACHE
        container_env[cache_var] = CONTAINER_PLUGIN_CACHE

    return docker_run(
        config.terraform_image,
        args,
        config=config,
        workdir=workdir,
        forward_env=config.terraform.credential_env_vars,
        container_env=container_env,
        volumes=volumes,
        capture=capture,
        description=f"terraform {' '.join(args)}".strip(),
    )


def _plan(example_dir: Path):
    def build(config: TfmkConfig) -> list[Step]:
        return [
            terraform(config, example_dir, "init"),
            terraform(config, example_dir, "plan", capture=True),
            docker_run(
                config.images.terraform_landscape,
                config=config,
                stdin_from_previous=True,
                description="terraform-landscape",
            ),
        ]

    return build


def _single(example_dir: Path, command: str):
    def build(config: TfmkConfig) -> list[Step]:
        return [terraform(config, example_dir, command)]

    return build


def get_tasks(config: TfmkConfig) -> list[Task]:
    """Plan, apply and destroy tasks for each discovered example.

    Raises:
        ConfigurationError: If two examples map to the same task name,
            e.g. ``examples/a-b`` and ``examples/a/b``
    """
    tasks = []
    env_vars = config.terraform.credential_env_vars
    seen: dict[str, Path] = {}
    for example_dir in discover_example_dirs(config):
        suffix = example_task_suffix(example_dir, config)
        if suffix in seen:
            raise ConfigurationError(
                f"Examples {seen[suffix].as_posix()} and {example_dir.as_posix()} "
                f"both produce task names ending in '{suffix}'; rename one of them"
            )
        seen[suffix] = example_dir
        where = example_dir.as_posix()
        tasks += [
            Task(
                name=f"terraform-plan-{suffix}",
                description=f"Run terraform plan {where}",
                build=_plan(example_dir),
                category=TaskCategory.TERRAFORM,
                env_vars=env_vars,
            ),
            Task(
                name=f"terraform-apply-{suffix}",
                description=f"Run terraform apply {where}",
                build=_single(example_dir, "apply"),
                category=TaskCategory.TERRAFORM,
                env_vars=env_vars,
            ),
            Task(
                name=f"terraform-destroy-{suffix}",
                description=f"Run terraform destroy {where}",
                build=_single(example_dir, "destroy"),
                category=TaskCategory.TERRAFORM,
                env_vars=env_vars,
            ),
        ]
    return tasks

"""Lint tasks: terraform, shell, markdown, yaml and json."""

from __future__ import annotations

from tfmk.config import TfmkConfig
from tfmk.constants import TaskCategory
from tfmk.discovery import discover_files
from tfmk.invocation import Step, docker_run
from tfmk.tasks.base import Task, composite
from tfmk.tasks.terraform import fmt_args, terraform


def _files(config: TfmkConfig, pattern: str) -> list[str]:
    return [path.as_posix() for path in discover_files(config.project_dir, pattern)]


def lint_terraform(config: TfmkConfig) -> list[Step]:
    return [
        terraform(config, None, *fmt_args(config, "-check=true", "-write=false", "-diff=true")),
        docker_run(config.images.tflint, config=config, description="tflint"),
    ]


def lint_shell(config: TfmkConfig) -> list[Step]:
    scripts = _files(config, "*.sh")
    if not scripts:
        return []
    return [docker_run(config.images.shellcheck, scripts, config=config, description="shellcheck")]


def lint_markdown(config: TfmkConfig) -> list[Step]:
    documents = _files(config, "*.md")
    if not documents:
        return []
    return [docker_run(config.images.markdownlint, documents, config=config, description="markdownlint")]


def lint_yaml(config: TfmkConfig) -> list[Step]:
    return [docker_run(config.images.yamllint, ["--strict", "."], config=config, description="yamllint")]


def lint_json(config: TfmkConfig) -> list[Step]:
    # jsonlint validates a single file per run
    return [
        docker_run(config.images.jsonlint, ["-q", path], config=config, description=f"jsonlint {path}")
        for path in _files(config, "*.json")
    ]


def get_tasks(config: TfmkConfig) -> list[Task]:
    members = [
        Task("lint-terraform", "Lint terraform code", lint_terraform, TaskCategory.LINT),
        Task("lint-shell", "Lint shell scripts", lint_shell, TaskCategory.LINT),
        Task("lint-markdown", "Lint markdown files", lint_markdown, TaskCategory.LINT),
        Task("lint-yaml", "Lint YAML files", lint_yaml, TaskCategory.LINT),
        Task("lint-json", "Lint JSON files", lint_json, TaskCategory.LINT),
    ]
    return [composite("lint", "Lint code", members, TaskCategory.LINT), *members]

"""Generate the README inputs/outputs section with terraform-docs."""

from __future__ import annotations

from tfmk.command_executor import CommandResult
from tfmk.config import TfmkConfig
from tfmk.constants import TaskCategory
from tfmk.exceptions import TfmkError
from tfmk.invocation import Action, Step, docker_run
from tfmk.project_files import update_docs_section
from tfmk.tasks.base import Task


def _write_readme(config: TfmkConfig, previous: CommandResult | None) -> None:
    if previous is None:
        raise TfmkError("terraform-docs produced no output")
    update_docs_section(
        config.readme_path,
        previous.stdout,
        config.docs.begin_marker,
        config.docs.end_marker,
    )


def generate_docs(config: TfmkConfig) -> list[Step]:
    return [
        docker_run(
            config.images.terraform_docs,
            ["markdown", "."],
            config=config,
            interactive=False,
            capture=True,
            description="terraform-docs",
        ),
        Action(f"update {config.paths.readme}", _write_readme),
    ]


def get_tasks(config: TfmkConfig) -> list[Task]:
    return [Task("docs", "Generate docs between the README markers", generate_docs, TaskCategory.DOCS)]

"""tfmk command-line interface."""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from tfmk import __version__
from tfmk.command_executor import CommandExecutor
from tfmk.config import TfmkConfig, parse_overrides
from tfmk.constants import EXIT_INTERRUPTED, EXIT_USAGE
from tfmk.dispatcher import Dispatcher
from tfmk.exceptions import (
    ConfigurationError,
    MissingArgumentError,
    StepFailedError,
    TaskNotFoundError,
    TfmkError,
)
from tfmk.logging import get_logger, setup_logging
from tfmk.tasks import build_registry

console = Console()
logger = get_logger("cli")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="tfmk")
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project directory (default: current directory)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: <directory>/.tfmk.yaml)",
)
@click.option("-n", "--dry-run", is_flag=True, help="Print commands without running them")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Override the configured log level",
)
@click.option("--log-json", is_flag=True, default=False, help="Emit logs as JSON lines")
@click.option("-l", "--list", "list_tasks", is_flag=True, help="List task names and exit")
@click.argument("targets", nargs=-1)
def cli(
    directory: Path | None,
    config_path: Path | None,
    dry_run: bool,
    log_level: str | None,
    log_json: bool,
    list_tasks: bool,
    targets: tuple[str, ...],
) -> None:
    """tfmk - task runner for Terraform modules.

    Runs TARGETS in order, stopping at the first failure. Arguments of the
    form KEY=VALUE override configuration, e.g. VERSION=1.2.3.

    Examples:

        tfmk lint

        tfmk format docs

        tfmk bump-version VERSION=1.2.3

        tfmk terraform-plan-complete TERRAFORM_VERSION=0.11.14
    """
    names = [t for t in targets if "=" not in t]
    assignments = [t for t in targets if "=" in t]
    project_dir = (directory or Path.cwd()).resolve()

    try:
        config = TfmkConfig.load(project_dir, config_path).with_overrides(parse_overrides(assignments))
        setup_logging(log_level or config.logging.level, log_json or config.logging.json_output)
        registry = build_registry(config)

        if list_tasks:
            for name in registry.names():
                click.echo(name)
            return

        executor = CommandExecutor(working_dir=config.project_dir, dry_run=dry_run)
        Dispatcher(config, registry, executor).run_all(names or ["help"])

    except TaskNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        if e.suggestions:
            console.print(f"Did you mean: {escape(', '.join(e.suggestions))}?")
        console.print("Run 'tfmk help' to list tasks.")
        raise SystemExit(EXIT_USAGE) from None
    except MissingArgumentError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        console.print(f"Usage: {escape(e.usage)}")
        raise SystemExit(EXIT_USAGE) from None
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(e.message)}")
        raise SystemExit(EXIT_USAGE) from None
    except StepFailedError as e:
        console.print(f"\n[red]Error:[/red] {escape(e.message)}: exit {e.exit_code}")
        raise SystemExit(e.exit_code if e.exit_code > 0 else 1) from None
    except TfmkError as e:
        logger.debug("Task failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise SystemExit(EXIT_INTERRUPTED) from None


if __name__ == "__main__":
    cli()

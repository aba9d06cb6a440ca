"""Click CLI wiring and entry points for clipsaver."""

from __future__ import annotations

import json
import sys
from importlib import metadata

import click
from rich.console import Console

from src.clipsaver.cli_runtime import CLIAppError
from src.clipsaver.logging_context import LogContext
from src.clipsaver.preflight import collect_path_diagnostics
from src.clipsaver.runner import RunRequest, RunResult, default_run_dependencies, run

DIST_NAME = "clipsaver"


def _package_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0+unknown"


def _error_console() -> Console:
    return Console(stderr=True, highlight=False, soft_wrap=True)


def _run_cli_entry(
    *,
    directory: str | None,
    save_directory: str | None,
    verbosity: int,
    diagnose_paths: bool,
) -> None:
    """Execute the capture (or configuration write) with the provided options."""

    dependencies = default_run_dependencies()

    if diagnose_paths:
        try:
            diagnostics = collect_path_diagnostics(
                cli_directory=directory,
                config_dir=dependencies.config_dir,
                environ=dependencies.environ,
            )
        except CLIAppError as exc:
            _error_console().print(exc.rich_message)
            raise click.exceptions.Exit(exc.code) from exc
        click.echo(json.dumps(diagnostics, separators=(",", ":")))
        return

    request = RunRequest(
        directory=directory,
        save_directory=save_directory,
        log_context=LogContext(verbosity=verbosity, console=_error_console()),
    )
    try:
        result: RunResult = run(request, dependencies=dependencies)
    except CLIAppError as exc:
        _error_console().print(exc.rich_message)
        raise click.exceptions.Exit(exc.code) from exc

    if result.action == "configure":
        click.echo(f"Set save directory to {save_directory}")
        return
    click.echo(f"Saved image from clipboard to {result.path}")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-d",
    "--directory",
    "directory",
    default=None,
    help="Save into this directory for this run. Overrides the config file and CLIPSAVER_DIRECTORY.",
)
@click.option(
    "--save-directory",
    "save_directory",
    default=None,
    help="Persist the default save directory to the config file and exit without capturing.",
)
@click.option("-v", "--verbose", "verbose", count=True, help="Increase log detail (repeatable).")
@click.option("-q", "--quiet", "quiet", count=True, help="Decrease log detail (repeatable).")
@click.option(
    "--diagnose-paths",
    is_flag=True,
    help="Print the config path and resolved save directory as JSON, then exit.",
)
@click.version_option(version=_package_version(), prog_name=DIST_NAME)
def main(
    directory: str | None,
    save_directory: str | None,
    verbose: int,
    quiet: int,
    diagnose_paths: bool,
) -> None:
    """Save the image currently on the clipboard as a timestamped PNG."""

    try:
        _run_cli_entry(
            directory=directory,
            save_directory=save_directory,
            verbosity=verbose - quiet,
            diagnose_paths=diagnose_paths,
        )
    except (SystemExit, click.exceptions.Exit):
        raise
    except Exception:  # noqa: BLE001
        _error_console().print_exception()
        sys.exit(1)


cli = main

__all__ = ["cli", "main"]

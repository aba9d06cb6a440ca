from __future__ import annotations

import logging

from rich.markup import escape

from src.clipsaver.cli_runtime import STEP_CONFIGURE, CLIAppError
from src.clipsaver.orchestration.state import CoordinatorContext, RunResult
from src.clipsaver.preflight import resolve_config_path
from src.config_loader import write_config
from src.datatypes import AppConfig

logger = logging.getLogger(__name__)


class ConfigureDirectoryPhase:
    """Persist ``--save-directory`` and finish the run without capturing."""

    def execute(self, context: CoordinatorContext) -> None:
        directory = context.request.save_directory
        if directory is None:
            return

        config_path = resolve_config_path(context.dependencies.config_dir)
        if not directory.strip():
            message = "Failed to save configuration: save directory must not be empty"
            raise CLIAppError(
                message,
                rich_message=f"[red]{escape(message)}[/red]",
                step=STEP_CONFIGURE,
            )

        logger.debug("Setting configuration in %s", config_path)
        try:
            write_config(config_path, AppConfig(directory=directory))
        except OSError as exc:
            detail = exc.strerror or str(exc)
            raise CLIAppError(
                f"Failed to save configuration to {config_path}: {detail}",
                rich_message=(
                    "[red]Failed to save configuration:[/red] "
                    f"{escape(str(config_path))} ({escape(detail)})"
                ),
                step=STEP_CONFIGURE,
            ) from exc

        context.result = RunResult(action="configure", path=config_path)

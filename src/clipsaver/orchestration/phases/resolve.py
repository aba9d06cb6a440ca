from __future__ import annotations

import logging

from rich.markup import escape

from src.clipsaver.cli_runtime import STEP_DIRECTORY, CLIAppError
from src.clipsaver.directory import PathExpansionError, build_override_providers, resolve_directory
from src.clipsaver.orchestration.state import CoordinatorContext

logger = logging.getLogger(__name__)


class ResolvePhase:
    def execute(self, context: CoordinatorContext) -> None:
        preflight = context.preflight
        if preflight is None:
            raise RuntimeError("ResolvePhase requires ConfigPhase to run first.")
        environ = context.dependencies.environ
        providers = build_override_providers(
            context.request.directory,
            preflight.file_config,
            environ,
        )
        try:
            resolved = resolve_directory(providers, environ=environ)
        except PathExpansionError as exc:
            raise CLIAppError(
                f"Could not resolve save directory: {exc}",
                rich_message=f"[red]Could not resolve save directory:[/red] {escape(str(exc))}",
                step=STEP_DIRECTORY,
            ) from exc

        logger.info("Saving to directory: %s (from %s)", resolved.path, resolved.source)
        context.directory = resolved

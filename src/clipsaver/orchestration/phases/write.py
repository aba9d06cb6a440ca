from __future__ import annotations

import logging

from rich.markup import escape

from src.clipsaver.cli_runtime import STEP_WRITE, CLIAppError
from src.clipsaver.encoders import WriteError, write_png
from src.clipsaver.naming import save_path
from src.clipsaver.orchestration.state import CoordinatorContext, RunResult

logger = logging.getLogger(__name__)


class WritePhase:
    def execute(self, context: CoordinatorContext) -> None:
        directory = context.directory
        image = context.image
        if directory is None or image is None:
            raise RuntimeError("WritePhase requires ResolvePhase and ClipboardPhase to run first.")

        target = save_path(directory.path, context.dependencies.clock())
        try:
            write_png(image, target)
        except WriteError as exc:
            raise CLIAppError(
                f"Failed to write image: {exc}",
                rich_message=f"[red]Failed to write image:[/red] {escape(str(exc))}",
                step=STEP_WRITE,
            ) from exc

        context.result = RunResult(
            action="capture",
            path=target,
            directory=directory.path,
            directory_source=directory.source,
            image_size=image.size,
        )

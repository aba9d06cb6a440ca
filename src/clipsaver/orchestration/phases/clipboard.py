from __future__ import annotations

import logging

from rich.markup import escape

from src.clipsaver.cli_runtime import STEP_CLIPBOARD, STEP_VALIDATION, CLIAppError
from src.clipsaver.clipboard import (
    ClipboardUnavailable,
    ImageValidationError,
    NoImageOnClipboard,
)
from src.clipsaver.orchestration.state import CoordinatorContext

logger = logging.getLogger(__name__)


def _wrap(title: str, exc: Exception, step: str) -> CLIAppError:
    return CLIAppError(
        f"{title}: {exc}",
        rich_message=f"[red]{title}:[/red] {escape(str(exc))}",
        step=step,
    )


class ClipboardPhase:
    def execute(self, context: CoordinatorContext) -> None:
        try:
            image = context.dependencies.clipboard_reader()
        except ClipboardUnavailable as exc:
            raise _wrap("Clipboard unavailable", exc, STEP_CLIPBOARD) from exc
        except NoImageOnClipboard as exc:
            raise _wrap("No image on clipboard", exc, STEP_CLIPBOARD) from exc
        except ImageValidationError as exc:
            raise _wrap("Invalid clipboard image", exc, STEP_VALIDATION) from exc

        logger.debug("Read %sx%s image from clipboard", image.width, image.height)
        context.image = image

"""Public shim exposing the clipsaver CLI and library surface."""

from __future__ import annotations

from typing import Callable, cast

import src.clipsaver.cli_entry as _cli_entry
from src.clipsaver import runner
from src.clipsaver.cli_runtime import CLIAppError
from src.clipsaver.clipboard import (
    ClipboardUnavailable,
    ImageValidationError,
    NoImageOnClipboard,
    PixelImage,
    read_clipboard_image,
)
from src.clipsaver.directory import PathExpansionError, resolve_save_directory
from src.clipsaver.encoders import WriteError
from src.clipsaver.logging_context import LogContext
from src.clipsaver.naming import prepare_filename
from src.config_loader import ConfigError

RunResult = runner.RunResult
RunRequest = runner.RunRequest
RunDependencies = runner.RunDependencies

__all__ = (
    "run_cli",
    "main",
    "RunRequest",
    "RunResult",
    "RunDependencies",
    "CLIAppError",
    "ConfigError",
    "PathExpansionError",
    "ClipboardUnavailable",
    "NoImageOnClipboard",
    "ImageValidationError",
    "WriteError",
    "PixelImage",
    "read_clipboard_image",
    "resolve_save_directory",
    "prepare_filename",
)


def run_cli(
    directory: str | None = None,
    *,
    save_directory: str | None = None,
    verbosity: int = 0,
    dependencies: runner.RunDependencies | None = None,
) -> RunResult:
    """Delegate to the shared runner module."""
    request = RunRequest(
        directory=directory,
        save_directory=save_directory,
        log_context=LogContext(verbosity=verbosity),
    )
    return runner.run(request, dependencies=dependencies)


main = _cli_entry.main
cli = getattr(_cli_entry, "cli", main)


if __name__ == "__main__":
    _entry_point = cast(Callable[[], None], main)
    _entry_point()

"""Runtime data structures and CLI helpers shared between Click wiring and the runner."""

from __future__ import annotations

from typing import Final, Optional

__all__ = [
    "CLIAppError",
    "STEP_CONFIGURE",
    "STEP_CONFIG",
    "STEP_DIRECTORY",
    "STEP_CLIPBOARD",
    "STEP_VALIDATION",
    "STEP_WRITE",
]

STEP_CONFIGURE: Final[str] = "configure"
STEP_CONFIG: Final[str] = "config"
STEP_DIRECTORY: Final[str] = "directory"
STEP_CLIPBOARD: Final[str] = "clipboard"
STEP_VALIDATION: Final[str] = "validation"
STEP_WRITE: Final[str] = "write"


class CLIAppError(RuntimeError):
    """Raised when the CLI cannot complete its work."""

    def __init__(
        self,
        message: str,
        *,
        code: int = 1,
        rich_message: Optional[str] = None,
        step: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.rich_message = rich_message or message
        self.step = step

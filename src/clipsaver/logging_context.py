"""Verbosity-driven logging setup passed explicitly to the runner."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Final, Sequence

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAMES: Final[tuple[str, ...]] = ("src.clipsaver", "src.config_loader")
LEVEL_OFF: Final[int] = logging.CRITICAL + 1

_VERBOSITY_LEVELS: Final[dict[int, int]] = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
}


@dataclass(frozen=True)
class LogContext:
    """Log verbosity for one invocation.

    ``verbosity`` is the net count of ``-v`` minus ``-q`` flags; zero logs errors only.
    """

    verbosity: int = 0
    logger_names: Sequence[str] = LOGGER_NAMES
    console: Console | None = field(default=None, compare=False)

    @property
    def level(self) -> int:
        if self.verbosity < 0:
            return LEVEL_OFF
        if self.verbosity >= 3:
            return logging.DEBUG
        return _VERBOSITY_LEVELS[self.verbosity]

    def install(self) -> Callable[[], None]:
        """Attach a RichHandler to the package loggers and return an uninstaller."""

        console = self.console or Console(stderr=True)
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
        handler.setLevel(self.level)
        previous: list[tuple[logging.Logger, int]] = []
        for name in self.logger_names:
            target = logging.getLogger(name)
            previous.append((target, target.level))
            target.setLevel(self.level)
            target.addHandler(handler)

        def _uninstall() -> None:
            for target, level in previous:
                target.removeHandler(handler)
                target.setLevel(level)

        return _uninstall

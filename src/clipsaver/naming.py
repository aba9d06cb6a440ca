"""Timestamped output filenames."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Final

FILENAME_PREFIX: Final[str] = "Clipboard"
TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d_%H.%M.%S"
FILE_SUFFIX: Final[str] = ".png"


def prepare_filename(moment: datetime) -> str:
    """Return ``Clipboard YYYY-MM-DD_HH.MM.SS.png`` for *moment* (second granularity)."""

    return f"{FILENAME_PREFIX} {moment.strftime(TIMESTAMP_FORMAT)}{FILE_SUFFIX}"


def save_path(directory: Path, moment: datetime) -> Path:
    """Join the timestamped filename to *directory*.

    Captures within the same second map to the same path; the later write replaces the earlier.
    """

    return directory / prepare_filename(moment)

"""PNG encoding and writing of captured clipboard images."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Final

from src.clipsaver.clipboard import PixelImage

logger = logging.getLogger(__name__)

DEFAULT_PNG_COMPRESS_LEVEL: Final[int] = 6

__all__ = [
    "DEFAULT_PNG_COMPRESS_LEVEL",
    "WriteError",
    "encode_png",
    "ensure_directory",
    "write_png",
]


class WriteError(OSError):
    """Raised when the output directory or PNG file cannot be written."""


def encode_png(image: PixelImage, *, compress_level: int = DEFAULT_PNG_COMPRESS_LEVEL) -> bytes:
    """Encode *image* as PNG entirely in memory."""

    buffer = io.BytesIO()
    try:
        image.to_pil().save(buffer, format="PNG", compress_level=compress_level)
    except (OSError, ValueError) as exc:
        raise WriteError(f"Could not encode PNG: {exc}") from exc
    return buffer.getvalue()


def ensure_directory(directory: Path) -> None:
    """Create *directory* and any missing parents."""

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except FileExistsError as exc:
        raise WriteError(f"Save directory {directory} exists and is not a directory") from exc
    except (OSError, ValueError) as exc:
        detail = getattr(exc, "strerror", None) or str(exc)
        raise WriteError(f"Could not create directory {directory}: {detail}") from exc


def write_png(image: PixelImage, path: Path) -> Path:
    """Encode *image* and write it to *path*, creating the parent directory first.

    The file is opened only once encoding has succeeded, so a failed encode leaves nothing on disk.
    """

    ensure_directory(path.parent)
    payload = encode_png(image)
    logger.info("Saving image to %s", path)
    try:
        path.write_bytes(payload)
    except (OSError, ValueError) as exc:
        detail = getattr(exc, "strerror", None) or str(exc)
        raise WriteError(f"Could not write {path}: {detail}") from exc
    return path

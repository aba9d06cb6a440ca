"""Clipboard access and validation of the grabbed image into an RGBA buffer."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Final, Iterator, Optional, Protocol

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

RGBA_CHANNELS: Final[int] = 4
MAX_DIMENSION: Final[int] = 2**32 - 1

__all__ = [
    "ClipboardError",
    "ClipboardUnavailable",
    "NoImageOnClipboard",
    "ImageValidationError",
    "PixelImage",
    "ClipboardBackend",
    "PillowClipboardBackend",
    "ClipboardSession",
    "clipboard_session",
    "read_clipboard_image",
]


class ClipboardError(RuntimeError):
    """Base class for clipboard read failures."""


class ClipboardUnavailable(ClipboardError):
    """Raised when the clipboard service cannot be reached or access is denied."""


class NoImageOnClipboard(ClipboardError):
    """Raised when the clipboard holds no image content."""


class ImageValidationError(ClipboardError):
    """Raised when the clipboard image dimensions or buffer size are inconsistent."""


def _check_dimension(value: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ImageValidationError(f"Image {label} must be an integer, got {value!r}")
    if value <= 0:
        raise ImageValidationError(f"Image {label} must be positive, got {value}")
    if value > MAX_DIMENSION:
        raise ImageValidationError(f"Image {label} {value} does not fit in 32 bits")
    return value


@dataclass(frozen=True)
class PixelImage:
    """Width x height RGBA image with one byte per channel, not premultiplied."""

    width: int
    height: int
    data: bytes

    @classmethod
    def from_raw(cls, width: int, height: int, data: bytes | bytearray | memoryview) -> "PixelImage":
        """Validate a raw RGBA buffer; its length must be exactly ``width * height * 4``."""

        width = _check_dimension(width, "width")
        height = _check_dimension(height, "height")
        buffer = bytes(data)
        expected = width * height * RGBA_CHANNELS
        if len(buffer) != expected:
            raise ImageValidationError(
                f"Could not parse image: expected {expected} bytes for {width}x{height} RGBA, "
                f"got {len(buffer)}"
            )
        return cls(width=width, height=height, data=buffer)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "PixelImage":
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return cls.from_raw(rgba.width, rgba.height, rgba.tobytes())

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def to_pil(self) -> Image.Image:
        return Image.frombytes("RGBA", self.size, self.data)


class ClipboardBackend(Protocol):
    """System clipboard adapter; ``grab`` returns a PIL image, a file list, or ``None``."""

    def acquire(self) -> None: ...

    def grab(self) -> Any: ...

    def release(self) -> None: ...


class PillowClipboardBackend:
    """Clipboard backend built on :func:`PIL.ImageGrab.grabclipboard`."""

    def __init__(self) -> None:
        self._grabclipboard: Any = None

    def acquire(self) -> None:
        try:
            from PIL import ImageGrab
        except ImportError as exc:
            raise ClipboardUnavailable(f"Clipboard support is unavailable: {exc}") from exc
        self._grabclipboard = ImageGrab.grabclipboard

    def grab(self) -> Any:
        if self._grabclipboard is None:
            raise ClipboardUnavailable("Clipboard has not been acquired")
        return self._grabclipboard()

    def release(self) -> None:
        self._grabclipboard = None


class ClipboardSession:
    """Handle to an acquired clipboard; valid only inside :func:`clipboard_session`."""

    def __init__(self, backend: ClipboardBackend) -> None:
        self._backend = backend
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def _close(self) -> None:
        self._open = False

    def get_image(self) -> PixelImage:
        """Return the clipboard content as a validated RGBA :class:`PixelImage`."""

        if not self._open:
            raise ClipboardUnavailable("Clipboard session has already been released")
        try:
            content = self._backend.grab()
        except UnidentifiedImageError as exc:
            raise NoImageOnClipboard(f"Clipboard content is not a readable image: {exc}") from exc
        except (OSError, NotImplementedError) as exc:
            raise ClipboardUnavailable(f"Could not read clipboard: {exc}") from exc

        if content is None:
            raise NoImageOnClipboard("The clipboard does not contain an image")
        if isinstance(content, list):
            raise NoImageOnClipboard("The clipboard contains a file list, not image data")
        if not isinstance(content, Image.Image):
            raise NoImageOnClipboard(
                f"The clipboard does not contain an image (got {type(content).__name__})"
            )
        logger.debug("Clipboard image %sx%s mode=%s", content.width, content.height, content.mode)
        # Pillow decodes lazily, so truncated pixel data only surfaces here.
        try:
            return PixelImage.from_pil(content)
        except UnidentifiedImageError as exc:
            raise NoImageOnClipboard(f"Clipboard content is not a readable image: {exc}") from exc
        except OSError as exc:
            raise ImageValidationError(f"Could not decode clipboard image: {exc}") from exc


@contextmanager
def clipboard_session(backend: Optional[ClipboardBackend] = None) -> Iterator[ClipboardSession]:
    """Acquire the clipboard, yield a session, and release it on every exit path."""

    active = backend if backend is not None else PillowClipboardBackend()
    try:
        active.acquire()
    except (OSError, NotImplementedError) as exc:
        raise ClipboardUnavailable(f"Attempted to get clipboard: {exc}") from exc
    logger.debug("Clipboard acquired")
    session = ClipboardSession(active)
    try:
        yield session
    finally:
        session._close()  # pyright: ignore[reportPrivateUsage]
        active.release()
        logger.debug("Clipboard released")


def read_clipboard_image(backend: Optional[ClipboardBackend] = None) -> PixelImage:
    """Read the current clipboard image in a single query, without polling or retries."""

    with clipboard_session(backend) as session:
        return session.get_image()

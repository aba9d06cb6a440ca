from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Literal, Mapping, Optional

from src.clipsaver.clipboard import PixelImage
from src.clipsaver.directory import ResolvedDirectory
from src.clipsaver.logging_context import LogContext
from src.clipsaver.preflight import PreflightResult

Clock = Callable[[], datetime]
ClipboardReader = Callable[[], PixelImage]
RunAction = Literal["capture", "configure"]


@dataclass
class RunRequest:
    directory: str | None = None
    save_directory: str | None = None
    log_context: LogContext = field(default_factory=LogContext)


@dataclass
class RunResult:
    action: RunAction
    path: Path
    directory: Optional[Path] = None
    directory_source: Optional[str] = None
    image_size: Optional[tuple[int, int]] = None


@dataclass(slots=True)
class RunDependencies:
    """Collaborators the runner reaches outside the process through."""

    clipboard_reader: ClipboardReader
    clock: Clock
    environ: Mapping[str, str]
    config_dir: Path


def environ_snapshot() -> Mapping[str, str]:
    return dict(os.environ)


@dataclass
class CoordinatorContext:
    """
    State container for the WorkflowCoordinator execution pipeline.
    Holds all state that persists between execution phases.
    """
    request: RunRequest
    dependencies: RunDependencies

    # ConfigPhase
    preflight: PreflightResult | None = None

    # ResolvePhase
    directory: ResolvedDirectory | None = None

    # ClipboardPhase
    image: PixelImage | None = None

    # WritePhase / ConfigureDirectoryPhase
    result: RunResult | None = None

from __future__ import annotations

from src.clipsaver.orchestration.coordinator import WorkflowCoordinator, default_run_dependencies
from src.clipsaver.orchestration.state import (
    RunDependencies,
    RunRequest,
    RunResult,
)

__all__ = [
    "RunDependencies",
    "RunRequest",
    "RunResult",
    "default_run_dependencies",
    "run",
]


def run(request: RunRequest, *, dependencies: RunDependencies | None = None) -> RunResult:
    """
    Capture the clipboard image, or persist ``--save-directory``.

    This function delegates the execution to the WorkflowCoordinator.
    """
    coordinator = WorkflowCoordinator(dependencies)
    return coordinator.execute(request)

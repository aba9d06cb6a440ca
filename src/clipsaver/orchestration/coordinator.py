from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Mapping

from src.clipsaver.cli_runtime import CLIAppError
from src.clipsaver.clipboard import read_clipboard_image
from src.clipsaver.orchestration.phases.base import Phase
from src.clipsaver.orchestration.phases.clipboard import ClipboardPhase
from src.clipsaver.orchestration.phases.config import ConfigPhase
from src.clipsaver.orchestration.phases.configure import ConfigureDirectoryPhase
from src.clipsaver.orchestration.phases.resolve import ResolvePhase
from src.clipsaver.orchestration.phases.write import WritePhase
from src.clipsaver.orchestration.state import (
    ClipboardReader,
    Clock,
    CoordinatorContext,
    RunDependencies,
    RunRequest,
    RunResult,
    environ_snapshot,
)
from src.clipsaver.preflight import resolve_config_dir

logger = logging.getLogger('src.clipsaver')


def default_run_dependencies(
    *,
    clipboard_reader: ClipboardReader | None = None,
    clock: Clock | None = None,
    environ: Mapping[str, str] | None = None,
    config_dir: Path | None = None,
) -> RunDependencies:
    """
    Build the default collaborator bundle used by :func:`run`.

    Tests pass a fake clipboard reader, a fixed clock, and a temporary config directory.
    """

    env = environ if environ is not None else environ_snapshot()
    return RunDependencies(
        clipboard_reader=clipboard_reader or read_clipboard_image,
        clock=clock or datetime.now,
        environ=env,
        config_dir=config_dir or resolve_config_dir(env),
    )


class WorkflowCoordinator:
    def __init__(self, dependencies: RunDependencies | None = None):
        self.dependencies = dependencies

    def execute(self, request: RunRequest) -> RunResult:
        """Run the capture phases in order, stopping at the first failure."""
        uninstall = request.log_context.install()
        try:
            dependencies = self.dependencies or default_run_dependencies()
            context = CoordinatorContext(request=request, dependencies=dependencies)

            pipeline: list[Phase] = [
                ConfigureDirectoryPhase(),
                ConfigPhase(),
                ResolvePhase(),
                ClipboardPhase(),
                WritePhase(),
            ]

            for phase in pipeline:
                # ConfigureDirectoryPhase finishes the run early
                if context.result is not None:
                    break

                phase.execute(context)
        except CLIAppError as exc:
            logger.debug("Failed to save clipboard at step %s", exc.step, exc_info=True)
            raise
        finally:
            uninstall()

        if context.result is None:
            raise RuntimeError("Workflow finished without producing a result.")

        return context.result

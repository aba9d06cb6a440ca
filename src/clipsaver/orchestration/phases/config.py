from __future__ import annotations

import logging

from src.clipsaver.orchestration.state import CoordinatorContext
from src.clipsaver.preflight import prepare_preflight

logger = logging.getLogger(__name__)


class ConfigPhase:
    def execute(self, context: CoordinatorContext) -> None:
        deps = context.dependencies
        preflight = prepare_preflight(config_dir=deps.config_dir)
        for warning in preflight.warnings:
            logger.debug(warning)
        context.preflight = preflight

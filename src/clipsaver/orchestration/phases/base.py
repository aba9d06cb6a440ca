from typing import Protocol

from src.clipsaver.orchestration.state import CoordinatorContext


class Phase(Protocol):
    def execute(self, context: CoordinatorContext) -> None:
        """Execute this phase, mutating the context."""
        ...

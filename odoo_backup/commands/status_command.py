from __future__ import annotations

from ..core.orchestrator import Orchestrator
from ..core.registry import DatabaseRegistry
from .base import Command, print_failure


class StatusCommand(Command):
    def __init__(
        self,
        registry: DatabaseRegistry,
        orchestrator: Orchestrator,
        *,
        verbose: bool = False,
    ) -> None:
        self._registry = registry
        self._orchestrator = orchestrator
        self._verbose = verbose

    def run(self) -> int:
        print("Docker container status:")
        unknown = 0
        for status in self._orchestrator.status_all(self._registry):
            config = status.config
            label = f"{config.name} ({config.container_name})"
            if status.error is not None:
                unknown += 1
                print_failure(f"{label} - Unknown", status.error, self._verbose)
                continue
            state = "Running" if status.running else "Stopped"
            print(f"  - {label} - {state}")
        return 1 if unknown else 0

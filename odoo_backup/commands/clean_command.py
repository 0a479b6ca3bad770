from __future__ import annotations

from pathlib import Path

from ..core.errors import DatabaseNotFound
from ..core.orchestrator import Orchestrator
from ..core.registry import DatabaseRegistry
from .base import Command, print_failure


class CleanCommand(Command):
    def __init__(
        self,
        registry: DatabaseRegistry,
        orchestrator: Orchestrator,
        backup_root: Path,
        *,
        client: str | None = None,
        verbose: bool = False,
    ) -> None:
        self._registry = registry
        self._orchestrator = orchestrator
        self._backup_root = backup_root
        self._client = client
        self._verbose = verbose

    def run(self) -> int:
        if self._client is None:
            report = self._orchestrator.clean_all(self._registry, self._backup_root)
        else:
            try:
                report = self._orchestrator.clean_one(
                    self._registry, self._client, self._backup_root
                )
            except DatabaseNotFound as exc:
                print(f"Error: {exc}")
                return 1

        total = 0
        for outcome in report.outcomes:
            if outcome.error is not None:
                print_failure(outcome.config.name, outcome.error, self._verbose)
                continue
            if outcome.sweep is None:
                continue
            total += len(outcome.sweep.removed)
            print(
                f"Cleaned up {len(outcome.sweep.removed)} old backup files "
                f"for {outcome.config.name}"
            )
            for failure in outcome.sweep.failures:
                print_failure(outcome.config.name, failure, self._verbose)

        if self._client is None:
            print(f"Cleaned up {total} old backup files total")
        return 0 if report.ok else 1

from __future__ import annotations

from pathlib import Path

from ..core.errors import DatabaseNotFound
from ..core.orchestrator import Orchestrator, RunReport
from ..core.registry import DatabaseRegistry
from .base import Command, print_failure


class BackupCommand(Command):
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
            print(f"Backing up {len(self._registry)} configured databases")
            report = self._orchestrator.run_all(self._registry, self._backup_root)
        else:
            try:
                report = self._orchestrator.run_one(
                    self._registry, self._client, self._backup_root
                )
            except DatabaseNotFound as exc:
                print(f"Error: {exc}")
                return 1

        self._print_report(report)
        return 0 if report.ok else 1

    def _print_report(self, report: RunReport) -> None:
        completed = sum(1 for outcome in report.outcomes if outcome.backup is not None)
        if completed:
            print(f"Completed {completed} backups:")
        for outcome in report.outcomes:
            backup = outcome.backup
            if backup is None:
                continue
            print(f"  - {outcome.config.name}: {backup.record.host_path}")
            if backup.cleanup_warning is not None:
                print(f"    warning: {backup.cleanup_warning}")
            if outcome.sweep is not None and outcome.sweep.removed:
                print(f"    removed {len(outcome.sweep.removed)} old backups")

        failed = report.failed
        if failed:
            print(f"Failed {len(failed)} of {len(report.outcomes)} databases:")
        for outcome in failed:
            if outcome.error is not None:
                print_failure(outcome.config.name, outcome.error, self._verbose)
            if outcome.sweep is not None:
                for failure in outcome.sweep.failures:
                    print_failure(outcome.config.name, failure, self._verbose)

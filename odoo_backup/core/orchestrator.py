from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .backup_executor import BackupExecutor, BackupResult
from .database_config import DatabaseConfig
from .errors import BackupError
from .protocols import ClockProtocol, ContainerRuntimeProtocol
from .registry import DatabaseRegistry
from .retention import RetentionManager, SweepResult

logger = logging.getLogger(__name__)


@dataclass
class DatabaseOutcome:
    config: DatabaseConfig
    backup: BackupResult | None = None
    sweep: SweepResult | None = None
    error: BackupError | None = None

    @property
    def ok(self) -> bool:
        if self.error is not None:
            return False
        return self.sweep is None or not self.sweep.failures


@dataclass
class RunReport:
    outcomes: list[DatabaseOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[DatabaseOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class ContainerStatus:
    config: DatabaseConfig
    running: bool
    error: BackupError | None = None


class Orchestrator:
    """Runs the backup and retention pipeline across configured databases.

    Databases are handled one at a time in registry order. A failure on one
    database is recorded on its outcome and never stops the others.
    """

    def __init__(
        self,
        executor: BackupExecutor,
        retention: RetentionManager,
        runtime: ContainerRuntimeProtocol,
        clock: ClockProtocol,
    ) -> None:
        self._executor = executor
        self._retention = retention
        self._runtime = runtime
        self._clock = clock

    def run_all(self, registry: DatabaseRegistry, backup_root: Path) -> RunReport:
        return RunReport([self._backup(config, backup_root) for config in registry])

    def run_one(self, registry: DatabaseRegistry, name: str, backup_root: Path) -> RunReport:
        config = registry.find_by_name(name)
        return RunReport([self._backup(config, backup_root)])

    def clean_all(self, registry: DatabaseRegistry, backup_root: Path) -> RunReport:
        return RunReport([self._clean(config, backup_root) for config in registry])

    def clean_one(self, registry: DatabaseRegistry, name: str, backup_root: Path) -> RunReport:
        config = registry.find_by_name(name)
        return RunReport([self._clean(config, backup_root)])

    def status_all(self, registry: DatabaseRegistry) -> list[ContainerStatus]:
        statuses: list[ContainerStatus] = []
        for config in registry:
            try:
                running = self._runtime.is_running(config.container_name)
            except BackupError as exc:
                logger.warning("Could not query container %s: %s", config.container_name, exc)
                statuses.append(ContainerStatus(config, running=False, error=exc))
                continue
            statuses.append(ContainerStatus(config, running=running))
        return statuses

    def _backup(self, config: DatabaseConfig, backup_root: Path) -> DatabaseOutcome:
        outcome = DatabaseOutcome(config)
        try:
            outcome.backup = self._executor.execute(config, backup_root)
        except BackupError as exc:
            logger.error("Failed to backup %s: %s", config.name, exc)
            outcome.error = exc
            return outcome
        # retention only runs once a fresh artifact exists
        return self._sweep(outcome, backup_root)

    def _clean(self, config: DatabaseConfig, backup_root: Path) -> DatabaseOutcome:
        return self._sweep(DatabaseOutcome(config), backup_root)

    def _sweep(self, outcome: DatabaseOutcome, backup_root: Path) -> DatabaseOutcome:
        try:
            outcome.sweep = self._retention.sweep(backup_root, outcome.config, self._clock.now())
        except OSError as exc:
            logger.error("Failed to clean backups for %s: %s", outcome.config.name, exc)
            outcome.error = BackupError(f"Failed to read backup directory: {exc}")
            outcome.error.__cause__ = exc
        return outcome

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from .backup_record import BackupRecord, record_for
from .database_config import DatabaseConfig
from .errors import RetentionError

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    removed: list[BackupRecord] = field(default_factory=list)
    failures: list[RetentionError] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)


class RetentionManager:
    """Prunes aged artifacts from the per-database host directories.

    Records are rebuilt from the directory listing on every call. Only files
    named ``{database_name}_{YYYYMMDDHHMMSS}.{zip|dump}`` are considered;
    anything else in the directory is left alone.
    """

    def sweep(self, backup_root: Path, config: DatabaseConfig, now: datetime) -> SweepResult:
        if now.tzinfo is None:
            raise ValueError("now must be timezone-aware")

        result = SweepResult()
        directory = backup_root / config.database_name
        if not directory.is_dir():
            logger.info("No backup directory for %s at %s", config.name, directory)
            return result

        max_age = timedelta(days=config.retention_days)
        for path in self._candidates(directory):
            record = record_for(path, config.database_name)
            if record is None:
                logger.debug("Skipping unrecognized file %s", path)
                result.skipped.append(path)
                continue
            if now - record.created_at <= max_age:
                continue
            try:
                path.unlink()
            except OSError as exc:
                failure = RetentionError(path, exc.strerror or str(exc))
                failure.__cause__ = exc
                logger.warning("%s", failure)
                result.failures.append(failure)
                continue
            logger.info("Deleted old backup: %s", path)
            result.removed.append(record)

        logger.info(
            "Cleaned up %d old backup files for %s (%d failures)",
            len(result.removed),
            config.name,
            len(result.failures),
        )
        return result

    def list_backups(
        self,
        backup_root: Path,
        database_name: str | None = None,
    ) -> list[BackupRecord]:
        if database_name is not None:
            database_names = [database_name]
        elif backup_root.is_dir():
            database_names = sorted(
                entry.name
                for entry in backup_root.iterdir()
                if entry.is_dir() and not entry.is_symlink()
            )
        else:
            database_names = []

        records: list[BackupRecord] = []
        for name in database_names:
            directory = backup_root / name
            if not directory.is_dir():
                continue
            for path in self._candidates(directory):
                record = record_for(path, name)
                if record is not None:
                    records.append(record)

        records.sort(key=lambda item: (item.created_at, item.host_path.name), reverse=True)
        return records

    def _candidates(self, directory: Path) -> list[Path]:
        return sorted(
            path
            for path in directory.iterdir()
            if path.is_file() and not path.is_symlink()
        )

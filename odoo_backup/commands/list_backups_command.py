from __future__ import annotations

from pathlib import Path

from ..core.retention import RetentionManager
from .base import Command


class ListBackupsCommand(Command):
    def __init__(
        self,
        retention: RetentionManager,
        backup_root: Path,
        *,
        database: str | None = None,
    ) -> None:
        self._retention = retention
        self._backup_root = backup_root
        self._database = database

    def run(self) -> int:
        records = self._retention.list_backups(self._backup_root, self._database)
        if not records:
            print("No backup files found")
            return 0

        print("Backup files:")
        for record in records:
            created = record.created_at.strftime("%Y-%m-%d %H:%M:%S UTC")
            print(f"  - {record.host_path.name} ({record.database_name}, {created})")
        return 0

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BackupFormat(str, Enum):
    ZIP = "zip"
    DUMP = "dump"

    @property
    def extension(self) -> str:
        return self.value


@dataclass(frozen=True)
class DatabaseConfig:
    name: str
    database_name: str
    url: str
    container_name: str
    master_password: str = field(repr=False)
    backup_format: BackupFormat
    output_path: str
    retention_days: int

    @property
    def backup_endpoint(self) -> str:
        return f"{self.url.rstrip('/')}/web/database/backup"

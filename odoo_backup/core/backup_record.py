from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .database_config import BackupFormat

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


@dataclass(frozen=True)
class BackupRecord:
    host_path: Path
    database_name: str
    created_at: datetime


def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def build_filename(database_name: str, backup_format: BackupFormat, moment: datetime) -> str:
    return f"{database_name}_{format_timestamp(moment)}.{backup_format.extension}"


def _pattern(database_name: str) -> re.Pattern[str]:
    extensions = "|".join(re.escape(item.extension) for item in BackupFormat)
    return re.compile(rf"{re.escape(database_name)}_([0-9]{{14}})\.(?:{extensions})")


def parse_filename(database_name: str, filename: str) -> datetime | None:
    """Return the UTC creation time embedded in a backup filename.

    ``None`` means the name does not follow ``{database_name}_{timestamp}.{ext}``
    or the timestamp is not a real calendar moment.
    """
    match = _pattern(database_name).fullmatch(filename)
    if not match:
        return None
    try:
        parsed = datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def record_for(path: Path, database_name: str) -> BackupRecord | None:
    created_at = parse_filename(database_name, path.name)
    if created_at is None:
        return None
    return BackupRecord(host_path=path, database_name=database_name, created_at=created_at)

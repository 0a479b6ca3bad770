from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from .database_config import BackupFormat, DatabaseConfig
from .errors import ConfigError, DatabaseNotFound

REQUIRED_TEXT_FIELDS = (
    "name",
    "database_name",
    "url",
    "container_name",
    "master_password",
    "backup_format",
    "output_path",
)


def entry_label(index: int, raw: Any) -> str:
    name = raw.get("name") if isinstance(raw, Mapping) else None
    if isinstance(name, str) and name.strip():
        return f"Database {index} ({name})"
    return f"Database {index}"


class DatabaseRegistry:
    """Validated, ordered set of the databases the tool operates on.

    Entries keep the order of the configuration file. Both ``name`` and
    ``database_name`` are unique across the set: backups for one
    ``database_name`` share a host directory and a retention sweep, so two
    entries with the same value would prune each other's artifacts.
    """

    def __init__(self, configs: Sequence[DatabaseConfig]) -> None:
        self._configs = tuple(configs)

    @classmethod
    def load(cls, raw_configs: Sequence[Any]) -> DatabaseRegistry:
        if not raw_configs:
            raise ConfigError("No databases configured")

        configs: list[DatabaseConfig] = []
        seen_names: set[str] = set()
        seen_databases: set[str] = set()
        for index, raw in enumerate(raw_configs):
            config = cls._build(index, raw)
            label = entry_label(index, raw)
            if config.name in seen_names:
                raise ConfigError(f"{label}: duplicate name '{config.name}'")
            if config.database_name in seen_databases:
                raise ConfigError(
                    f"{label}: duplicate database_name '{config.database_name}'"
                )
            seen_names.add(config.name)
            seen_databases.add(config.database_name)
            configs.append(config)
        return cls(configs)

    def __iter__(self) -> Iterator[DatabaseConfig]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    @property
    def configs(self) -> tuple[DatabaseConfig, ...]:
        return self._configs

    def find_by_name(self, name: str) -> DatabaseConfig:
        for config in self._configs:
            if config.name == name:
                return config
        raise DatabaseNotFound(name)

    def find_by_database_name(self, database_name: str) -> DatabaseConfig:
        for config in self._configs:
            if config.database_name == database_name:
                return config
        raise DatabaseNotFound(database_name)

    @classmethod
    def _build(cls, index: int, raw: Any) -> DatabaseConfig:
        label = entry_label(index, raw)
        if not isinstance(raw, Mapping):
            raise ConfigError(f"{label}: entry must be an object")

        missing = [key for key in REQUIRED_TEXT_FIELDS if key not in raw]
        if "retention_days" not in raw:
            missing.append("retention_days")
        if missing:
            raise ConfigError(f"{label}: missing required fields: {', '.join(missing)}")

        for key in REQUIRED_TEXT_FIELDS:
            value = raw[key]
            if not isinstance(value, str):
                raise ConfigError(f"{label}: {key} must be a string")
            if not value.strip():
                raise ConfigError(f"{label}: {key} cannot be empty")

        try:
            backup_format = BackupFormat(raw["backup_format"])
        except ValueError:
            raise ConfigError(
                f"{label}: backup_format must be 'zip' or 'dump'"
            ) from None

        retention_days = raw["retention_days"]
        if isinstance(retention_days, bool) or not isinstance(retention_days, int):
            raise ConfigError(f"{label}: retention_days must be an integer")
        if retention_days < 0:
            raise ConfigError(f"{label}: retention_days cannot be negative")

        return DatabaseConfig(
            name=raw["name"],
            database_name=raw["database_name"],
            url=raw["url"],
            container_name=raw["container_name"],
            master_password=raw["master_password"],
            backup_format=backup_format,
            output_path=raw["output_path"],
            retention_days=retention_days,
        )

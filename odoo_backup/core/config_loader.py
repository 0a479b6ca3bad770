from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .registry import DatabaseRegistry, entry_label

DEFAULT_CONFIG_FILE = Path("/etc/odoo-backup/config.json")
CONFIG_ENV_VAR = "ODOO_BACKUP_CONFIG"
# same reference syntax os.path.expandvars understands
_VAR_REFERENCE = re.compile(r"\$(\w+|\{[^}]*\})", re.ASCII)


class ConfigLoader:
    def __init__(self, default_config_file: Path | None = None) -> None:
        self._default_config_file = default_config_file

    @property
    def default_config_file(self) -> Path:
        if self._default_config_file is not None:
            return self._default_config_file
        from_env = os.environ.get(CONFIG_ENV_VAR)
        return Path(from_env).expanduser() if from_env else DEFAULT_CONFIG_FILE

    def load(self, config_path: str | None = None) -> DatabaseRegistry:
        config_file = Path(config_path).expanduser() if config_path else self.default_config_file
        if not config_file.is_file():
            raise ConfigError(f"Missing config file: {config_file}")

        try:
            content = config_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read config file {config_file}: {exc}") from exc

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {config_file}: {exc}") from exc

        return DatabaseRegistry.load(self._entries(payload))

    def _entries(self, payload: Any) -> list[Any]:
        if isinstance(payload, dict):
            if "databases" not in payload:
                raise ConfigError("Config object must contain a 'databases' list")
            payload = payload["databases"]
        if not isinstance(payload, list):
            raise ConfigError("Config must be a list of databases")
        return [self._expand(index, entry) for index, entry in enumerate(payload)]

    def _expand(self, index: int, entry: Any) -> Any:
        if not isinstance(entry, dict):
            return entry
        expanded: dict[str, Any] = {}
        for key, value in entry.items():
            if isinstance(value, str):
                unset = [
                    name
                    for name in self._references(value)
                    if name not in os.environ
                ]
                if unset:
                    raise ConfigError(
                        f"{entry_label(index, entry)}: {key} references unset "
                        f"environment variable {', '.join(unset)}"
                    )
                value = os.path.expandvars(value)
            expanded[key] = value
        return expanded

    @staticmethod
    def _references(value: str) -> list[str]:
        names = []
        for match in _VAR_REFERENCE.finditer(value):
            name = match.group(1)
            if name.startswith("{") and name.endswith("}"):
                name = name[1:-1]
            names.append(name)
        return names

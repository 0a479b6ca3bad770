from __future__ import annotations

from ..core.registry import DatabaseRegistry
from .base import Command


class ListCommand(Command):
    def __init__(self, registry: DatabaseRegistry) -> None:
        self._registry = registry

    def run(self) -> int:
        print("Configured databases:")
        for index, config in enumerate(self._registry, start=1):
            print(f"  {index}. {config.name} ({config.database_name})")
            print(f"     Container: {config.container_name}")
            print(f"     URL: {config.url}")
            print(f"     Format: {config.backup_format.value}")
            print(f"     Retention: {config.retention_days} days")
            print()
        return 0

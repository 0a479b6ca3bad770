from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import pytest

from odoo_backup.core.database_config import BackupFormat, DatabaseConfig
from odoo_backup.core.errors import ContainerRuntimeError
from odoo_backup.core.protocols import ExecResult


class FixedClock:
    def __init__(self, moment: datetime | None = None) -> None:
        self.moment = moment or datetime(2024, 1, 6, 0, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.moment

    def now_iso(self) -> str:
        return self.moment.isoformat(timespec="seconds")


class FakeRuntime:
    """In-memory container engine: containers hold files keyed by path."""

    def __init__(self, running: Iterable[str] = ()) -> None:
        self.running = set(running)
        self.calls: list[tuple[Any, ...]] = []
        self.files: dict[tuple[str, str], bytes] = {}
        self.body = b"PK\x03\x04 odoo backup"
        self.status = 200
        self.content_type = "application/octet-stream"
        self.curl_exit_code = 0
        self.mkdir_exit_code = 0
        self.status_errors: dict[str, Exception] = {}
        self.exec_errors: dict[str, Exception] = {}
        self.copy_error: Exception | None = None
        self.remove_error: Exception | None = None

    def is_running(self, container_name: str) -> bool:
        self.calls.append(("is_running", container_name))
        if container_name in self.status_errors:
            raise self.status_errors[container_name]
        return container_name in self.running

    def exec(
        self,
        container_name: str,
        command: str,
        args: Iterable[str] = (),
    ) -> ExecResult:
        args_list = list(args)
        self.calls.append(("exec", container_name, command, args_list))
        if command in self.exec_errors:
            raise self.exec_errors[command]
        if command == "mkdir":
            return ExecResult("", self.mkdir_exit_code)
        if command == "curl":
            if self.curl_exit_code:
                return ExecResult("curl: (7) Failed to connect to localhost port 8069", self.curl_exit_code)
            output = args_list[args_list.index("--output") + 1]
            self.files[(container_name, output)] = self.body
            return ExecResult(f"{self.status}|{self.content_type}", 0)
        if command == "head":
            data = self.files.get((container_name, args_list[-1]))
            if data is None:
                return ExecResult("head: No such file or directory", 1)
            return ExecResult(data.decode("utf-8", errors="replace"), 0)
        return ExecResult(f"{command}: not found", 127)

    def copy_from_container(
        self,
        container_name: str,
        container_path: str,
        host_path: Path,
    ) -> None:
        self.calls.append(("copy", container_name, container_path, host_path))
        if self.copy_error is not None:
            raise self.copy_error
        data = self.files.get((container_name, container_path))
        if data is None:
            raise ContainerRuntimeError(f"Could not find the file {container_path} in container {container_name}")
        Path(host_path).write_bytes(data)

    def remove_in_container(self, container_name: str, path: str) -> None:
        self.calls.append(("remove", container_name, path))
        if self.remove_error is not None:
            raise self.remove_error
        self.files.pop((container_name, path), None)

    def calls_for(self, kind: str, command: str | None = None) -> list[tuple[Any, ...]]:
        return [
            call
            for call in self.calls
            if call[0] == kind and (command is None or call[2] == command)
        ]


def raw_database(**overrides: Any) -> dict[str, Any]:
    values: dict[str, Any] = {
        "name": "Acme Corp",
        "database_name": "acme",
        "url": "http://localhost:8069",
        "container_name": "odoo-acme",
        "master_password": "s3cret-master",
        "backup_format": "zip",
        "output_path": "/tmp/backups",
        "retention_days": 7,
    }
    values.update(overrides)
    return values


def make_config(**overrides: Any) -> DatabaseConfig:
    values = raw_database(**overrides)
    values["backup_format"] = BackupFormat(values["backup_format"])
    return DatabaseConfig(**values)


def touch_backup(directory: Path, filename: str, content: bytes = b"backup") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(content)
    return path


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def sample_config() -> DatabaseConfig:
    return make_config()


@pytest.fixture
def runtime(sample_config: DatabaseConfig) -> FakeRuntime:
    return FakeRuntime(running=[sample_config.container_name])


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    root = tmp_path / "backups"
    root.mkdir()
    return root

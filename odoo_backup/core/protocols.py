from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable, NamedTuple, Protocol


class ExecResult(NamedTuple):
    output: str
    exit_code: int


class ContainerRuntimeProtocol(Protocol):
    def is_running(self, container_name: str) -> bool:
        ...

    def exec(
        self,
        container_name: str,
        command: str,
        args: Iterable[str] = (),
    ) -> ExecResult:
        ...

    def copy_from_container(
        self,
        container_name: str,
        container_path: str,
        host_path: Path,
    ) -> None:
        ...

    def remove_in_container(self, container_name: str, path: str) -> None:
        ...


class ClockProtocol(Protocol):
    def now(self) -> datetime:
        ...

    def now_iso(self) -> str:
        ...

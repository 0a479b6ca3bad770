from __future__ import annotations

from pathlib import Path


class BackupError(Exception):
    """Base class for every failure the tool reports per database."""


class ConfigError(BackupError):
    pass


class DatabaseNotFound(BackupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Client '{name}' not found in configuration")
        self.name = name


class ContainerRuntimeError(BackupError):
    pass


class StepTimeout(BackupError):
    def __init__(self, step: str, timeout: float) -> None:
        super().__init__(f"{step} did not finish within {timeout:g}s")
        self.step = step
        self.timeout = timeout


class ContainerNotRunning(BackupError):
    def __init__(self, container_name: str) -> None:
        super().__init__(f"Container '{container_name}' is not running")
        self.container_name = container_name


class BackupApiError(BackupError):
    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body_fragment: str | None = None,
    ) -> None:
        details = message
        if status is not None:
            details += f" (HTTP {status})"
        if body_fragment:
            details += f": {body_fragment}"
        super().__init__(details)
        self.status = status
        self.body_fragment = body_fragment


class TransferError(BackupError):
    pass


class BackupCollisionError(TransferError):
    def __init__(self, host_path: Path) -> None:
        super().__init__(f"Backup artifact already exists: {host_path}")
        self.host_path = host_path


class CleanupWarning(BackupError):
    """Non-fatal: the host artifact is valid but the container temp file remains."""


class RetentionError(BackupError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to delete {path}: {reason}")
        self.path = path

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from datetime import timezone
from pathlib import Path

from .backup_record import BackupRecord, build_filename
from .database_config import DatabaseConfig
from .errors import (
    BackupApiError,
    BackupCollisionError,
    BackupError,
    CleanupWarning,
    ContainerNotRunning,
    ContainerRuntimeError,
    StepTimeout,
    TransferError,
)
from .protocols import ClockProtocol, ContainerRuntimeProtocol

logger = logging.getLogger(__name__)

_WRITE_OUT = "%{http_code}|%{content_type}"
_WRITE_OUT_PATTERN = re.compile(r"(\d{3})\|([^\n]*)$")
_FRAGMENT_BYTES = 512
_FRAGMENT_CHARS = 200


@dataclass(frozen=True)
class BackupResult:
    record: BackupRecord
    cleanup_warning: CleanupWarning | None = None


class BackupExecutor:
    """Runs the backup protocol for one database.

    Steps run strictly in order: liveness check, trigger, transfer, cleanup.
    Everything before cleanup is fatal and nothing is retried. A cleanup
    failure is reported on the result instead of raised, since the host
    artifact is complete by then.
    """

    def __init__(
        self,
        runtime: ContainerRuntimeProtocol,
        clock: ClockProtocol,
        *,
        request_timeout: float | None = None,
    ) -> None:
        self._runtime = runtime
        self._clock = clock
        self._request_timeout = request_timeout

    def execute(self, config: DatabaseConfig, backup_root: Path) -> BackupResult:
        logger.info("Starting backup for %s (%s)", config.name, config.database_name)

        if not self._runtime.is_running(config.container_name):
            raise ContainerNotRunning(config.container_name)

        started_at = self._clock.now().astimezone(timezone.utc).replace(microsecond=0)
        filename = build_filename(config.database_name, config.backup_format, started_at)
        host_path = backup_root / config.database_name / filename
        container_path = posixpath.join(config.output_path, filename)

        if host_path.exists():
            raise BackupCollisionError(host_path)

        try:
            self._trigger(config, container_path)
            self._transfer(config, container_path, host_path)
        except StepTimeout:
            logger.warning(
                "Backup for %s timed out; %s may be left in container %s",
                config.name,
                container_path,
                config.container_name,
            )
            raise

        warning = self._cleanup(config, container_path)
        logger.info("Backup completed for %s: %s", config.name, host_path)
        return BackupResult(
            record=BackupRecord(
                host_path=host_path,
                database_name=config.database_name,
                created_at=started_at,
            ),
            cleanup_warning=warning,
        )

    def _trigger(self, config: DatabaseConfig, container_path: str) -> None:
        mkdir = self._runtime.exec(config.container_name, "mkdir", ["-p", config.output_path])
        if mkdir.exit_code != 0:
            raise BackupApiError(
                f"Failed to create {config.output_path} in container: {mkdir.output.strip()}"
            )

        logger.info(
            "Requesting backup of %s from %s in container %s",
            config.database_name,
            config.backup_endpoint,
            config.container_name,
        )
        response = self._runtime.exec(
            config.container_name,
            "curl",
            self._curl_args(config, container_path),
        )
        if response.exit_code != 0:
            raise BackupApiError(
                f"Backup request failed (curl exit {response.exit_code})",
                body_fragment=self._condense(response.output),
            )

        match = _WRITE_OUT_PATTERN.search(response.output.strip())
        if not match:
            raise BackupApiError(
                "Unexpected response from backup endpoint",
                body_fragment=self._condense(response.output),
            )
        status = int(match.group(1))
        content_type = match.group(2).strip().lower()

        if not 200 <= status < 300:
            raise BackupApiError(
                "Backup endpoint rejected the request",
                status=status,
                body_fragment=self._read_fragment(config, container_path),
            )
        # Odoo answers a failed backup with a 200 HTML page
        if content_type.startswith("text/html"):
            raise BackupApiError(
                "Backup endpoint returned an error page instead of an artifact",
                status=status,
                body_fragment=self._read_fragment(config, container_path),
            )

    def _curl_args(self, config: DatabaseConfig, container_path: str) -> list[str]:
        args = ["--silent", "--show-error"]
        if self._request_timeout is not None:
            args.extend(["--max-time", f"{self._request_timeout:g}"])
        args.extend(
            [
                "-X",
                "POST",
                "--form-string",
                f"master_pwd={config.master_password}",
                "--form-string",
                f"name={config.database_name}",
                "--form-string",
                f"backup_format={config.backup_format.value}",
                "--output",
                container_path,
                "--write-out",
                _WRITE_OUT,
                config.backup_endpoint,
            ]
        )
        return args

    def _read_fragment(self, config: DatabaseConfig, container_path: str) -> str | None:
        try:
            result = self._runtime.exec(
                config.container_name,
                "head",
                ["-c", str(_FRAGMENT_BYTES), container_path],
            )
        except BackupError as exc:
            logger.debug("Could not read response body from %s: %s", container_path, exc)
            return None
        if result.exit_code != 0:
            return None
        return self._condense(result.output)

    @staticmethod
    def _condense(text: str) -> str | None:
        stripped = re.sub(r"<[^>]*>", " ", text)
        collapsed = " ".join(stripped.split())
        return collapsed[:_FRAGMENT_CHARS] or None

    def _transfer(self, config: DatabaseConfig, container_path: str, host_path: Path) -> None:
        target_dir = host_path.parent
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TransferError(f"Failed to create backup directory {target_dir}: {exc}") from exc

        partial = host_path.with_name(f"{host_path.name}.part")
        logger.info("Copying %s:%s -> %s", config.container_name, container_path, host_path)
        try:
            self._runtime.copy_from_container(config.container_name, container_path, partial)
            if not partial.is_file():
                raise TransferError(f"Copied artifact is missing on the host: {partial}")
            if partial.stat().st_size == 0:
                raise TransferError(f"Copied artifact is empty: {partial}")
            if host_path.exists():
                raise BackupCollisionError(host_path)
            partial.rename(host_path)
        except ContainerRuntimeError as exc:
            self._discard(partial)
            raise TransferError(f"Failed to copy backup from container: {exc}") from exc
        except OSError as exc:
            self._discard(partial)
            raise TransferError(f"Failed to store backup at {host_path}: {exc}") from exc
        except (TransferError, StepTimeout):
            self._discard(partial)
            raise

    def _discard(self, partial: Path) -> None:
        try:
            partial.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove partial artifact %s: %s", partial, exc)

    def _cleanup(self, config: DatabaseConfig, container_path: str) -> CleanupWarning | None:
        try:
            self._runtime.remove_in_container(config.container_name, container_path)
        except BackupError as exc:
            warning = CleanupWarning(
                f"Failed to remove {container_path} from container {config.container_name}: {exc}"
            )
            warning.__cause__ = exc
            logger.warning("%s", warning)
            return warning
        logger.debug("Removed %s from container %s", container_path, config.container_name)
        return None

from __future__ import annotations

from argparse import Namespace
from collections.abc import Callable
from pathlib import Path

from ..core.backup_executor import BackupExecutor
from ..core.clock import Clock
from ..core.config_loader import ConfigLoader
from ..core.docker_runtime import DockerRuntime
from ..core.orchestrator import Orchestrator
from ..core.protocols import ClockProtocol, ContainerRuntimeProtocol
from ..core.retention import RetentionManager
from .backup_command import BackupCommand
from .base import Command
from .clean_command import CleanCommand
from .list_backups_command import ListBackupsCommand
from .list_command import ListCommand
from .status_command import StatusCommand

# docker exec gets a little longer than curl's own limit
RUNTIME_GRACE_SECONDS = 30.0


def _docker_runtime(timeout: float) -> ContainerRuntimeProtocol:
    return DockerRuntime(timeout=timeout + RUNTIME_GRACE_SECONDS)


class CommandFactory:
    def __init__(
        self,
        *,
        config_loader: ConfigLoader | None = None,
        clock: ClockProtocol | None = None,
        retention: RetentionManager | None = None,
        runtime_factory: Callable[[float], ContainerRuntimeProtocol] | None = None,
    ) -> None:
        self._config_loader = config_loader or ConfigLoader()
        self._clock = clock or Clock()
        self._retention = retention or RetentionManager()
        self._runtime_factory = runtime_factory or _docker_runtime

    def create(self, args: Namespace) -> Command:
        registry = self._config_loader.load(args.config)
        backup_root = Path(args.backup_dir).expanduser()

        if args.command == "list":
            return ListCommand(registry)
        if args.command == "list-backups":
            return ListBackupsCommand(self._retention, backup_root, database=args.database)

        runtime = self._runtime_factory(args.timeout)
        executor = BackupExecutor(runtime, self._clock, request_timeout=args.timeout)
        orchestrator = Orchestrator(executor, self._retention, runtime, self._clock)

        if args.command == "backup":
            return BackupCommand(
                registry,
                orchestrator,
                backup_root,
                client=args.client,
                verbose=args.verbose,
            )
        if args.command == "clean":
            return CleanCommand(
                registry,
                orchestrator,
                backup_root,
                client=args.client,
                verbose=args.verbose,
            )
        if args.command == "status":
            return StatusCommand(registry, orchestrator, verbose=args.verbose)
        raise SystemExit(f"Unsupported command: {args.command}")

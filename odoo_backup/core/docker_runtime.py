from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterable

from .errors import ContainerRuntimeError, StepTimeout
from .protocols import ExecResult

logger = logging.getLogger(__name__)

DEFAULT_STEP_TIMEOUT = 600.0


class DockerRuntime:
    """Container runtime backed by the ``docker`` command line client."""

    def __init__(self, timeout: float = DEFAULT_STEP_TIMEOUT, binary: str = "docker") -> None:
        self._timeout = timeout
        self._binary = binary

    @property
    def timeout(self) -> float:
        return self._timeout

    def run(self, args: Iterable[str], *, step: str) -> subprocess.CompletedProcess[str]:
        cmd = [self._binary, *args]
        logger.debug("Running %s: %s %s", step, self._binary, cmd[1])
        try:
            return subprocess.run(
                cmd,
                text=True,
                capture_output=True,
                check=False,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            # TimeoutExpired carries the full argv, including form secrets
            raise StepTimeout(step, self._timeout) from None
        except OSError as exc:
            raise ContainerRuntimeError(f"Failed to run {self._binary}: {exc}") from exc

    def is_running(self, container_name: str) -> bool:
        result = self.run(
            ["ps", "--filter", f"name={container_name}", "--format", "{{.Names}}"],
            step="liveness check",
        )
        if result.returncode != 0:
            raise ContainerRuntimeError(
                f"Docker command failed: {result.stderr.strip() or result.returncode}"
            )
        # the name filter is a substring match
        return container_name in result.stdout.splitlines()

    def exec(
        self,
        container_name: str,
        command: str,
        args: Iterable[str] = (),
    ) -> ExecResult:
        result = self.run(["exec", container_name, command, *args], step=f"exec {command}")
        output = result.stdout
        if result.stderr:
            output = f"{output}{result.stderr}" if output else result.stderr
        return ExecResult(output, result.returncode)

    def copy_from_container(
        self,
        container_name: str,
        container_path: str,
        host_path: Path,
    ) -> None:
        result = self.run(
            ["cp", f"{container_name}:{container_path}", str(host_path)],
            step="copy from container",
        )
        if result.returncode != 0:
            raise ContainerRuntimeError(
                f"Failed to copy {container_path}: {result.stderr.strip() or result.returncode}"
            )

    def remove_in_container(self, container_name: str, path: str) -> None:
        result = self.run(["exec", container_name, "rm", "-f", path], step="cleanup")
        if result.returncode != 0:
            raise ContainerRuntimeError(
                f"Failed to remove {path}: {result.stderr.strip() or result.returncode}"
            )

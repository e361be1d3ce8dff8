"""Instance file transfer and execution through the incus executable."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional

from scriptcli.errors import APIError, ScriptExecutionError, ScriptTransferError
from scriptcli.hypervisor.base import InstanceShell


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[int] = None,
    **kwargs
) -> CommandResult:
    """Run a command and wait for it to finish."""
    logger.debug(f"Running command: {' '.join(cmd)}")

    completed = subprocess.run(
        cmd,
        capture_output=capture_output,
        text=True,
        timeout=timeout,
        check=False,
        **kwargs
    )

    result = CommandResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )

    if check and completed.returncode != 0:
        error = subprocess.CalledProcessError(completed.returncode, cmd)
        error.stdout = result.stdout
        error.stderr = result.stderr
        raise error

    return result


class IncusShell(InstanceShell):
    """InstanceShell backed by the ``incus`` command line client."""

    def __init__(self, binary: str = "incus"):
        """Initialize with the incus executable name."""
        self.binary = binary

    def push_file(self, instance: str, source: Path, target: str) -> None:
        """Copy a local file into the instance."""
        cmd = [self.binary, "file", "push", str(source), f"{instance}/{target.lstrip('/')}"]
        try:
            run_command(cmd)
        except (OSError, subprocess.CalledProcessError) as e:
            stderr = getattr(e, "stderr", "") or ""
            raise ScriptTransferError(f"Failed to push {source} to {instance}: {e} {stderr}".strip()) from e

    def run(
        self,
        instance: str,
        command: List[str],
        stdin: Optional[IO] = None,
        stdout: Optional[IO] = None,
        stderr: Optional[IO] = None,
    ) -> int:
        """Run a command inside the instance with the given streams."""
        cmd = [self.binary, "exec", instance, "--", *command]
        logger.debug(f"Running in {instance}: {command[0]}")
        try:
            completed = subprocess.run(cmd, stdin=stdin, stdout=stdout, stderr=stderr, check=False)
        except OSError as e:
            raise ScriptExecutionError(f"Cannot run {self.binary}: {e}") from e
        return completed.returncode

    def set_config(self, instance: str, key: str, value: str) -> None:
        """Set an instance configuration key."""
        try:
            run_command([self.binary, "config", "set", instance, key, value])
        except (OSError, subprocess.CalledProcessError) as e:
            raise APIError(f"Failed to set {key} on {instance}: {e}") from e

"""Command execution utilities."""

import shlex
import subprocess
from typing import Sequence

import structlog

from sshd_hardening.exceptions import CommandExecutionError
from sshd_hardening.types import CommandResult

logger = structlog.get_logger()


class CommandExecutor:
    """Execute system commands with proper error handling."""

    def __init__(self, use_sudo: bool = False) -> None:
        """Initialize command executor.

        Args:
            use_sudo: Whether to prepend sudo to commands requiring root
        """
        self.use_sudo = use_sudo

    def execute(
        self,
        argv: Sequence[str],
        needs_root: bool = False,
        timeout: int = 30,
    ) -> CommandResult:
        """Execute command with optional sudo.

        Args:
            argv: Command and its arguments
            needs_root: Whether command requires root privileges
            timeout: Command timeout in seconds

        Returns:
            CommandResult of a successful run

        Raises:
            CommandExecutionError: If the command cannot start, times out
                or exits non-zero
        """
        argv = list(argv)
        if needs_root and self.use_sudo:
            argv = ["sudo", "-n"] + argv
        cmd = shlex.join(argv)

        logger.debug("Running command", command=cmd)
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            error_msg = f"Command timed out after {timeout}s: {cmd}"
            raise CommandExecutionError(error_msg) from e
        except OSError as e:
            error_msg = f"Command execution failed: {cmd}\nError: {e}"
            raise CommandExecutionError(error_msg) from e

        if result.returncode != 0:
            raise CommandExecutionError(f"Command failed: {cmd}\nError: {result.stderr}")

        return CommandResult(
            success=True,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
        )

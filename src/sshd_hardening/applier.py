"""Write rendered directives to sshd_config and notify the service."""

from pathlib import Path
from typing import List, Optional, Sequence

import structlog

from sshd_hardening.config import HardenerConfig
from sshd_hardening.exceptions import (
    ApplyError,
    CommandExecutionError,
    HardenerError,
    RollbackError,
    ServiceControlError,
    SystemRequirementError,
)
from sshd_hardening.system_info import SystemInfo
from sshd_hardening.types import ApplyResult, DirectiveMapping, DirectiveValue
from sshd_hardening.utils.command import CommandExecutor
from sshd_hardening.utils.file import FileManager

logger = structlog.get_logger()

HEADER = (
    "# sshd_config rendered by sshd-hardening",
    "# DO NOT EDIT MANUALLY - changes are overwritten on the next run",
    "",
)

# HostKey lines are emitted right after this directive.
HOST_KEY_ANCHOR = "ListenAddress"


def _format(name: str, value: DirectiveValue) -> List[str]:
    if isinstance(value, (tuple, list)):
        return [f"{name} {item}" for item in value]
    return [f"{name} {value}"]


def serialize(mapping: DirectiveMapping, host_key_files: Sequence[str]) -> str:
    """Serialize directives into sshd_config syntax.

    Sequence values become one line per element, in order. The output
    carries no timestamp, so the same input always yields the same text.

    Args:
        mapping: Rendered directives
        host_key_files: Paths emitted as HostKey lines

    Returns:
        File content ending with a newline
    """
    lines = list(HEADER)
    host_keys = [f"HostKey {path}" for path in host_key_files]

    for name, value in mapping.items():
        lines.extend(_format(name, value))
        if name == HOST_KEY_ANCHOR:
            lines.extend(host_keys)
            host_keys = []

    # No ListenAddress in the mapping: keep host keys anyway.
    lines.extend(host_keys)
    return "\n".join(lines) + "\n"


class SSHDConfigApplier:
    """Apply a rendered mapping to the sshd configuration file."""

    def __init__(
        self,
        config: HardenerConfig,
        dry_run: bool = False,
        system: Optional[SystemInfo] = None,
        executor: Optional[CommandExecutor] = None,
    ) -> None:
        """Initialize the applier.

        Args:
            config: Configuration object
            dry_run: If True, report what would change without writing
            system: System information, detected on first restart if omitted
            executor: Command executor used for the service restart
        """
        self.config = config
        self.dry_run = dry_run
        self._system = system
        self._executor = executor
        self.file_manager = FileManager(config.backup.directory)
        self._created: List[Path] = []

    @property
    def system(self) -> SystemInfo:
        if self._system is None:
            self._system = SystemInfo()
            logger.debug("System detected", **self._system.to_dict())
        return self._system

    @property
    def executor(self) -> CommandExecutor:
        if self._executor is None:
            self._executor = CommandExecutor(use_sudo=not self.system.is_root)
        return self._executor

    def apply(
        self, mapping: DirectiveMapping, host_key_files: Sequence[str]
    ) -> ApplyResult:
        """Write the mapping if it differs from the file on disk.

        Args:
            mapping: Rendered directives
            host_key_files: Host key paths for HostKey lines

        Returns:
            What was done

        Raises:
            ApplyError: If writing or restarting fails; the previous file
                has been restored
            RollbackError: If the previous file could not be restored
        """
        path = self.config.applier.config_path
        content = serialize(mapping, host_key_files)

        try:
            current = self.file_manager.read_bytes(path)
        except OSError as e:
            raise ApplyError(f"Cannot read {path}: {e}") from e

        if current == content.encode():
            logger.info("sshd configuration unchanged", path=str(path))
            return ApplyResult(changed=False, path=str(path))

        if self.dry_run:
            logger.info("Dry run, sshd configuration would change", path=str(path))
            return ApplyResult(changed=True, path=str(path))

        try:
            backup_path = self.file_manager.backup_file(path)
        except OSError as e:
            raise ApplyError(f"Cannot back up {path}: {e}") from e
        if backup_path is None:
            self._created.append(path)

        restarted = False
        try:
            self.file_manager.write_file(path, content)
            logger.info("sshd configuration written", path=str(path))

            if self.config.applier.restart:
                self._restart_ssh_service()
                restarted = True

        except KeyboardInterrupt:
            logger.warning("Interrupted by user, rolling back")
            self.rollback()
            raise

        except (HardenerError, OSError) as e:
            logger.error("Applying sshd configuration failed", error=str(e))
            self.rollback()
            raise ApplyError(f"Applying {path} failed: {e}") from e

        return ApplyResult(
            changed=True,
            path=str(path),
            backup_path=str(backup_path) if backup_path else None,
            restarted=restarted,
        )

    def rollback(self) -> None:
        """Restore every file changed by this applier.

        Raises:
            RollbackError: If rollback fails
        """
        logger.info("Rolling back changes")

        try:
            restored = self.file_manager.rollback_all()
            for path in self._created:
                path.unlink(missing_ok=True)
                restored.append(str(path))
            self._created.clear()
        except OSError as e:
            raise RollbackError(f"Rollback failed: {e}") from e

        logger.info("Files restored", count=len(restored))

    def _restart_ssh_service(self) -> None:
        """Restart the ssh daemon.

        Raises:
            SystemRequirementError: If the init system is unknown
            ServiceControlError: If the service is missing or fails to restart
        """
        service = self.config.applier.service_name or self.system.detect_ssh_service()
        if not service:
            raise ServiceControlError("SSH service not found")

        argv = self.system.get_service_command(service, "restart")
        if argv is None:
            raise SystemRequirementError(
                f"Cannot control service on {self.system.init_system.value}"
            )

        try:
            self.executor.execute(argv, needs_root=True)
        except CommandExecutionError as e:
            raise ServiceControlError(f"Service restart failed: {e}") from e

        logger.info("SSH service restarted", service=service)

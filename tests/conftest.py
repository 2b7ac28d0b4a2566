"""Pytest configuration and fixtures."""

import os
import shlex
from pathlib import Path
from typing import Iterator, List, Sequence

import pytest
import structlog

from sshd_hardening.config import (
    ApplierConfig,
    BackupConfig,
    HardenerConfig,
    LoggingConfig,
    PolicyConfig,
)
from sshd_hardening.exceptions import CommandExecutionError
from sshd_hardening.log import close_log_file
from sshd_hardening.system_info import SystemInfo
from sshd_hardening.types import CommandResult, InitSystem
from sshd_hardening.utils.command import CommandExecutor


class RecordingExecutor(CommandExecutor):
    """Executor that records commands instead of running them."""

    def __init__(self, result: CommandResult = CommandResult(True, "", "")) -> None:
        super().__init__(use_sudo=False)
        self.result = result
        self.calls: List[List[str]] = []

    def execute(
        self,
        argv: Sequence[str],
        needs_root: bool = False,
        timeout: int = 30,
    ) -> CommandResult:
        self.calls.append(list(argv))
        if not self.result.success:
            raise CommandExecutionError(
                f"Command failed: {shlex.join(argv)}\nError: {self.result.stderr}"
            )
        return self.result


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Isolate tests from the caller's environment and .env files."""
    for name in list(os.environ):
        if name.startswith(("SSH_", "SSHD_", "BACKUP_", "LOG_")):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    close_log_file()
    structlog.reset_defaults()


@pytest.fixture
def sshd_config_path(tmp_path: Path) -> Path:
    """Path of a scratch sshd_config."""
    return tmp_path / "sshd_config"


@pytest.fixture
def temp_backup_dir(tmp_path: Path) -> Path:
    """Create temporary backup directory."""
    backup_dir = tmp_path / "backups"
    backup_dir.mkdir()
    return backup_dir


@pytest.fixture
def test_config(sshd_config_path: Path, temp_backup_dir: Path) -> HardenerConfig:
    """Create test configuration."""
    return HardenerConfig(
        policy=PolicyConfig(),
        applier=ApplierConfig(config_path=sshd_config_path, service_name="sshd"),
        backup=BackupConfig(directory=temp_backup_dir),
        logging=LoggingConfig(),
    )


@pytest.fixture
def systemd(monkeypatch: pytest.MonkeyPatch) -> SystemInfo:
    """SystemInfo pinned to a root systemd host."""
    monkeypatch.setattr(SystemInfo, "_detect_init_system", lambda self: InitSystem.SYSTEMD)
    monkeypatch.setattr(SystemInfo, "_check_sudo", lambda self: True)
    return SystemInfo()


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()

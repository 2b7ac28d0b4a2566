"""System information detection for sshd-hardening."""

import os
import shutil
import subprocess
from typing import Dict, List, Optional

from sshd_hardening.types import CommandResult, InitSystem

SSH_SERVICE_NAMES = ("sshd", "ssh", "openssh")


class SystemInfo:
    """Detect and store system capabilities."""

    def __init__(self) -> None:
        """Initialize system information detection."""
        self.init_system = self._detect_init_system()
        self.is_root = os.geteuid() == 0
        self.has_sudo = self._check_sudo()
        self.can_be_root = self.is_root or self.has_sudo

    def _detect_init_system(self) -> InitSystem:
        """Detect init system."""
        checks = [
            (["systemctl", "--version"], InitSystem.SYSTEMD),
            (["service", "--version"], InitSystem.SYSVINIT),
            (["initctl", "--version"], InitSystem.UPSTART),
            (["rc-service", "--version"], InitSystem.OPENRC),
        ]

        for argv, system in checks:
            if not self._command_exists(argv[0]):
                continue
            if self._run_command(argv).success:
                return system

        return InitSystem.UNKNOWN

    def _check_sudo(self) -> bool:
        """Check if current user can use sudo."""
        if self.is_root:
            return True

        if not self._command_exists("sudo"):
            return False

        return self._run_command(["sudo", "-n", "true"]).success

    def _command_exists(self, command: str) -> bool:
        """Check if a command exists."""
        return shutil.which(command) is not None

    def _run_command(self, argv: List[str], timeout: int = 10) -> CommandResult:
        """Execute command and return result."""
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
            return CommandResult(
                success=result.returncode == 0,
                stdout=result.stdout,
                stderr=result.stderr,
                return_code=result.returncode,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(False, "", "Command timed out", -1)
        except OSError as e:
            return CommandResult(False, "", str(e), -1)

    def get_service_command(self, service: str, action: str) -> Optional[List[str]]:
        """Get service control command for this init system."""
        if self.init_system == InitSystem.SYSTEMD:
            return ["systemctl", action, service]
        elif self.init_system == InitSystem.SYSVINIT:
            return ["service", service, action]
        elif self.init_system == InitSystem.UPSTART:
            return [action, service]
        elif self.init_system == InitSystem.OPENRC:
            return ["rc-service", service, action]
        return None

    def detect_ssh_service(self) -> Optional[str]:
        """Find the name the ssh daemon is registered under."""
        for name in SSH_SERVICE_NAMES:
            argv = self.get_service_command(name, "status")
            if argv is None:
                return None
            result = self._run_command(argv)
            if result.success or "loaded" in result.stdout.lower():
                return name
        return None

    def check_requirements(self) -> List[str]:
        """Check if system meets requirements for restarting sshd."""
        issues: List[str] = []

        if not self.can_be_root:
            issues.append("No root access available (need root or sudo)")

        if self.init_system == InitSystem.UNKNOWN:
            issues.append("Cannot detect init system")

        return issues

    def to_dict(self) -> Dict[str, str]:
        """Convert system info to dictionary."""
        return {
            "init_system": self.init_system.value,
            "is_root": str(self.is_root),
            "has_sudo": str(self.has_sudo),
        }

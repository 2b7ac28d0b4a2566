"""Utility modules for sshd-hardening."""

from sshd_hardening.utils.command import CommandExecutor
from sshd_hardening.utils.file import FileManager
from sshd_hardening.utils.validation import Validator

__all__ = ["CommandExecutor", "FileManager", "Validator"]

"""Input validation utilities."""

import ipaddress
import os
from pathlib import Path

from sshd_hardening.exceptions import ValidationError


class Validator:
    """Validate inputs and system state."""

    @staticmethod
    def validate_port(port: int) -> None:
        """Validate port number.

        Args:
            port: Port number to validate

        Raises:
            ValidationError: If port is invalid
        """
        if not (1 <= port <= 65535):
            raise ValidationError(f"Invalid port: {port}. Must be between 1-65535")

    @staticmethod
    def validate_listen_address(address: str) -> None:
        """Validate a ListenAddress value.

        Only bare IPv4/IPv6 literals are accepted.

        Args:
            address: Address to validate

        Raises:
            ValidationError: If address is not an IP literal
        """
        try:
            ipaddress.ip_address(address)
        except ValueError as e:
            raise ValidationError(f"Invalid listen address: {address}") from e

    @staticmethod
    def validate_path_writable(path: Path) -> bool:
        """Check if path is writable.

        Args:
            path: Path to check

        Returns:
            True if path is writable
        """
        try:
            if path.exists():
                return path.is_file() and os.access(path, os.W_OK)
            parent = path.parent
            return parent.exists() and os.access(parent, os.W_OK)
        except OSError:
            return False

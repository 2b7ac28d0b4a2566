"""Custom exceptions for sshd-hardening.

Rendering never raises; everything here comes from the configuration
boundary or from applying a rendered file to the host.
"""


class HardenerError(Exception):
    """Base exception for all sshd-hardening errors."""

    pass


class ConfigurationError(HardenerError):
    """Raised when environment, .env or CLI settings fail validation."""

    pass


class ValidationError(HardenerError):
    """Raised when a single port, address or path is rejected."""

    pass


class SystemRequirementError(HardenerError):
    """Raised when the host has no init system we can drive."""

    pass


class CommandExecutionError(HardenerError):
    """Raised when a checked command exits non-zero or times out."""

    pass


class ServiceControlError(HardenerError):
    """Raised when the ssh service is missing or will not restart."""

    pass


class ApplyError(HardenerError):
    """Raised when writing sshd_config fails; the old file was restored."""

    pass


class RollbackError(HardenerError):
    """Raised when the previous sshd_config could not be restored."""

    pass

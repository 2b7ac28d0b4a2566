"""sshd-hardening - render a hardened sshd_config from policy toggles."""

__version__ = "1.0.0"
__license__ = "MIT"

from sshd_hardening.exceptions import (
    ApplyError,
    ConfigurationError,
    HardenerError,
    RollbackError,
    ServiceControlError,
    SystemRequirementError,
    ValidationError,
)
from sshd_hardening.renderer import render
from sshd_hardening.types import DirectiveMapping, PolicyInput
from sshd_hardening.applier import SSHDConfigApplier, serialize

__all__ = [
    "render",
    "serialize",
    "PolicyInput",
    "DirectiveMapping",
    "SSHDConfigApplier",
    "HardenerError",
    "ConfigurationError",
    "SystemRequirementError",
    "ValidationError",
    "ServiceControlError",
    "ApplyError",
    "RollbackError",
]

"""Type definitions for sshd-hardening."""

from enum import Enum
from typing import Mapping, NamedTuple, Optional, Tuple, Union

DEFAULT_HOST_KEY_FILES: Tuple[str, ...] = (
    "/etc/ssh/ssh_host_rsa_key",
    "/etc/ssh/ssh_host_dsa_key",
    "/etc/ssh/ssh_host_ecdsa_key",
)

DirectiveValue = Union[str, int, Tuple[Union[str, int], ...]]

# Read-only, insertion ordered. See renderer.render().
DirectiveMapping = Mapping[str, DirectiveValue]


class InitSystem(str, Enum):
    """Supported init systems."""

    SYSTEMD = "systemd"
    SYSVINIT = "sysvinit"
    UPSTART = "upstart"
    OPENRC = "openrc"
    UNKNOWN = "unknown"


class AddressFamily(str, Enum):
    """Values for the AddressFamily directive."""

    ANY = "any"
    INET = "inet"


class PolicyInput(NamedTuple):
    """High-level hardening policy.

    Every field has a concrete default, so ``PolicyInput()`` is the
    hardened baseline. Sequences are tuples to keep instances immutable.
    """

    cbc_required: bool = False
    weak_hmac_allowed: bool = False
    weak_kex_allowed: bool = False
    ports: Tuple[int, ...] = (22,)
    listen_addresses: Tuple[str, ...] = ("0.0.0.0",)
    host_key_files: Tuple[str, ...] = DEFAULT_HOST_KEY_FILES
    client_alive_interval: int = 600
    client_alive_count_max: int = 3
    allow_root_with_key: bool = False
    ipv6_enabled: bool = False
    use_pam: bool = False


class CommandResult(NamedTuple):
    """Result of command execution."""

    success: bool
    stdout: str
    stderr: str
    return_code: int = 0


class RollbackPoint(NamedTuple):
    """Backup information for rollback."""

    original_path: str
    backup_path: str
    timestamp: str


class ApplyResult(NamedTuple):
    """Outcome of applying a rendered configuration."""

    changed: bool
    path: str
    backup_path: Optional[str] = None
    restarted: bool = False

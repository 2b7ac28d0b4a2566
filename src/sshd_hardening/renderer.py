"""Policy renderer: maps a PolicyInput onto sshd_config directives."""

from types import MappingProxyType
from typing import Dict, Optional, Tuple

import structlog

from sshd_hardening.types import (
    AddressFamily,
    DirectiveMapping,
    DirectiveValue,
    PolicyInput,
)

logger = structlog.get_logger()

CIPHERS = "aes256-ctr,aes192-ctr,aes128-ctr"
CIPHERS_WITH_CBC = CIPHERS + ",aes256-cbc,aes192-cbc,aes128-cbc"

MACS = "hmac-sha2-512,hmac-sha2-256,hmac-ripemd160"
MACS_WITH_SHA1 = MACS + ",hmac-sha1"

KEX = (
    "diffie-hellman-group-exchange-sha256,"
    "diffie-hellman-group14-sha1,"
    "diffie-hellman-group-exchange-sha1"
)
KEX_WITH_GROUP1 = KEX + ",diffie-hellman-group1-exchange-sha1"

# Fixed directives, grouped by where they are emitted.
CONNECTION_DEFAULTS: Tuple[Tuple[str, DirectiveValue], ...] = (
    ("Protocol", 2),
    ("SyslogFacility", "AUTH"),
    ("LogLevel", "VERBOSE"),
    ("UsePrivilegeSeparation", "yes"),
    ("KeyRegenerationInterval", "1h"),
    ("ServerKeyBits", 2048),
    ("LoginGraceTime", "30s"),
    ("StrictModes", "yes"),
    ("MaxAuthTries", 2),
    ("MaxSessions", 10),
    ("MaxStartups", "10:30:100"),
)

AUTHENTICATION_DEFAULTS: Tuple[Tuple[str, DirectiveValue], ...] = (
    ("PubkeyAuthentication", "yes"),
    ("RSAAuthentication", "yes"),
    ("IgnoreRhosts", "yes"),
    ("IgnoreUserKnownHosts", "yes"),
    ("RhostsRSAAuthentication", "no"),
    ("HostbasedAuthentication", "no"),
    ("PasswordAuthentication", "no"),
    ("PermitEmptyPasswords", "no"),
    ("ChallengeResponseAuthentication", "no"),
    ("KerberosAuthentication", "no"),
    ("KerberosOrLocalPasswd", "no"),
    ("KerberosTicketCleanup", "yes"),
    ("GSSAPIAuthentication", "no"),
    ("GSSAPICleanupCredentials", "yes"),
)

SESSION_DEFAULTS: Tuple[Tuple[str, DirectiveValue], ...] = (
    ("PermitTunnel", "no"),
    ("AllowTcpForwarding", "no"),
    ("AllowAgentForwarding", "no"),
    ("GatewayPorts", "no"),
    ("X11Forwarding", "no"),
    ("X11UseLocalhost", "yes"),
    ("PermitUserEnvironment", "no"),
    ("PrintMotd", "no"),
    ("PrintLastLog", "no"),
    ("Banner", "none"),
    ("UseDNS", "no"),
    ("Compression", "no"),
)


def address_family(policy: PolicyInput) -> str:
    return (AddressFamily.ANY if policy.ipv6_enabled else AddressFamily.INET).value


def ciphers(policy: PolicyInput) -> str:
    return CIPHERS_WITH_CBC if policy.cbc_required else CIPHERS


def macs(policy: PolicyInput) -> str:
    return MACS_WITH_SHA1 if policy.weak_hmac_allowed else MACS


def kex_algorithms(policy: PolicyInput) -> str:
    return KEX_WITH_GROUP1 if policy.weak_kex_allowed else KEX


def permit_root_login(policy: PolicyInput) -> str:
    return "without-password" if policy.allow_root_with_key else "no"


def use_pam(policy: PolicyInput) -> str:
    return "yes" if policy.use_pam else "no"


def render(policy: Optional[PolicyInput] = None) -> DirectiveMapping:
    """Render a policy into an ordered, read-only directive mapping.

    The result depends only on ``policy``. Host key files are not part of
    the mapping; they are passed to the applier alongside it.

    Args:
        policy: Policy to render, the hardened baseline when omitted

    Returns:
        Mapping of directive name to value
    """
    if policy is None:
        policy = PolicyInput()

    directives: Dict[str, DirectiveValue] = {
        "Port": tuple(policy.ports),
        "AddressFamily": address_family(policy),
        "ListenAddress": tuple(policy.listen_addresses),
    }
    directives.update(CONNECTION_DEFAULTS)
    directives["PermitRootLogin"] = permit_root_login(policy)
    directives.update(AUTHENTICATION_DEFAULTS)
    directives["UsePAM"] = use_pam(policy)
    directives["TCPKeepAlive"] = "no"
    directives["ClientAliveInterval"] = policy.client_alive_interval
    directives["ClientAliveCountMax"] = policy.client_alive_count_max
    directives.update(SESSION_DEFAULTS)
    directives["Ciphers"] = ciphers(policy)
    directives["MACs"] = macs(policy)
    directives["KexAlgorithms"] = kex_algorithms(policy)

    logger.debug("Rendered policy", directives=len(directives))
    return MappingProxyType(directives)

"""Configuration management for sshd-hardening."""

import ipaddress
import os
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from sshd_hardening.exceptions import ValidationError
from sshd_hardening.types import DEFAULT_HOST_KEY_FILES, PolicyInput
from sshd_hardening.utils.validation import Validator


def _split(v: object) -> object:
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class PolicyConfig(BaseSettings):
    """Hardening policy settings."""

    cbc_required: bool = Field(default=False, description="Allow CBC ciphers")
    weak_hmac_allowed: bool = Field(default=False, description="Allow hmac-sha1")
    weak_kex_allowed: bool = Field(default=False, description="Allow group1 key exchange")
    ports: Annotated[List[int], NoDecode] = Field(
        default_factory=lambda: [22], min_length=1
    )
    listen_addresses: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["0.0.0.0"], min_length=1
    )
    host_key_files: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_HOST_KEY_FILES)
    )
    client_alive_interval: int = Field(default=600, ge=0)
    client_alive_count_max: int = Field(default=3, ge=0)
    allow_root_with_key: bool = Field(default=False)
    ipv6_enabled: bool = Field(default=False)
    use_pam: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="SSH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("ports", mode="before")
    @classmethod
    def parse_ports(cls, v: object) -> object:
        """Parse ports from comma-separated string or list."""
        return _split(v)

    @field_validator("ports")
    @classmethod
    def check_ports(cls, v: List[int]) -> List[int]:
        for port in v:
            try:
                Validator.validate_port(port)
            except ValidationError as e:
                raise ValueError(str(e)) from e
        return v

    @field_validator("listen_addresses", "host_key_files", mode="before")
    @classmethod
    def parse_list(cls, v: object) -> object:
        """Parse a list from comma-separated string or list."""
        v = _split(v)
        if isinstance(v, list):
            return [str(item).strip() for item in v if str(item).strip()]
        return v

    @field_validator("listen_addresses")
    @classmethod
    def check_listen_addresses(cls, v: List[str]) -> List[str]:
        for address in v:
            try:
                Validator.validate_listen_address(address)
            except ValidationError as e:
                raise ValueError(str(e)) from e
        return v

    def to_policy(self) -> PolicyInput:
        """Freeze settings into the renderer's input record."""
        return PolicyInput(
            cbc_required=self.cbc_required,
            weak_hmac_allowed=self.weak_hmac_allowed,
            weak_kex_allowed=self.weak_kex_allowed,
            ports=tuple(self.ports),
            listen_addresses=tuple(self.listen_addresses),
            host_key_files=tuple(self.host_key_files),
            client_alive_interval=self.client_alive_interval,
            client_alive_count_max=self.client_alive_count_max,
            allow_root_with_key=self.allow_root_with_key,
            ipv6_enabled=self.ipv6_enabled,
            use_pam=self.use_pam,
        )


class ApplierConfig(BaseSettings):
    """Where and how the rendered file is applied."""

    config_path: Path = Field(default=Path("/etc/ssh/sshd_config"))
    service_name: Optional[str] = Field(default=None)
    restart: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="SSHD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class BackupConfig(BaseSettings):
    """Backup configuration."""

    directory: Path = Field(default=Path("/root/sshd_backups"))

    model_config = SettingsConfigDict(
        env_prefix="BACKUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: object) -> None:
        """Initialize backup configuration."""
        super().__init__(**data)
        # Use user home if not root and nothing was configured
        if "directory" not in self.model_fields_set and os.geteuid() != 0:
            self.directory = Path.home() / "sshd_backups"


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file: Optional[Path] = Field(default=None)
    json_output: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class HardenerConfig(BaseSettings):
    """Main configuration container."""

    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    applier: ApplierConfig = Field(default_factory=ApplierConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_env(cls) -> "HardenerConfig":
        """Create configuration from environment variables."""
        return cls(
            policy=PolicyConfig(),
            applier=ApplierConfig(),
            backup=BackupConfig(),
            logging=LoggingConfig(),
        )

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues."""
        issues: List[str] = []
        policy = self.policy

        if not Validator.validate_path_writable(self.applier.config_path):
            issues.append(f"Cannot write {self.applier.config_path}")

        for key_file in policy.host_key_files:
            if not Path(key_file).exists():
                issues.append(f"Host key file not found: {key_file}")

        families = {
            ipaddress.ip_address(address).version for address in policy.listen_addresses
        }
        if policy.ipv6_enabled and 6 not in families:
            issues.append("IPv6 enabled but no IPv6 listen address configured")
        if not policy.ipv6_enabled and 6 in families:
            issues.append("IPv6 listen address configured but IPv6 is disabled")

        return issues

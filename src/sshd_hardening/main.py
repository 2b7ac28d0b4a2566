"""CLI entry point for sshd-hardening."""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional

import pydantic
import structlog

from sshd_hardening import __version__
from sshd_hardening.applier import SSHDConfigApplier, serialize
from sshd_hardening.config import (
    ApplierConfig,
    BackupConfig,
    HardenerConfig,
    LoggingConfig,
    PolicyConfig,
)
from sshd_hardening.exceptions import ConfigurationError, HardenerError
from sshd_hardening.log import close_log_file, configure_logging
from sshd_hardening.renderer import render

logger = structlog.get_logger()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="sshd-hardening",
        description="Render a hardened sshd_config from a few policy toggles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the rendered file without touching the system
  sshd-hardening --print

  # Allow CBC ciphers and key-only root login, listen on two ports
  sudo sshd-hardening --cbc-required --allow-root-with-key --port 22 --port 2222

  # Report whether the file would change
  sudo sshd-hardening --dry-run

Environment variables:
  SSH_PORTS               - Comma-separated list of ports
  SSH_LISTEN_ADDRESSES    - Comma-separated list of listen addresses
  SSH_HOST_KEY_FILES      - Comma-separated list of host key files
  SSH_CBC_REQUIRED        - Allow CBC ciphers (true/false)
  SSHD_CONFIG_PATH        - Target file (default /etc/ssh/sshd_config)
  SSHD_SERVICE_NAME       - Service to restart (detected when unset)
  LOG_LEVEL, LOG_FILE, LOG_JSON_OUTPUT
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    policy = parser.add_argument_group(
        "policy", "Toggles override SSH_* settings; --no-<flag> turns one off"
    )
    toggles = [
        ("--cbc-required", "Allow CBC ciphers"),
        ("--weak-hmac", "Allow hmac-sha1"),
        ("--weak-kex", "Allow diffie-hellman group1 key exchange"),
        ("--allow-root-with-key", "Permit root login with public keys only"),
        ("--ipv6", "Listen on IPv4 and IPv6"),
        ("--use-pam", "Enable PAM"),
    ]
    for flag, help_text in toggles:
        policy.add_argument(flag, action=argparse.BooleanOptionalAction, help=help_text)
    policy.add_argument(
        "--port", type=int, action="append", help="Port to listen on (repeatable)"
    )
    policy.add_argument(
        "--listen-address", action="append", help="Address to listen on (repeatable)"
    )
    policy.add_argument(
        "--host-key", action="append", help="Host key file (repeatable)"
    )
    policy.add_argument("--client-alive-interval", type=int, help="Seconds")
    policy.add_argument("--client-alive-count-max", type=int)

    parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Write the rendered file to stdout and exit",
    )
    parser.add_argument("--config-path", type=Path, help="Target sshd_config path")
    parser.add_argument("--backup-dir", type=Path, help="Custom backup directory")
    parser.add_argument(
        "--no-restart", action="store_true", help="Do not restart sshd after writing"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report changes without applying them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress non-error output")

    return parser.parse_args(argv)


def _policy_overrides(args: argparse.Namespace) -> Dict[str, object]:
    values = {
        "cbc_required": args.cbc_required,
        "weak_hmac_allowed": args.weak_hmac,
        "weak_kex_allowed": args.weak_kex,
        "allow_root_with_key": args.allow_root_with_key,
        "ipv6_enabled": args.ipv6,
        "use_pam": args.use_pam,
        "ports": args.port,
        "listen_addresses": args.listen_address,
        "host_key_files": args.host_key,
        "client_alive_interval": args.client_alive_interval,
        "client_alive_count_max": args.client_alive_count_max,
    }
    return {name: value for name, value in values.items() if value is not None}


def load_config(args: argparse.Namespace) -> HardenerConfig:
    """Load configuration from environment, .env and CLI flags.

    Args:
        args: Parsed command-line arguments

    Returns:
        Configuration object

    Raises:
        ConfigurationError: If any value fails validation
    """
    applier_overrides: Dict[str, object] = {}
    if args.config_path:
        applier_overrides["config_path"] = args.config_path
    if args.no_restart:
        applier_overrides["restart"] = False

    backup_overrides: Dict[str, object] = {}
    if args.backup_dir:
        backup_overrides["directory"] = args.backup_dir

    try:
        config = HardenerConfig(
            policy=PolicyConfig(**_policy_overrides(args)),
            applier=ApplierConfig(**applier_overrides),
            backup=BackupConfig(**backup_overrides),
            logging=LoggingConfig(),
        )
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    if args.verbose:
        config.logging.level = "DEBUG"
    elif args.quiet:
        config.logging.level = "ERROR"

    return config


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """Main entry point for CLI.

    Raises:
        SystemExit: Always exits with appropriate code
    """
    args = parse_args(argv)

    try:
        config = load_config(args)
        configure_logging(config.logging)

        policy = config.policy.to_policy()
        mapping = render(policy)

        if args.print_only:
            sys.stdout.write(serialize(mapping, policy.host_key_files))
            sys.exit(0)

        for issue in config.validate_config():
            logger.warning("Configuration issue", issue=issue)

        applier = SSHDConfigApplier(config, dry_run=args.dry_run)
        if config.applier.restart and not args.dry_run:
            for issue in applier.system.check_requirements():
                logger.warning("System requirement not met", issue=issue)

        result = applier.apply(mapping, policy.host_key_files)

        if not args.quiet:
            if not result.changed:
                print(f"{result.path} is up to date")
            elif args.dry_run:
                print(f"{result.path} would be updated")
            else:
                print(f"{result.path} updated")
                if result.backup_path:
                    print(f"  Backup: {result.backup_path}")
                print(f"  Service restarted: {'yes' if result.restarted else 'no'}")
                print(f"  Ports: {', '.join(str(p) for p in policy.ports)}")
                print(f"  Root login: {mapping['PermitRootLogin']}")

        sys.exit(0)

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)

    except HardenerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    finally:
        close_log_file()


if __name__ == "__main__":
    main()

"""Tests for the command-line interface."""

import io

import pytest
import structlog

from sshd_hardening import log as log_module
from sshd_hardening.config import LoggingConfig
from sshd_hardening.exceptions import ConfigurationError
from sshd_hardening.log import close_log_file, configure_logging
from sshd_hardening.main import load_config, main, parse_args


def run_main(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def test_print_renders_to_stdout(capsys):
    code = run_main(["--print", "--cbc-required", "--port", "22", "--port", "2222"])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert "Port 22" in out
    assert "Port 2222" in out
    assert (
        "Ciphers aes256-ctr,aes192-ctr,aes128-ctr,aes256-cbc,aes192-cbc,aes128-cbc"
        in out
    )
    assert "HostKey /etc/ssh/ssh_host_rsa_key" in out


def test_load_config_applies_flags(tmp_path):
    args = parse_args(
        [
            "--allow-root-with-key",
            "--ipv6",
            "--listen-address",
            "::",
            "--client-alive-interval",
            "60",
            "--config-path",
            str(tmp_path / "sshd_config"),
            "--no-restart",
            "--verbose",
        ]
    )

    config = load_config(args)
    policy = config.policy.to_policy()

    assert policy.allow_root_with_key
    assert policy.ipv6_enabled
    assert policy.listen_addresses == ("::",)
    assert policy.client_alive_interval == 60
    assert not policy.cbc_required
    assert config.applier.config_path == tmp_path / "sshd_config"
    assert not config.applier.restart
    assert config.logging.level == "DEBUG"


def test_load_config_rejects_invalid_port():
    with pytest.raises(ConfigurationError):
        load_config(parse_args(["--port", "70000"]))


def test_invalid_port_exits_with_error(capsys):
    assert run_main(["--print", "--port", "0"]) == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_apply_writes_file(tmp_path, capsys):
    target = tmp_path / "sshd_config"
    argv = [
        "--config-path",
        str(target),
        "--backup-dir",
        str(tmp_path / "backups"),
        "--no-restart",
        "--use-pam",
    ]

    assert run_main(argv) == 0
    assert "UsePAM yes" in target.read_text().splitlines()
    assert "updated" in capsys.readouterr().out

    assert run_main(argv) == 0
    assert "is up to date" in capsys.readouterr().out


def test_dry_run_leaves_target_alone(tmp_path, capsys):
    target = tmp_path / "sshd_config"

    assert run_main(["--config-path", str(target), "--dry-run"]) == 0
    assert not target.exists()
    assert "would be updated" in capsys.readouterr().out


def test_configure_logging_json():
    stream = io.StringIO()
    configure_logging(LoggingConfig(level="debug", json_output=True), stream=stream)

    structlog.get_logger().debug("hello", port=22)

    assert '"event": "hello"' in stream.getvalue()
    assert '"port": 22' in stream.getvalue()


def test_configure_logging_filters_level():
    stream = io.StringIO()
    configure_logging(LoggingConfig(level="WARNING"), stream=stream)

    structlog.get_logger().info("hidden")
    structlog.get_logger().warning("shown")

    assert "hidden" not in stream.getvalue()
    assert "shown" in stream.getvalue()


def test_cli_flag_turns_off_env_toggle(monkeypatch):
    monkeypatch.setenv("SSH_CBC_REQUIRED", "true")
    monkeypatch.setenv("SSH_USE_PAM", "true")

    policy = load_config(parse_args(["--no-cbc-required"])).policy.to_policy()

    assert not policy.cbc_required
    assert policy.use_pam


def test_unset_toggles_keep_env_values(monkeypatch):
    monkeypatch.setenv("SSH_WEAK_KEX_ALLOWED", "true")

    assert load_config(parse_args([])).policy.to_policy().weak_kex_allowed


def test_directory_target_reports_typed_error(tmp_path, capsys):
    target = tmp_path / "sshd_config"
    target.mkdir()

    assert run_main(["--config-path", str(target), "--no-restart"]) == 1
    err = capsys.readouterr().err
    assert "Error: Cannot read" in err
    assert "Unexpected error" not in err


def test_configure_logging_to_file(tmp_path):
    log_file = tmp_path / "sshd-hardening.log"
    configure_logging(LoggingConfig(file=log_file))

    structlog.get_logger().info("written", path="/etc/ssh/sshd_config")
    close_log_file()

    assert "written" in log_file.read_text(encoding="utf-8")


def test_reconfigure_closes_previous_log_file(tmp_path):
    configure_logging(LoggingConfig(file=tmp_path / "first.log"))
    handle = log_module._log_file

    configure_logging(LoggingConfig(), stream=io.StringIO())

    assert handle is not None and handle.closed
    assert log_module._log_file is None

"""Logging setup for sshd-hardening."""

import logging
import sys
from typing import IO, List, Optional

import structlog
from structlog.types import Processor

from sshd_hardening.config import LoggingConfig

# Open LOG_FILE handle; replaced and closed on reconfiguration.
_log_file: Optional[IO[str]] = None


def close_log_file() -> None:
    """Close the log file opened by configure_logging, if any."""
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None
        structlog.reset_defaults()


def configure_logging(config: LoggingConfig, stream: Optional[IO[str]] = None) -> None:
    """Configure structlog from logging settings.

    Args:
        config: Logging configuration
        stream: Output stream, stderr when neither this nor a log file is set
    """
    global _log_file
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    close_log_file()
    if stream is None:
        if config.file:
            _log_file = open(config.file, "a", encoding="utf-8")
            stream = _log_file
        else:
            stream = sys.stderr

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if config.json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

"""System logger for operational events.

Everything outside the auth audit trail goes here: provider call failures,
signing-key loading, configuration problems, the test bypass warning.

Handlers:
- stderr: ConsoleFormatter, level from LoggingConfig.log_level (INFO default)
- system.jsonl (optional): ISO8601Formatter, WARNING and above only

Messages are dicts with an "event" key and a human-readable "message".
Tokens, passwords and client secrets are never logged.
"""

from __future__ import annotations

__all__ = [
    "configure_system_logger",
    "get_system_logger",
    "jsonl_file_handler",
]

import logging
import sys
from pathlib import Path

from cognito_auth.constants import APP_NAME
from cognito_auth.telemetry.formatters import ConsoleFormatter, ISO8601Formatter

SYSTEM_LOGGER_NAME = f"{APP_NAME}.system"

_system_logger: logging.Logger | None = None


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.INFO)
    handler.setFormatter(ConsoleFormatter())
    return handler


def jsonl_file_handler(log_path: Path, level: int = logging.WARNING) -> logging.Handler:
    """Append-mode JSONL file handler; the parent directory is created."""
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter())
    return handler


def get_system_logger() -> logging.Logger:
    """Return the process-wide system logger, creating it on first use.

    The logger starts with the stderr handler only and does not propagate
    to the root logger, so host applications keep their own log setup.

    Example:
        >>> get_system_logger().warning({"event": "jwks_fetch_failed", "message": "..."})
    """
    global _system_logger

    if _system_logger is None:
        logger = logging.getLogger(SYSTEM_LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        for stale in list(logger.handlers):
            stale.close()
            logger.removeHandler(stale)
        logger.addHandler(_console_handler())
        _system_logger = logger

    return _system_logger


def configure_system_logger(log_level: str = "INFO", log_path: Path | None = None) -> None:
    """Apply the console level and attach the JSONL file handler.

    Only the first log_path ever configured gets a file handler; later
    calls adjust the console level only.

    Args:
        log_level: Console level name ("DEBUG", "INFO", "WARNING", "ERROR").
        log_path: Path to system.jsonl, or None for console only.
    """
    logger = get_system_logger()
    level = logging.getLevelName(log_level.upper())

    has_file_handler = False
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            has_file_handler = True
        else:
            handler.setLevel(level)

    if log_path is not None and not has_file_handler:
        logger.addHandler(jsonl_file_handler(log_path))

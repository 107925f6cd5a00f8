"""
Run Log
~~~~~~~

Leveled console output mirrored into an append-only log file. Each
file line reads ``[timestamp] [LEVEL] message`` with levels
``INFO``, ``WARN``, ``ERROR`` and ``SUCCESS`` (plus ``DEBUG`` when
verbose).
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

__all__ = [
    "SUCCESS",
    "RunLogFormatter",
    "ConsoleFormatter",
    "configure_run_logging",
    "log_success",
    "PACKAGE_LOGGER",
]

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

PACKAGE_LOGGER = "plyra_rollback"

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUCCESS: "SUCCESS",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

_HANDLER_MARK = "_plyra_rollback_handler"


def _level_name(levelno: int) -> str:
    return _LEVEL_NAMES.get(levelno, logging.getLevelName(levelno))


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    name = level.upper()
    if name == "WARN":
        return logging.WARNING
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


class RunLogFormatter(logging.Formatter):
    """Formats records as ``[timestamp] [LEVEL] message``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds")
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"[{timestamp}] [{_level_name(record.levelno)}] {message}"


class ConsoleFormatter(logging.Formatter):
    """Console variant: level tag only for anything other than INFO."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno == logging.INFO:
            return message
        return f"[{_level_name(record.levelno)}] {message}"


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log ``msg`` at the SUCCESS level."""
    logger.log(SUCCESS, msg, *args)


def configure_run_logging(
    log_file: str | os.PathLike[str] | None = None,
    level: str | int = "INFO",
    stream: TextIO | None = None,
) -> list[logging.Handler]:
    """
    Attach the console and file handlers to the package logger.

    Handlers installed by a previous call are removed and closed first,
    so repeated CLI invocations in one process don't duplicate output.

    Args:
        log_file: Append-only log file; skipped when None.
        level: Minimum level for both handlers.
        stream: Console stream, stderr by default.

    Returns:
        The handlers that were installed.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            package_logger.removeHandler(handler)
            handler.close()

    numeric_level = _parse_level(level)
    package_logger.setLevel(numeric_level)

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(ConsoleFormatter())
    handlers: list[logging.Handler] = [console]

    if log_file is not None:
        path = Path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as exc:
            package_logger.warning("Cannot open log file %s: %s", path, exc)
        else:
            file_handler.setFormatter(RunLogFormatter())
            handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(numeric_level)
        setattr(handler, _HANDLER_MARK, True)
        package_logger.addHandler(handler)

    return handlers

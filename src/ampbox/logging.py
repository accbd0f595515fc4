"""Structured logging configuration for ampbox.

Provides dual output strategy:
- console.print() for user-facing messages (Rich formatting)
- logging module for debugging/monitoring (structured, filterable)

Each phase (host launcher, container entrypoint) can additionally keep a
plain-text log file under the data directory, rotated at midnight and kept
for LOG_RETENTION_DAYS days, so logs survive container teardown.

Usage:
    from ampbox.logging import get_logger
    logger = get_logger(__name__)
    logger.debug("Docker command: %s", cmd)
    logger.info("Configuration written")

Enable verbose logging via:
    - CLI flag: ampbox --debug
    - Environment: AMPBOX_DEBUG=1
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from .constants import LOG_RETENTION_DAYS

ROOT_LOGGER_NAME = "ampbox"

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}
_initialized = False

# Log format for structured output
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_log_level() -> int:
    """Determine log level from environment."""
    if os.environ.get("AMPBOX_DEBUG", "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    return logging.WARNING


def _file_handlers(root_logger: logging.Logger) -> list[TimedRotatingFileHandler]:
    return [h for h in root_logger.handlers if isinstance(h, TimedRotatingFileHandler)]


def _init_logging() -> None:
    """Initialize logging configuration (called once)."""
    global _initialized
    if _initialized:
        return

    level = _get_log_level()
    is_debug = level == logging.DEBUG

    # Configure root ampbox logger
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    # Only add handler if none exist (avoid duplicate handlers)
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        formatter = logging.Formatter(
            LOG_FORMAT_DEBUG if is_debug else LOG_FORMAT,
            datefmt=DATE_FORMAT,
        )
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Module name (typically __name__).

    Returns:
        Configured logger instance.
    """
    _init_logging()

    # Normalize name to ampbox namespace
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)

    return _loggers[name]


def set_console_level(level: int) -> None:
    """Set the stderr log level, keeping attached phase log files at INFO or lower."""
    _init_logging()
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    file_handlers = _file_handlers(root_logger)

    logger_level = level
    for fh in file_handlers:
        logger_level = min(logger_level, fh.level)
    root_logger.setLevel(logger_level)

    fmt = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT
    for handler in root_logger.handlers:
        if handler in file_handlers:
            continue
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))


def set_debug(enabled: bool = True) -> None:
    """Enable or disable debug logging.

    Called by CLI when --debug flag is used.

    Args:
        enabled: If True, set log level to DEBUG.
    """
    set_console_level(logging.DEBUG if enabled else logging.WARNING)


def add_phase_log_file(log_dir: Path, phase: str) -> TimedRotatingFileHandler:
    """Attach a rotating plain-text log file for one phase.

    Args:
        log_dir: Directory for log files (created if missing).
        phase: Phase name, used as the file stem (e.g. "launcher").

    Returns:
        The attached handler (callers may remove it again).

    Raises:
        OSError: If the directory or file cannot be created.
    """
    _init_logging()
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        log_dir / f"{phase}.log",
        when="midnight",
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.addHandler(handler)
    if root_logger.level > logging.INFO:
        root_logger.setLevel(logging.INFO)
    return handler


def remove_log_handler(handler: logging.Handler) -> None:
    """Detach and close a handler previously returned by add_phase_log_file."""
    logging.getLogger(ROOT_LOGGER_NAME).removeHandler(handler)
    handler.close()


def flush_all() -> None:
    """Flush every ampbox handler (used before the process image is replaced)."""
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()

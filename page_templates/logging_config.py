"""Structured logging for template registration and rendering.

Every record carries its context (template, layout, request) as ``extra``
fields. Console output is human-readable unless JSON is requested; an optional
log file always receives JSON lines, rotated at 10MB with 5 backups.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers that are noisy at INFO and above
QUIET_LOGGERS = ("uvicorn.access",)


def _json_formatter() -> logging.Formatter:
    return jsonlogger.JsonFormatter(JSON_FORMAT, timestamp=True)


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    json_console: bool = False,
) -> logging.Logger:
    """Install console and optional JSON file handlers on the root logger.

    Args:
        log_level: Logging level name for the root logger and console
        log_file: JSON log file, or None to log to the console only
        json_console: Write console records as JSON instead of plain text

    Returns:
        Configured root logger instance
    """
    level = logging.getLevelName(log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if json_console:
        console_handler.setFormatter(_json_formatter())
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
        file_handler.setFormatter(_json_formatter())
        file_handler.setLevel(logging.DEBUG)  # Registration details always reach the file
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (typically __name__)."""
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Log ``message`` at ``level`` with structured fields attached to the record.

    Field names must not collide with LogRecord attributes such as ``name``
    or ``filename``; use ``template`` and ``template_file`` instead.
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=extra_fields)

"""
Centralized Logging Module for toolbridge

Usage:
    from toolbridge.core.logging import get_standard_logger, configure_logging

    configure_logging(level=logging.INFO, json_format=False)

    logger = get_standard_logger("toolbridge.invocation")
    logger.info("Tool invoked", extra={"tool": "search"})

Environment Variables:
    TOOLBRIDGE_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    TOOLBRIDGE_LOG_FORMAT: Set format (console, json)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# =============================================================================
# Constants
# =============================================================================

ROOT_LOGGER_NAME = "toolbridge"
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = "console"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
        "asctime",
    )
)


# =============================================================================
# Formatters
# =============================================================================


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Example output:
        {
            "timestamp": "2026-02-17T10:30:00.000000+00:00",
            "level": "INFO",
            "logger": "toolbridge.invocation",
            "message": "Tool invoked",
            "extra": {"tool": "search"}
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def parse_level(level: str | int | None, default: int = DEFAULT_LOG_LEVEL) -> int:
    """Numeric level for a name such as "debug"; unknown names give ``default``"""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level or "").strip().upper())
    return value if isinstance(value, int) else default


def _level_from_env() -> int:
    return parse_level(os.getenv("TOOLBRIDGE_LOG_LEVEL"))


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JSONFormatter()
    return logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT)


# =============================================================================
# Factory Functions
# =============================================================================


def get_standard_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a standard Python logger under the toolbridge hierarchy.

    Handlers live on the ``toolbridge`` root logger (see ``configure_logging``);
    child loggers propagate to it.

    Args:
        name: Logger name, e.g. "toolbridge.binding"
        level: Optional log level override

    Returns:
        Standard logging.Logger instance
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_log_level(level: int) -> None:
    """Set the level of every toolbridge logger"""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


def configure_logging(
    level: int | None = None,
    json_format: bool | None = None,
    stream: Any = None,
) -> logging.Logger:
    """
    Configure toolbridge logging globally.

    Should be called once at application startup. Replaces any handler
    previously installed on the ``toolbridge`` root logger.

    Args:
        level: Log level (default: from TOOLBRIDGE_LOG_LEVEL)
        json_format: Enable JSON formatting (default: from TOOLBRIDGE_LOG_FORMAT)
        stream: Output stream (default: stderr, so stdio transports stay clean)

    Returns:
        The configured root logger
    """
    if level is None:
        level = _level_from_env()
    if json_format is None:
        json_format = os.getenv("TOOLBRIDGE_LOG_FORMAT", DEFAULT_LOG_FORMAT) == "json"

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_make_formatter(json_format))
    root_logger.addHandler(handler)

    return root_logger


__all__ = [
    "JSONFormatter",
    "configure_logging",
    "get_standard_logger",
    "parse_level",
    "set_log_level",
]

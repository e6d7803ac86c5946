"""
Log formatters: JSON, plain text and colored text.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord has; everything else came in through ``extra``.
_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Structured fields passed through ``extra``."""
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _RESERVED and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Example output:
        {"timestamp": "2024-01-15T10:30:45.123000+00:00", "level": "INFO",
         "logger": "fetch_client", "message": "Request completed",
         "method": "GET", "status": 200, "correlation_id": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(record_extras(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """
    ``[timestamp] [level] [logger] message key=value ...``
    """

    def __init__(self):
        super().__init__(
            fmt='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        base_msg = super().format(record)
        extras = " ".join(f"{key}={value}" for key, value in record_extras(record).items())
        return f"{base_msg} {extras}" if extras else base_msg


class ColoredFormatter(TextFormatter):
    """Text formatter with ANSI-colored level names."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[1;31m', # Bold Red
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def get_formatter(format_type: str) -> logging.Formatter:
    """
    Get formatter by type.

    Raises:
        ValueError: If format_type is unknown
    """
    formatters = {
        "json": JSONFormatter,
        "text": TextFormatter,
        "colored": ColoredFormatter,
    }

    formatter_class = formatters.get(format_type.lower())
    if not formatter_class:
        raise ValueError(
            f"Unknown format type: {format_type}. "
            f"Available: {', '.join(formatters.keys())}"
        )

    return formatter_class()

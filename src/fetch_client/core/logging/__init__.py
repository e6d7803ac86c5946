"""
Logging system for fetch-client.

Example:
    >>> from fetch_client.core.logging import LoggingConfig
    >>> config = LoggingConfig.create(
    ...     level="DEBUG",
    ...     format="json",
    ...     enable_file=True,
    ...     file_path="/var/log/fetch.log"
    ... )
    >>> fetch = create_fetch(logging=config)
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import FetchLogger, get_logger, configure_logging
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    clear_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "FetchLogger",
    "get_logger",
    "configure_logging",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    "clear_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]

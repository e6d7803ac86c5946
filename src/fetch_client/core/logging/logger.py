"""
Request lifecycle logger.

``FetchLogger`` wraps a stdlib logger with configured handlers, formatters
and filters. Structured fields are passed as keyword arguments and are masked
with ``mask_sensitive_data`` before they reach the handlers.
"""

import logging
from typing import Any, Optional, TYPE_CHECKING

from .config import LoggingConfig, LogLevel
from .formatters import get_formatter
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data, sanitize_url

if TYPE_CHECKING:
    from ..context import FetchContext
    from ..response import FetchResponse


class FetchLogger:
    """
    Logger used by the request pipeline.

    Example:
        >>> logger = FetchLogger(LoggingConfig.create(level="DEBUG", format="colored"))
        >>> logger.info("Request started", method="GET", url="https://api.com")
        >>> logger.close()
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: Optional[str] = None):
        self.config = config or LoggingConfig()
        self.name = name or self.config.name
        self._closed = False

        self._logger = logging.getLogger(self.name)
        self._logger.setLevel(self._get_level(self.config.level))
        self._logger.propagate = False

        # Reinitialization replaces handlers
        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)

        filters = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)
        level = self._get_level(self.config.level)

        if self.config.enable_console:
            self._logger.addHandler(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters
            ))

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    def _log(self, level: int, message: str, exc_info: Any = None, **kwargs: Any) -> None:
        if self._closed or not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, exc_info=exc_info, extra=mask_sensitive_data(kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log with the active exception's traceback."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)

    # ==================== Жизненный цикл запроса ====================

    def request_started(self, context: "FetchContext", url: str) -> None:
        fields = dict(
            method=context.options.method,
            url=sanitize_url(url),
            attempt=context.attempt,
        )
        if self.config.log_headers and context.options.headers is not None:
            fields["headers"] = dict(context.options.headers.items())
        self.debug("Request started", **fields)

    def request_completed(self, context: "FetchContext", response: "FetchResponse", duration_ms: float) -> None:
        self.info(
            "Request completed",
            method=context.options.method,
            url=sanitize_url(context.request),
            status=response.status,
            attempt=context.attempt,
            duration_ms=round(duration_ms, 2),
        )

    def request_retry(self, context: "FetchContext", delay_ms: float) -> None:
        self.warning(
            "Request error (will retry)",
            method=context.options.method,
            url=sanitize_url(context.request),
            attempt=context.attempt,
            status=context.response.status if context.response is not None else None,
            error=str(context.error) if context.error is not None else None,
            delay_ms=delay_ms,
        )

    def request_failed(self, context: "FetchContext", error: BaseException) -> None:
        self.error(
            "Request failed",
            method=context.options.method,
            url=sanitize_url(context.request),
            attempt=context.attempt,
            status=context.response.status if context.response is not None else None,
            error=str(error),
            error_type=type(error).__name__,
        )

    def close(self) -> None:
        """
        Flush and close all handlers. Idempotent.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_logger: Optional[FetchLogger] = None


def get_logger(config: Optional[LoggingConfig] = None) -> FetchLogger:
    """
    Global logger instance; ``config`` is only used on first call.
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = FetchLogger(config)

    return _default_logger


def configure_logging(config: LoggingConfig) -> FetchLogger:
    """Replace the global logger with a newly configured one."""
    global _default_logger
    if _default_logger is not None:
        _default_logger.close()
    _default_logger = FetchLogger(config)
    return _default_logger

"""
Logging configuration for fetch-client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration of the request lifecycle logger.

    Attributes:
        level: Log level
        format: Output format (json, text, colored)
        enable_console: Log to stdout
        enable_file: Log to a rotating file
        file_path: Log file path (required if enable_file=True)
        max_bytes: Rotation size
        backup_count: Rotated files to keep
        enable_correlation_id: Tag records with the call's request id
        log_headers: Include (masked) request headers in "Request started"
        extra_fields: Static fields added to every record
        name: Python logger name

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json")
        >>> fetch = create_fetch({"base_url": "https://api.example.com"}, logging=config)
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_correlation_id: bool = True
    log_headers: bool = False
    extra_fields: Dict[str, Any] = field(default_factory=dict)
    name: str = "fetch_client"

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        extra_fields: Optional[Dict[str, Any]] = None,
        **kwargs: Any
    ) -> "LoggingConfig":
        """
        Create LoggingConfig from string level/format.

        Example:
            >>> LoggingConfig.create(level="debug", format="JSON").level
            <LogLevel.DEBUG: 'DEBUG'>
        """
        return cls(
            level=LogLevel(level.upper()),
            format=LogFormat(format.lower()),
            extra_fields=extra_fields or {},
            **kwargs
        )

"""
Configuration loader from environment variables and .env files.
"""

import os
from typing import Any, Optional, Tuple, TYPE_CHECKING

from ..logging.config import LoggingConfig, LogFormat, LogLevel
from ..options import FetchOptions
from .validator import FetchClientSettings

if TYPE_CHECKING:
    from ...client import Fetch


def get_env_file_path(profile: Optional[str] = None) -> str:
    """
    .env file path for a profile.

    Example:
        >>> get_env_file_path("production")
        '.env.production'
        >>> get_env_file_path(None)  # FETCH_CLIENT_ENV unset
        '.env'
    """
    if profile is None:
        profile = os.getenv("FETCH_CLIENT_ENV")

    if not profile:
        return ".env"

    return f".env.{profile}"


def load_from_env(
    profile: Optional[str] = None,
    env_file: Optional[str] = None,
    **overrides: Any
) -> Tuple[FetchOptions, Optional[LoggingConfig]]:
    """
    Load client defaults and logging config from the environment.

    Priority (highest to lowest):
    1. **overrides - explicit settings fields
    2. Environment variables (FETCH_CLIENT_*)
    3. .env file (profile-specific or default)
    4. Defaults

    Returns:
        (FetchOptions, LoggingConfig or None when logging is disabled)

    Example:
        >>> defaults, logging_config = load_from_env(profile="production", retry=3)
    """
    if env_file is None:
        env_file = get_env_file_path(profile)

    settings = FetchClientSettings(_env_file=env_file, **overrides)

    options = FetchOptions(
        base_url=settings.base_url or None,
        timeout=settings.timeout,
        retry=settings.retry,
        retry_delay=settings.retry_delay or None,
        retry_status_codes=settings.retry_status_codes,
        headers=settings.headers or None,
        response_type=settings.response_type,
        ignore_response_error=settings.ignore_response_error or None,
    )

    logging_config = None
    if settings.log_enabled and (settings.log_enable_console or settings.log_enable_file):
        logging_config = LoggingConfig(
            level=LogLevel(settings.log_level),
            format=LogFormat(settings.log_format),
            enable_console=settings.log_enable_console,
            enable_file=settings.log_enable_file,
            file_path=settings.log_file_path,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count,
            enable_correlation_id=settings.log_enable_correlation_id,
            log_headers=settings.log_headers,
        )

    return options, logging_config


def create_fetch_from_env(
    profile: Optional[str] = None,
    env_file: Optional[str] = None,
    **overrides: Any
) -> "Fetch":
    """
    Fetch client configured from the environment.

    Example:
        >>> async with create_fetch_from_env(profile="staging") as api:
        ...     await api("/health")
    """
    from ...client import create_fetch

    options, logging_config = load_from_env(profile, env_file, **overrides)
    return create_fetch(options, logging=logging_config)

"""
Environment configuration for fetch-client.

Example:
    >>> from fetch_client.core.env_config import load_from_env
    >>> defaults, logging_config = load_from_env(profile="production")
"""

from .loader import create_fetch_from_env, get_env_file_path, load_from_env
from .validator import FetchClientSettings

__all__ = [
    "load_from_env",
    "create_fetch_from_env",
    "get_env_file_path",
    "FetchClientSettings",
]

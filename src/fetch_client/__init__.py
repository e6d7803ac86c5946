"""fetch-client - async fetch with hooks, retry, timeouts and typed errors."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .client import Fetch, create_fetch
from .core.cancellation import AbortController, AbortSignal
from .core.context import FetchContext
from .core.exceptions import (
    FetchClientException,
    AbortError,
    TimeoutError,
    NetworkError,
    ConnectionError,
    ConfigurationError,
    FetchError,
    create_fetch_error,
)
from .core.options import FetchOptions, merge_options
from .core.response import FetchResponse, ResponseType, ResponseTypeResolver
from .core.retry_engine import CallbackDelay, ConstantDelay, ExponentialBackoff, RetryDelay
from .core.logging import LoggingConfig
from .core.env_config import create_fetch_from_env, load_from_env
from .transports import HttpxTransport, RawRequest, RequestsTransport
from .utils.payload import FormData

# NullHandler: клиент молчит, пока логирование не настроено
logging.getLogger('fetch_client').addHandler(logging.NullHandler())

try:
    __version__ = version("fetch-client-core")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

# Клиент по умолчанию
fetch = create_fetch()

__all__ = [
    # Client
    "fetch",
    "Fetch",
    "create_fetch",
    "create_fetch_from_env",
    "load_from_env",
    # Options & context
    "FetchOptions",
    "merge_options",
    "FetchContext",
    "FetchResponse",
    "ResponseType",
    "ResponseTypeResolver",
    "FormData",
    # Retry delays
    "RetryDelay",
    "ConstantDelay",
    "CallbackDelay",
    "ExponentialBackoff",
    # Cancellation
    "AbortController",
    "AbortSignal",
    # Exceptions
    "FetchClientException",
    "AbortError",
    "TimeoutError",
    "NetworkError",
    "ConnectionError",
    "ConfigurationError",
    "FetchError",
    "create_fetch_error",
    # Transports
    "HttpxTransport",
    "RequestsTransport",
    "RawRequest",
    # Logging
    "LoggingConfig",
]

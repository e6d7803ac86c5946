"""Core fetch-client модули."""

from .cancellation import AbortController, AbortSignal, run_until_aborted, timeout_signal
from .context import FetchContext
from .exceptions import (
    FetchClientException,
    AbortError,
    TimeoutError,
    NetworkError,
    ConnectionError,
    ConfigurationError,
    FetchError,
    create_fetch_error,
    classify_httpx_exception,
    classify_requests_exception,
)
from .hooks import HOOK_NAMES, HookChain, run_hooks
from .options import FetchOptions, merge_headers, merge_options
from .response import (
    FetchResponse,
    ResponseType,
    ResponseTypeResolver,
    detect_response_type,
    resolve_response_type,
    safe_json_loads,
)
from .retry_engine import (
    DEFAULT_RETRY_STATUS_CODES,
    CallbackDelay,
    ConstantDelay,
    ExponentialBackoff,
    RetryDelay,
    RetryEngine,
)

__all__ = [
    # Cancellation
    "AbortController",
    "AbortSignal",
    "run_until_aborted",
    "timeout_signal",
    # Context
    "FetchContext",
    # Exceptions
    "FetchClientException",
    "AbortError",
    "TimeoutError",
    "NetworkError",
    "ConnectionError",
    "ConfigurationError",
    "FetchError",
    "create_fetch_error",
    "classify_httpx_exception",
    "classify_requests_exception",
    # Hooks
    "HOOK_NAMES",
    "HookChain",
    "run_hooks",
    # Options
    "FetchOptions",
    "merge_headers",
    "merge_options",
    # Response
    "FetchResponse",
    "ResponseType",
    "ResponseTypeResolver",
    "detect_response_type",
    "resolve_response_type",
    "safe_json_loads",
    # Retry
    "DEFAULT_RETRY_STATUS_CODES",
    "CallbackDelay",
    "ConstantDelay",
    "ExponentialBackoff",
    "RetryDelay",
    "RetryEngine",
]

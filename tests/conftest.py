"""
Pytest configuration and fixtures for fetch-client-core tests.
"""

import asyncio
import json
from typing import Any, Callable, List, Optional, Union

import pytest

from fetch_client.client import create_fetch
from fetch_client.core.logging.config import LoggingConfig
from fetch_client.core.response import FetchResponse
from fetch_client.transports.base import RawRequest

REASONS = {
    200: "OK", 201: "Created", 204: "No Content", 304: "Not Modified",
    400: "Bad Request", 403: "Forbidden", 404: "Not Found", 408: "Request Timeout",
    429: "Too Many Requests", 500: "Internal Server Error", 503: "Service Unavailable",
}


def make_response(
    status: int = 200,
    body: Union[None, bytes, str, dict, list] = None,
    headers: Optional[dict] = None,
    url: str = "",
) -> FetchResponse:
    """FetchResponse with an in-memory body; dict/list bodies are sent as JSON."""
    headers = dict(headers or {})
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
        headers.setdefault("content-type", "application/json")
    if isinstance(body, str):
        body = body.encode()
    return FetchResponse(
        status=status,
        status_text=REASONS.get(status, ""),
        headers=headers,
        url=url,
        content=body if body is not None else b"",
    )


class StubSend:
    """
    Raw send double: records every request and answers from ``handler``.

    ``handler`` may be a FetchResponse, an exception, or a callable
    ``(request, call_index) -> response`` (sync or async).
    """

    def __init__(self, handler: Any = None):
        self.handler = handler if handler is not None else make_response(200, {"ok": True})
        self.requests: List[RawRequest] = []
        self.signals: List[Any] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def __call__(self, request: RawRequest, signal=None) -> FetchResponse:
        self.requests.append(request)
        self.signals.append(signal)
        handler = self.handler
        if isinstance(handler, BaseException):
            raise handler
        if isinstance(handler, FetchResponse):
            return handler
        result = handler(request, len(self.requests) - 1)
        if asyncio.iscoroutine(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def stub_send():
    """Raw send answering 200 {"ok": true}."""
    return StubSend()


@pytest.fixture
def make_fetch(stub_send) -> Callable:
    """Factory for clients over ``stub_send``."""
    def factory(defaults=None, send=None, **kwargs):
        return create_fetch(defaults, send=send or stub_send, **kwargs)
    return factory


@pytest.fixture
def logging_config_with_file(tmp_path):
    """LoggingConfig writing JSON to a temporary file."""
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(tmp_path / "fetch.log"),
    )

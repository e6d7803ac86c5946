# src/fetch_client/transports/requests_transport.py
"""
Raw send на базе requests.Session.

Синхронный запрос выполняется в executor'е event loop'а. Поток нельзя
прервать: при отмене пайплайн перестаёт ждать результат, а сам запрос
завершается в фоне и его результат отбрасывается.
"""

import asyncio
import functools
from typing import Optional, TYPE_CHECKING

import httpx
import requests

from ..core.exceptions import ConfigurationError, classify_requests_exception
from ..core.response import FetchResponse
from ..utils.payload import FormData
from .base import RawRequest

if TYPE_CHECKING:
    from ..core.cancellation import AbortSignal


class RequestsTransport:
    """
    Транспорт на requests.

    Example:
        >>> session = requests.Session()
        >>> session.verify = "/etc/ssl/corp-ca.pem"
        >>> fetch = create_fetch(send=RequestsTransport(session))

    Args:
        session: Готовая requests.Session (закрывается вызывающим кодом)
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    async def __aenter__(self) -> "RequestsTransport":
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None

    def _send_sync(self, request: RawRequest) -> FetchResponse:
        session = self._get_session()
        kwargs: dict = dict(request.extra)
        body = request.body

        if isinstance(body, FormData):
            kwargs["data"] = body.fields
            if body.files:
                kwargs["files"] = body.files
        elif body is not None:
            kwargs["data"] = body

        if request.timeout:
            kwargs.setdefault("timeout", request.timeout / 1000)

        try:
            response = session.request(
                request.method,
                request.url,
                headers=dict(request.headers.items()),
                **kwargs,
            )
        except requests.exceptions.RequestException as exc:
            raise classify_requests_exception(exc, request.url) from exc

        return FetchResponse(
            status=response.status_code,
            status_text=response.reason or "",
            headers=httpx.Headers(list(response.headers.items())),
            url=response.url,
            content=response.content,
        )

    async def __call__(self, request: RawRequest, signal: Optional["AbortSignal"] = None) -> FetchResponse:
        if hasattr(request.body, "__aiter__"):
            raise ConfigurationError("RequestsTransport does not support async iterable bodies")
        if signal is not None:
            signal.throw_if_aborted()

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self._send_sync, request))

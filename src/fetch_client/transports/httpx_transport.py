# src/fetch_client/transports/httpx_transport.py
"""
Raw send на базе httpx.AsyncClient (транспорт по умолчанию).

Ответ читается потоково: тело забирается только когда пайплайн его парсит,
поэтому ответы без тела и stream-ответы не буферизуются.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from ..core.exceptions import classify_httpx_exception
from ..core.response import FetchResponse
from ..utils.payload import FormData, is_stream_like
from .base import RawRequest

if TYPE_CHECKING:
    from ..core.cancellation import AbortSignal

# Ключи extra, которые httpx принимает в send(), а не в build_request()
_SEND_KWARGS = ("follow_redirects", "auth")
_CHUNK_SIZE = 64 * 1024


class HttpxTransport:
    """
    Транспорт на httpx.

    Example:
        >>> async with HttpxTransport(verify=False) as transport:
        ...     fetch = create_fetch(send=transport)
        ...     await fetch("https://example.com")

    Args:
        client: Готовый httpx.AsyncClient (закрывается вызывающим кодом)
        **client_kwargs: Параметры для httpx.AsyncClient, если клиент создаётся здесь
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_kwargs: Any):
        self._client = client
        self._owns_client = client is None
        # Таймаут задаётся через AbortSignal, httpx-таймаут по умолчанию выключен
        client_kwargs.setdefault("timeout", None)
        client_kwargs.setdefault("follow_redirects", True)
        self._client_kwargs = client_kwargs

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs)
        return self._client

    async def __aenter__(self) -> "HttpxTransport":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть клиент и освободить соединения."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build(self, client: httpx.AsyncClient, request: RawRequest) -> httpx.Request:
        kwargs: Dict[str, Any] = {
            key: value for key, value in request.extra.items() if key not in _SEND_KWARGS
        }
        body = request.body

        if isinstance(body, FormData):
            data: Dict[str, Any] = {}
            for name, value in body.fields:
                data.setdefault(name, []).append(value)
            kwargs["data"] = {k: v[0] if len(v) == 1 else v for k, v in data.items()}
            if body.files:
                kwargs["files"] = body.files
        elif is_stream_like(body) and not hasattr(body, "__aiter__"):
            # AsyncClient принимает только async-потоки
            kwargs["content"] = _aiter_sync_body(body)
        elif body is not None:
            kwargs["content"] = body

        return client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            **kwargs,
        )

    async def __call__(self, request: RawRequest, signal: Optional["AbortSignal"] = None) -> FetchResponse:
        client = self._get_client()
        send_kwargs = {key: request.extra[key] for key in _SEND_KWARGS if key in request.extra}

        try:
            http_request = self._build(client, request)
            response = await client.send(http_request, stream=True, **send_kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise classify_httpx_exception(exc, request.url) from exc

        return FetchResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=response.headers,
            url=str(response.url),
            stream=_iter_body(response, request.url),
            on_close=response.aclose,
        )


async def _iter_body(response: httpx.Response, url: str):
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as exc:
        raise classify_httpx_exception(exc, url) from exc


async def _aiter_sync_body(body: Any):
    """Sync-итератор или файл как async-поток чанков."""
    if hasattr(body, "read"):
        while True:
            chunk = body.read(_CHUNK_SIZE)
            if not chunk:
                return
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk
    else:
        for chunk in body:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)

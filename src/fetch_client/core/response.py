"""
Responses and response-type detection.

``FetchResponse`` is what every transport hands back to the pipeline: status
line, headers and a lazily read body. The pipeline stores the parsed body in
``response.data``.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, FrozenSet, Mapping, Optional, Union

import httpx


class ResponseType(str, Enum):
    """Parsing strategies for a response body."""
    JSON = "json"
    TEXT = "text"
    BLOB = "blob"
    ARRAY_BUFFER = "arrayBuffer"
    STREAM = "stream"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.replace("_", "").lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        return None


JSON_RE = re.compile(r"^application/(?:[\w!#$%&*.^`~-]*\+)?json(;.+)?$", re.IGNORECASE)

TEXT_TYPES: FrozenSet[str] = frozenset({
    "image/svg",
    "application/xml",
    "application/xhtml",
    "application/html",
})


@dataclass(frozen=True)
class ResponseTypeResolver:
    """
    Choose a parsing strategy from an explicit hint or the Content-Type.

    Args:
        empty_type: Strategy when Content-Type is missing (APIs often omit it)
        fallback_type: Strategy for unknown, presumably binary, content
        text_types: Media types parsed as text besides ``text/*``

    Examples:
        >>> resolver = ResponseTypeResolver()
        >>> resolver.resolve(None, "application/problem+json; charset=utf-8")
        <ResponseType.JSON: 'json'>
        >>> ResponseTypeResolver(empty_type=ResponseType.TEXT).resolve(None, "")
        <ResponseType.TEXT: 'text'>
    """
    empty_type: ResponseType = ResponseType.JSON
    fallback_type: ResponseType = ResponseType.BLOB
    text_types: FrozenSet[str] = field(default_factory=lambda: TEXT_TYPES)

    def resolve(
        self,
        hint: Optional[Union[str, ResponseType]],
        content_type: Optional[str]
    ) -> ResponseType:
        if hint:
            return ResponseType(hint)

        if not content_type:
            return self.empty_type

        # Value might look like: `application/json; charset=utf-8`
        media_type = content_type.split(";", 1)[0].strip()

        if JSON_RE.match(media_type):
            return ResponseType.JSON

        lowered = media_type.lower()
        if lowered in self.text_types or lowered.startswith("text/"):
            return ResponseType.TEXT

        return self.fallback_type


default_resolver = ResponseTypeResolver()


def resolve_response_type(
    hint: Optional[Union[str, ResponseType]],
    content_type: Optional[str] = None
) -> ResponseType:
    """Resolve with the default heuristics."""
    return default_resolver.resolve(hint, content_type)


def detect_response_type(content_type: Optional[str] = "") -> ResponseType:
    """Content-Type based detection without an explicit hint."""
    return default_resolver.resolve(None, content_type)


def safe_json_loads(text: str) -> Any:
    """
    Parse JSON, falling back to the raw text when it is not valid JSON.

    Examples:
        >>> safe_json_loads('{"ok": true}')
        {'ok': True}
        >>> safe_json_loads("ok")
        'ok'
    """
    if not text:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def _charset(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    for param in content_type.split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.lower() == "charset" and value:
            return value.strip('"\'')
    return None


class FetchResponse:
    """
    Result of one completed exchange.

    The body is read at most once, either from ``content`` or from the
    ``stream`` async iterator supplied by the transport.

    Args:
        status: HTTP status code
        status_text: Reason phrase
        headers: Response headers
        url: Final URL
        content: Whole body when the transport already has it
        stream: Async iterator over body chunks
        on_close: Called once by ``aclose()`` to release the transport stream

    Example:
        >>> response = await fetch.raw("/users")
        >>> response.status, response.data
        (200, [{'id': 1}])
    """

    def __init__(
        self,
        status: int,
        status_text: str = "",
        headers: Optional[Union[httpx.Headers, Mapping[str, str]]] = None,
        url: str = "",
        content: Optional[bytes] = None,
        stream: Optional[AsyncIterator[bytes]] = None,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self.status = status
        self.status_text = status_text
        self.headers = headers if isinstance(headers, httpx.Headers) else httpx.Headers(headers or {})
        self.url = url
        self.data: Any = None
        self._content = content
        self._stream = stream
        self._on_close = on_close
        self._closed = False
        self.body_used = False

    # ==================== Свойства ====================

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def status_code(self) -> int:
        return self.status

    @property
    def _data(self) -> Any:
        return self.data

    @_data.setter
    def _data(self, value: Any) -> None:
        self.data = value

    # ==================== Тело ответа ====================

    async def read(self) -> bytes:
        """Read (and cache) the whole body."""
        if self._content is None:
            self.body_used = True
            chunks = []
            if self._stream is not None:
                try:
                    async for chunk in self._stream:
                        chunks.append(chunk)
                finally:
                    await self.aclose()
            self._content = b"".join(chunks)
        return self._content

    async def text(self) -> str:
        content = await self.read()
        encoding = _charset(self.headers.get("content-type")) or "utf-8"
        try:
            return content.decode(encoding, errors="replace")
        except LookupError:
            return content.decode("utf-8", errors="replace")

    async def json(self) -> Any:
        return json.loads(await self.text())

    async def blob(self) -> bytes:
        return await self.read()

    async def array_buffer(self) -> bytearray:
        return bytearray(await self.read())

    async def stream(self) -> AsyncIterator[bytes]:
        """Iterate over the body without buffering it."""
        if self._content is not None:
            yield self._content
            return
        self.body_used = True
        if self._stream is None:
            return
        try:
            async for chunk in self._stream:
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Release the transport stream; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            await self._on_close()

    def __repr__(self) -> str:
        return f"<FetchResponse [{self.status} {self.status_text}]>"


async def parse_body(response: FetchResponse, response_type: ResponseType) -> Any:
    """
    Materialize the body with the given strategy.

    ``json`` uses a safe parse: a body that is not valid JSON comes back as text.
    """
    if response_type is ResponseType.JSON:
        return safe_json_loads(await response.text())
    if response_type is ResponseType.TEXT:
        return await response.text()
    if response_type is ResponseType.BLOB:
        return await response.blob()
    if response_type is ResponseType.ARRAY_BUFFER:
        return await response.array_buffer()
    return response.stream()

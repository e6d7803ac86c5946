"""Тесты ResponseTypeResolver и FetchResponse."""

import pytest

from fetch_client.core.response import (
    FetchResponse,
    ResponseType,
    ResponseTypeResolver,
    detect_response_type,
    parse_body,
    resolve_response_type,
    safe_json_loads,
)


class TestResolveResponseType:
    """Content-Type heuristics."""

    @pytest.mark.parametrize("content_type,expected", [
        ("", ResponseType.JSON),
        (None, ResponseType.JSON),
        ("application/json", ResponseType.JSON),
        ("application/json; charset=utf-8", ResponseType.JSON),
        ("Application/JSON", ResponseType.JSON),
        ("application/problem+json", ResponseType.JSON),
        ("application/vnd.api+json", ResponseType.JSON),
        ("text/plain", ResponseType.TEXT),
        ("text/html; charset=utf-8", ResponseType.TEXT),
        ("image/svg", ResponseType.TEXT),
        ("application/xml", ResponseType.TEXT),
        ("application/xhtml", ResponseType.TEXT),
        ("application/html", ResponseType.TEXT),
        ("image/png", ResponseType.BLOB),
        ("application/octet-stream", ResponseType.BLOB),
        ("application/jsonp", ResponseType.BLOB),
    ])
    def test_detect(self, content_type, expected):
        assert detect_response_type(content_type) is expected

    def test_explicit_hint_wins(self):
        assert resolve_response_type("text", "application/json") is ResponseType.TEXT
        assert resolve_response_type(ResponseType.STREAM, "text/plain") is ResponseType.STREAM

    def test_hint_aliases(self):
        assert ResponseType("array_buffer") is ResponseType.ARRAY_BUFFER
        assert ResponseType("arrayBuffer") is ResponseType.ARRAY_BUFFER

    def test_unknown_hint_raises(self):
        with pytest.raises(ValueError):
            resolve_response_type("yaml", None)

    def test_configurable_defaults(self):
        resolver = ResponseTypeResolver(
            empty_type=ResponseType.TEXT,
            fallback_type=ResponseType.ARRAY_BUFFER,
            text_types=frozenset({"application/yaml"}),
        )
        assert resolver.resolve(None, "") is ResponseType.TEXT
        assert resolver.resolve(None, "application/yaml") is ResponseType.TEXT
        assert resolver.resolve(None, "application/xml") is ResponseType.ARRAY_BUFFER


class TestSafeJsonLoads:

    def test_valid(self):
        assert safe_json_loads('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_invalid_returns_text(self):
        assert safe_json_loads("not json") == "not json"

    def test_empty(self):
        assert safe_json_loads("") == ""


async def _chunks(*parts):
    for part in parts:
        yield part


class TestFetchResponse:
    """Body access."""

    @pytest.mark.asyncio
    async def test_text_uses_charset(self):
        response = FetchResponse(
            200, "OK",
            headers={"content-type": "text/plain; charset=cp1251"},
            content="привет".encode("cp1251"),
        )
        assert await response.text() == "привет"

    @pytest.mark.asyncio
    async def test_read_from_stream_closes_once(self):
        closed = []

        async def on_close():
            closed.append(True)

        response = FetchResponse(200, "OK", stream=_chunks(b"ab", b"cd"), on_close=on_close)
        assert await response.read() == b"abcd"
        assert await response.read() == b"abcd"
        await response.aclose()
        assert closed == [True]
        assert response.body_used is True

    @pytest.mark.asyncio
    async def test_blob_and_array_buffer(self):
        response = FetchResponse(200, content=b"\x00\x01")
        assert await response.blob() == b"\x00\x01"
        assert await response.array_buffer() == bytearray(b"\x00\x01")

    @pytest.mark.asyncio
    async def test_stream_yields_chunks(self):
        response = FetchResponse(200, stream=_chunks(b"a", b"b"))
        chunks = [chunk async for chunk in response.stream()]
        assert chunks == [b"a", b"b"]

    def test_ok_and_data_alias(self):
        response = FetchResponse(204, "No Content")
        assert response.ok is True
        response._data = {"x": 1}
        assert response.data == {"x": 1}
        assert FetchResponse(404).ok is False


class TestParseBody:

    @pytest.mark.asyncio
    async def test_json_falls_back_to_text(self):
        response = FetchResponse(200, content=b"plain")
        assert await parse_body(response, ResponseType.JSON) == "plain"

    @pytest.mark.asyncio
    async def test_stream_returns_iterator(self):
        response = FetchResponse(200, stream=_chunks(b"x"))
        stream = await parse_body(response, ResponseType.STREAM)
        assert [chunk async for chunk in stream] == [b"x"]

"""
End-to-end scenarios: env configuration, hooks, retry and logging together.
"""

import json

import httpx
import pytest
import respx

from fetch_client import ExponentialBackoff, FetchError, create_fetch, create_fetch_from_env


def read_records(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    import os

    for key in list(os.environ):
        if key.startswith("FETCH_CLIENT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestAuthenticatedApi:
    """Typical API client: auth hook, nested clients, error details."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_token_refresh_on_401(self):
        route = respx.get("https://api.example.com/me").mock(
            side_effect=lambda request: (
                httpx.Response(200, json={"name": "alice"})
                if request.headers.get("authorization") == "Bearer fresh-token"
                else httpx.Response(401, json={"detail": "expired"})
            )
        )

        state = {"token": "stale-token"}

        def authorize(context, next):
            context.options.headers["authorization"] = f"Bearer {state['token']}"

        def refresh(context, next):
            if context.response.status == 401:
                state["token"] = "fresh-token"

        async with create_fetch({
            "base_url": "https://api.example.com",
            "on_request": authorize,
            "on_response_error": refresh,
            "retry_status_codes": [401],
            "retry": 1,
        }) as api:
            assert await api("/me") == {"name": "alice"}

        assert route.call_count == 2

    @respx.mock
    @pytest.mark.asyncio
    async def test_nested_clients_share_transport(self):
        route = respx.get("https://api.example.com/v2/admin/users").mock(
            return_value=httpx.Response(200, json=[])
        )

        async with create_fetch({"base_url": "https://api.example.com/v2"}) as api:
            admin = api.create(headers={"x-role": "admin"})
            assert await admin("/admin/users") == []
            assert admin.native is api.native

        assert route.calls.last.request.headers["x-role"] == "admin"


class TestEnvConfiguredClient:

    @respx.mock
    @pytest.mark.asyncio
    async def test_client_from_env_file_with_logging(self, tmp_path):
        log_path = tmp_path / "fetch.log"
        (tmp_path / ".env").write_text(
            "FETCH_CLIENT_BASE_URL=https://api.example.com\n"
            "FETCH_CLIENT_RETRY=2\n"
            'FETCH_CLIENT_HEADERS={"x-api-key": "secret-key"}\n'
            "FETCH_CLIENT_LOG_ENABLED=true\n"
            "FETCH_CLIENT_LOG_LEVEL=DEBUG\n"
            "FETCH_CLIENT_LOG_FORMAT=json\n"
            "FETCH_CLIENT_LOG_ENABLE_CONSOLE=false\n"
            "FETCH_CLIENT_LOG_ENABLE_FILE=true\n"
            "FETCH_CLIENT_LOG_HEADERS=true\n"
            f"FETCH_CLIENT_LOG_FILE_PATH={log_path}\n"
        )
        route = respx.get("https://api.example.com/items").mock(
            side_effect=[httpx.Response(502), httpx.Response(200, json={"items": []})]
        )

        api = create_fetch_from_env()
        try:
            assert await api("/items") == {"items": []}
        finally:
            await api.close()
            api._logger.close()

        assert route.call_count == 2
        assert route.calls.last.request.headers["x-api-key"] == "secret-key"

        records = read_records(log_path)
        assert [r["message"] for r in records] == [
            "Request started",
            "Request error (will retry)",
            "Request started",
            "Request completed",
        ]
        assert records[0]["headers"]["x-api-key"] == "***REDACTED***"
        assert "secret-key" not in log_path.read_text()


class TestBackoff:

    @respx.mock
    @pytest.mark.asyncio
    async def test_retry_after_header_is_respected(self):
        route = respx.get("https://api.example.com/limited").mock(
            side_effect=[
                httpx.Response(429, headers={"retry-after": "0"}),
                httpx.Response(200, json={"ok": True}),
            ]
        )
        backoff = ExponentialBackoff(base=10_000, jitter=False)

        async with create_fetch() as api:
            assert await api("https://api.example.com/limited", retry=1, retry_delay=backoff) == {"ok": True}

        assert route.call_count == 2

    @respx.mock
    @pytest.mark.asyncio
    async def test_exhausted_retries_report_last_status(self):
        respx.get("https://api.example.com/flaky").mock(side_effect=lambda request: httpx.Response(503))

        async with create_fetch() as api:
            with pytest.raises(FetchError) as exc_info:
                await api("https://api.example.com/flaky", retry=2, retry_delay=ExponentialBackoff(base=1, jitter=False))

        assert exc_info.value.status == 503
        assert exc_info.value.kind == "response"

"""
Tests for FetchLogger, get_logger and configure_logging.
"""

import json
import logging

import pytest

import fetch_client.core.logging.logger as logger_module
from fetch_client.core.context import FetchContext
from fetch_client.core.logging.config import LoggingConfig
from fetch_client.core.logging.filters import reset_correlation_id, set_correlation_id
from fetch_client.core.logging.logger import FetchLogger, configure_logging, get_logger
from fetch_client.core.options import FetchOptions
from fetch_client.core.response import FetchResponse


def read_records(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


class TestFetchLogger:

    def setup_method(self):
        logger_module._default_logger = None

    def test_defaults(self):
        logger = FetchLogger()
        try:
            assert logger.name == "fetch_client"
            assert logger._logger.propagate is False
            assert any(isinstance(h, logging.StreamHandler) for h in logger._logger.handlers)
        finally:
            logger.close()

    def test_no_handlers_when_disabled(self):
        logger = FetchLogger(LoggingConfig.create(enable_console=False))
        assert logger._logger.handlers == []

    def test_reinitialization_replaces_handlers(self):
        FetchLogger(name="fetch_client.test_reinit")
        logger = FetchLogger(name="fetch_client.test_reinit")
        try:
            assert len(logger._logger.handlers) == 1
        finally:
            logger.close()

    def test_structured_fields_are_masked(self, logging_config_with_file):
        logger = FetchLogger(logging_config_with_file)
        logger.info("Request started", headers={"Authorization": "Bearer abc", "Accept": "*/*"})
        logger.close()

        record = read_records(logging_config_with_file.file_path)[0]
        assert record["headers"]["Authorization"] == "***REDACTED***"
        assert record["headers"]["Accept"] == "*/*"

    def test_level_filtering(self, tmp_path):
        config = LoggingConfig.create(
            level="WARNING", format="json", enable_console=False,
            enable_file=True, file_path=str(tmp_path / "w.log"),
        )
        logger = FetchLogger(config)
        logger.info("hidden")
        logger.warning("shown")
        logger.close()

        assert [r["message"] for r in read_records(config.file_path)] == ["shown"]

    def test_lifecycle_messages(self, logging_config_with_file):
        logger = FetchLogger(logging_config_with_file)
        context = FetchContext(
            request="https://api.example.com/users?token=secret",
            options=FetchOptions(method="GET"),
            response=FetchResponse(503, "Service Unavailable"),
        )
        token = set_correlation_id(context.request_id)
        try:
            logger.request_started(context, context.request)
            logger.request_retry(context, 100)
            logger.request_completed(context, FetchResponse(200, "OK"), 12.3456)
            logger.request_failed(context, RuntimeError("boom"))
        finally:
            reset_correlation_id(token)
            logger.close()

        records = read_records(logging_config_with_file.file_path)
        assert [r["message"] for r in records] == [
            "Request started",
            "Request error (will retry)",
            "Request completed",
            "Request failed",
        ]
        assert all(r["correlation_id"] == context.request_id for r in records)
        assert "secret" not in records[0]["url"]
        assert records[1]["delay_ms"] == 100
        assert records[2]["duration_ms"] == 12.35
        assert records[3]["error_type"] == "RuntimeError"

    def test_close_is_idempotent(self):
        logger = FetchLogger()
        logger.close()
        logger.close()
        logger.info("ignored after close")
        assert logger._logger.handlers == []

    def test_context_manager(self):
        with FetchLogger() as logger:
            logger.info("inside")
        assert logger._closed

    def test_get_logger_is_singleton(self):
        first = get_logger(LoggingConfig.create(enable_console=False))
        assert get_logger() is first

    def test_configure_logging_replaces_global(self):
        first = get_logger(LoggingConfig.create(enable_console=False))
        second = configure_logging(LoggingConfig.create(enable_console=False, level="DEBUG"))
        assert second is not first
        assert get_logger() is second
        assert first._closed

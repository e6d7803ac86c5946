"""
Tests for LoggingConfig, formatters, filters and handlers.
"""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from fetch_client.core.logging.config import LoggingConfig, LogLevel, LogFormat
from fetch_client.core.logging.filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    clear_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from fetch_client.core.logging.formatters import (
    ColoredFormatter,
    JSONFormatter,
    TextFormatter,
    get_formatter,
    record_extras,
)
from fetch_client.core.logging.handlers import create_console_handler, create_file_handler


def make_record(msg="Request completed", **extra):
    record = logging.LogRecord("fetch_client", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLoggingConfig:

    def test_defaults(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.TEXT
        assert config.name == "fetch_client"
        assert config.log_headers is False

    def test_create_normalizes_strings(self):
        config = LoggingConfig.create(level="debug", format="JSON", enable_console=False)
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.JSON
        assert config.enable_console is False

    def test_file_requires_path(self):
        with pytest.raises(ValueError, match="file_path"):
            LoggingConfig(enable_file=True)

    def test_is_frozen(self):
        with pytest.raises(Exception):
            LoggingConfig().level = LogLevel.DEBUG


class TestCorrelationId:

    def test_set_get_reset(self):
        token = set_correlation_id("req-1")
        assert get_correlation_id() == "req-1"
        reset_correlation_id(token)
        assert get_correlation_id() is None

    def test_clear(self):
        set_correlation_id("req-2")
        clear_correlation_id()
        assert get_correlation_id() is None

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self):
        import asyncio

        seen = {}

        async def worker(name):
            set_correlation_id(name)
            await asyncio.sleep(0.01)
            seen[name] = get_correlation_id()

        await asyncio.gather(worker("a"), worker("b"))
        assert seen == {"a": "a", "b": "b"}

    def test_filter_adds_id(self):
        token = set_correlation_id("req-3")
        try:
            record = make_record()
            assert CorrelationIdFilter().filter(record) is True
            assert record.correlation_id == "req-3"
        finally:
            reset_correlation_id(token)

    def test_filter_without_id(self):
        clear_correlation_id()
        record = make_record()
        CorrelationIdFilter().filter(record)
        assert not hasattr(record, "correlation_id")

    def test_extra_fields_do_not_override(self):
        record = make_record(service="custom")
        ExtraFieldsFilter({"service": "api", "env": "prod"}).filter(record)
        assert record.service == "custom"
        assert record.env == "prod"


class TestFormatters:

    def test_record_extras(self):
        assert record_extras(make_record(status=200, _private=1)) == {"status": 200}

    def test_json(self):
        data = json.loads(JSONFormatter().format(make_record(status=200, method="GET")))
        assert data["message"] == "Request completed"
        assert data["level"] == "INFO"
        assert data["logger"] == "fetch_client"
        assert data["status"] == 200
        assert data["method"] == "GET"

    def test_text(self):
        line = TextFormatter().format(make_record(status=404))
        assert "[INFO] [fetch_client] Request completed" in line
        assert line.endswith("status=404")

    def test_colored_restores_levelname(self):
        record = make_record()
        line = ColoredFormatter().format(record)
        assert "\033[32mINFO\033[0m" in line
        assert record.levelname == "INFO"

    def test_get_formatter(self):
        assert isinstance(get_formatter("JSON"), JSONFormatter)
        with pytest.raises(ValueError, match="Unknown format type"):
            get_formatter("xml")


class TestHandlers:

    def test_console_handler(self):
        handler = create_console_handler(logging.WARNING, TextFormatter(), [CorrelationIdFilter()])
        assert handler.level == logging.WARNING
        assert len(handler.filters) == 1

    def test_file_handler_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "fetch.log"
        handler = create_file_handler(str(path), logging.INFO, JSONFormatter(), max_bytes=1024, backup_count=2)
        try:
            assert isinstance(handler, RotatingFileHandler)
            assert path.parent.exists()
            assert handler.maxBytes == 1024
            assert handler.backupCount == 2
        finally:
            handler.close()

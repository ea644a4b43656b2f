"""
Tests for the structured logging configuration.

Validates:
- JSONFormatter produces valid JSON with required fields
- DevFormatter produces human-readable colored text
- ContextFilter injects request_id from the current context
- configure_logging() switches mode based on GENBRIDGE_ENV
- Extra fields (provider, model) appear in JSON output
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from io import StringIO
from unittest.mock import patch

import pytest

from genbridge.observability.logging_config import (
    ContextFilter,
    DevFormatter,
    JSONFormatter,
    clear_request_id,
    configure_logging,
    get_request_id,
    set_request_id,
)


# ─── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _cleanup_request_id():
    """Clear request_id before and after each test."""
    clear_request_id()
    yield
    clear_request_id()


@pytest.fixture
def json_formatter():
    return JSONFormatter()


@pytest.fixture
def dev_formatter():
    return DevFormatter()


@pytest.fixture
def context_filter():
    return ContextFilter()


@pytest.fixture
def restore_root_handlers():
    """configure_logging replaces root handlers; put the originals back."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield root
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)


def _make_record(
    msg: str = "test message",
    level: int = logging.INFO,
    name: str = "test.logger",
    extra: dict | None = None,
) -> logging.LogRecord:
    """Create a LogRecord with optional extra fields."""
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    if extra:
        for key, value in extra.items():
            setattr(record, key, value)
    return record


# ─── JSONFormatter Tests ──────────────────────────────────────────────


class TestJSONFormatter:
    """Tests for the production JSON log formatter."""

    def test_produces_valid_json(self, json_formatter):
        record = _make_record("hello world")
        parsed = json.loads(json_formatter.format(record))
        assert isinstance(parsed, dict)

    def test_includes_required_fields(self, json_formatter):
        record = _make_record("test", level=logging.WARNING, name="genbridge.llm.factory")
        parsed = json.loads(json_formatter.format(record))

        assert "timestamp" in parsed
        assert parsed["level"] == "WARNING"
        assert parsed["logger"] == "genbridge.llm.factory"
        assert parsed["message"] == "test"

    def test_includes_extra_fields(self, json_formatter):
        """Extra fields passed via logger.info(..., extra={}) appear in JSON."""
        record = _make_record(
            "llm_generate_completed",
            extra={"provider": "openai", "model": "gpt-4o"},
        )
        parsed = json.loads(json_formatter.format(record))

        assert parsed["provider"] == "openai"
        assert parsed["model"] == "gpt-4o"

    def test_includes_request_id(self, json_formatter):
        record = _make_record("test", extra={"request_id": "req-xyz"})
        parsed = json.loads(json_formatter.format(record))
        assert parsed["request_id"] == "req-xyz"

    def test_timestamp_is_iso_format(self, json_formatter):
        parsed = json.loads(json_formatter.format(_make_record("test")))
        assert "T" in parsed["timestamp"]

    def test_handles_exception_info(self, json_formatter):
        try:
            raise ValueError("test error")
        except ValueError:
            record = _make_record("error occurred")
            record.exc_info = sys.exc_info()

        parsed = json.loads(json_formatter.format(record))

        assert "ValueError" in parsed["exception"]
        assert "test error" in parsed["exception"]

    def test_non_serializable_extra_becomes_string(self, json_formatter):
        record = _make_record("test", extra={"complex_obj": object()})
        parsed = json.loads(json_formatter.format(record))
        assert isinstance(parsed["complex_obj"], str)


# ─── DevFormatter Tests ───────────────────────────────────────────────


class TestDevFormatter:
    """Tests for the local development colored formatter."""

    def test_includes_message_level_and_logger(self, dev_formatter):
        record = _make_record("hello dev world", level=logging.WARNING, name="genbridge.llm")
        output = dev_formatter.format(record)
        assert "hello dev world" in output
        assert "WARNING" in output
        assert "genbridge.llm" in output

    def test_includes_extra_fields_inline(self, dev_formatter):
        record = _make_record(
            "test",
            extra={"provider": "openai", "request_id": "req-abc", "status_code": 429},
        )
        output = dev_formatter.format(record)
        assert "provider=openai" in output
        assert "request_id=req-abc" in output
        assert "status_code=429" in output

    def test_unknown_extra_fields_not_inlined(self, dev_formatter):
        record = _make_record("test", extra={"secret_blob": "zzz"})
        assert "secret_blob" not in dev_formatter.format(record)

    def test_color_codes_present_for_error(self, dev_formatter):
        record = _make_record("error!", level=logging.ERROR)
        assert "\033[31m" in dev_formatter.format(record)


# ─── ContextFilter Tests ──────────────────────────────────────────────


class TestContextFilter:
    """Tests for the request_id injection filter."""

    def test_injects_request_id_when_set(self, context_filter):
        set_request_id("req-123")
        record = _make_record("test")
        context_filter.filter(record)
        assert record.request_id == "req-123"  # type: ignore[attr-defined]

    def test_no_request_id_when_not_set(self, context_filter):
        record = _make_record("test")
        context_filter.filter(record)
        assert not hasattr(record, "request_id")

    def test_always_returns_true(self, context_filter):
        assert context_filter.filter(_make_record("test")) is True


# ─── Request Context Helpers ──────────────────────────────────────────


class TestRequestContext:
    """Tests for set_request_id / get_request_id / clear_request_id."""

    def test_set_and_get(self):
        set_request_id("my-request")
        assert get_request_id() == "my-request"

    def test_clear(self):
        set_request_id("to-clear")
        clear_request_id()
        assert get_request_id() is None

    def test_get_returns_none_by_default(self):
        assert get_request_id() is None

    def test_isolated_between_tasks(self):
        """Concurrent tasks on one thread each see their own request id."""

        async def worker(request_id: str) -> str | None:
            set_request_id(request_id)
            await asyncio.sleep(0)
            return get_request_id()

        async def main():
            return await asyncio.gather(worker("a"), worker("b"))

        assert asyncio.run(main()) == ["a", "b"]


# ─── configure_logging Tests ──────────────────────────────────────────


class TestConfigureLogging:
    """Tests for the configure_logging() entry point."""

    def test_production_uses_json_formatter(self, restore_root_handlers):
        configure_logging(env="production")
        assert isinstance(restore_root_handlers.handlers[0].formatter, JSONFormatter)

    def test_development_uses_dev_formatter(self, restore_root_handlers):
        configure_logging(env="development")
        assert isinstance(restore_root_handlers.handlers[0].formatter, DevFormatter)

    def test_reads_env_var(self, restore_root_handlers):
        with patch.dict(os.environ, {"GENBRIDGE_ENV": "production"}):
            configure_logging()
        assert isinstance(restore_root_handlers.handlers[0].formatter, JSONFormatter)

    def test_defaults_to_development(self, restore_root_handlers):
        with patch.dict(os.environ, {}, clear=True):
            configure_logging()
        assert isinstance(restore_root_handlers.handlers[0].formatter, DevFormatter)

    def test_removes_existing_handlers(self, restore_root_handlers):
        restore_root_handlers.addHandler(logging.StreamHandler())
        configure_logging(env="development")
        assert len(restore_root_handlers.handlers) == 1

    def test_context_filter_attached(self, restore_root_handlers):
        configure_logging(env="development")
        handler = restore_root_handlers.handlers[0]
        assert ContextFilter in [type(f) for f in handler.filters]

    def test_quiets_vendor_transport_loggers(self, restore_root_handlers):
        configure_logging(env="development", level=logging.DEBUG)
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("openai").level == logging.WARNING

    def test_json_output_end_to_end(self, restore_root_handlers):
        configure_logging(env="production")
        stream = StringIO()
        restore_root_handlers.handlers[0].stream = stream

        set_request_id("req-789")
        logging.getLogger("test.e2e").info(
            "llm_generate_completed",
            extra={"provider": "openai", "model": "gpt-4o"},
        )

        parsed = json.loads(stream.getvalue().strip())
        assert parsed["message"] == "llm_generate_completed"
        assert parsed["provider"] == "openai"
        assert parsed["model"] == "gpt-4o"
        assert parsed["request_id"] == "req-789"
        assert parsed["level"] == "INFO"

"""Tests for structured logging."""

import json
import logging
import sys

import pytest
from opentelemetry.sdk.trace import TracerProvider

from fabric_telemetry.core.logging import (
    ConsoleFormatter,
    JSONFormatter,
    LoggerAdapter,
    TraceContextFilter,
    get_logger,
    setup_logging,
)


def _record(msg="Test message", level=logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/app/test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_basic_log_format(self):
        """Test basic JSON log output structure."""
        parsed = json.loads(JSONFormatter().format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test.logger"
        assert parsed["message"] == "Test message"
        assert parsed["line"] == 42
        assert "timestamp" in parsed
        assert "trace_id" not in parsed

    def test_json_formatter_with_extra(self):
        record = _record("Discovering fabric")
        record.tenant_id = "tenant-a"

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["extra"]["tenant_id"] == "tenant-a"

    def test_json_formatter_with_trace_ids(self):
        """Test correlation IDs are top-level fields, not extras."""
        record = _record()
        record.trace_id = "0af7651916cd43dd8448eb211c80319c"
        record.span_id = "b7ad6b7169203331"

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["trace_id"] == "0af7651916cd43dd8448eb211c80319c"
        assert parsed["span_id"] == "b7ad6b7169203331"
        assert "extra" not in parsed

    def test_json_formatter_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        parsed = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))

        assert parsed["exception"]["type"] == "ValueError"
        assert parsed["exception"]["message"] == "Test error"
        assert isinstance(parsed["exception"]["traceback"], list)

    def test_json_formatter_without_extra(self):
        record = _record()
        record.custom_field = "should not appear"

        parsed = json.loads(JSONFormatter(include_extra=False).format(record))

        assert "extra" not in parsed

    def test_json_formatter_handles_non_serializable(self):
        record = _record()
        record.custom_object = object()

        parsed = json.loads(JSONFormatter().format(record))

        assert "object" in parsed["extra"]["custom_object"].lower()


class TestConsoleFormatter:
    def test_basic_console_format(self):
        output = ConsoleFormatter().format(_record())

        assert "INFO" in output
        assert "test.logger" in output
        assert "Test message" in output

    def test_console_formatter_with_colors(self):
        formatter = ConsoleFormatter()
        for level, color in ConsoleFormatter.COLORS.items():
            output = formatter.format(_record(level=getattr(logging, level)))
            assert color in output, f"Color code missing for {level}"

    def test_console_formatter_shows_trace(self):
        record = _record()
        record.trace_id = "0af7651916cd43dd8448eb211c80319c"

        assert "[trace=0af7651916cd43dd8448eb211c80319c]" in ConsoleFormatter().format(record)


class TestTraceContextFilter:
    def test_outside_span(self):
        record = _record()

        assert TraceContextFilter().filter(record) is True
        assert record.trace_id == ""
        assert record.span_id == ""

    def test_inside_span(self):
        tracer = TracerProvider().get_tracer("test")
        record = _record()

        with tracer.start_as_current_span("work") as span:
            TraceContextFilter().filter(record)
            expected = span.get_span_context()

        assert record.trace_id == format(expected.trace_id, "032x")
        assert record.span_id == format(expected.span_id, "016x")


class TestLoggerAdapter:
    def test_adapter_merges_context(self):
        adapter = LoggerAdapter(get_logger("test.adapter"), {"tenant_id": "tenant-a"})

        msg, kwargs = adapter.process("hello", {"extra": {"path": "/"}})

        assert msg == "hello"
        assert kwargs["extra"] == {"path": "/", "tenant_id": "tenant-a"}


class TestSetupLogging:
    @pytest.fixture
    def root(self, monkeypatch):
        """Stand-in root logger so pytest's own capture handlers stay untouched."""
        fake_root = logging.Logger("fake-root")
        fake_root.addHandler(logging.NullHandler())
        real_get_logger = logging.getLogger
        monkeypatch.setattr(
            logging,
            "getLogger",
            lambda name=None: fake_root if name is None else real_get_logger(name),
        )
        return fake_root

    def test_json_format_forced(self, monkeypatch, root):
        from fabric_telemetry.core import logging as logging_module

        monkeypatch.setattr(logging_module.settings, "log_format", "json")
        setup_logging()

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert any(isinstance(f, TraceContextFilter) for f in root.handlers[0].filters)

    def test_console_format_in_development(self, monkeypatch, root):
        from fabric_telemetry.core import logging as logging_module

        monkeypatch.setattr(logging_module.settings, "log_format", None)
        monkeypatch.setattr(logging_module.settings, "environment", "development")
        setup_logging()

        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)

    def test_json_format_in_production(self, monkeypatch, root):
        from fabric_telemetry.core import logging as logging_module

        monkeypatch.setattr(logging_module.settings, "log_format", None)
        monkeypatch.setattr(logging_module.settings, "environment", "production")
        setup_logging()

        assert isinstance(root.handlers[0].formatter, JSONFormatter)

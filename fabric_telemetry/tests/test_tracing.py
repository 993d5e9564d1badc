"""Tests for the tracing subsystem lifecycle."""

import logging
from unittest.mock import MagicMock

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from fabric_telemetry.core.tracing import TracingState, TracingSubsystem


@pytest.fixture
def subsystem(test_settings, span_exporter):
    return TracingSubsystem(test_settings, span_exporter=span_exporter)


class TestStart:
    def test_initial_state(self, subsystem):
        assert subsystem.state == TracingState.UNINITIALIZED
        assert subsystem.provider is None
        assert not subsystem.is_started

    def test_start_builds_sdk_provider(self, subsystem, test_settings):
        provider = subsystem.start()

        assert subsystem.state == TracingState.STARTED
        assert isinstance(provider, TracerProvider)
        assert provider.resource.attributes["service.name"] == test_settings.service_name

    def test_start_twice_rejected(self, subsystem):
        subsystem.start()
        with pytest.raises(RuntimeError):
            subsystem.start()

    def test_start_after_terminated_rejected(self, subsystem):
        subsystem.start()
        subsystem.shutdown()
        with pytest.raises(RuntimeError):
            subsystem.start()
        assert subsystem.state == TracingState.TERMINATED

    def test_start_does_not_touch_global_provider_by_default(self, subsystem, monkeypatch):
        setter = MagicMock()
        monkeypatch.setattr(trace, "set_tracer_provider", setter)

        subsystem.start()

        setter.assert_not_called()

    def test_start_can_install_global_provider(self, subsystem, monkeypatch):
        setter = MagicMock()
        monkeypatch.setattr(trace, "set_tracer_provider", setter)

        provider = subsystem.start(set_global=True)

        setter.assert_called_once_with(provider)

    def test_disabled_tracing_uses_noop_provider(self, test_settings, span_exporter):
        settings = test_settings.model_copy(update={"tracing_enabled": False})
        subsystem = TracingSubsystem(settings, span_exporter=span_exporter)

        subsystem.start()
        span = subsystem.get_tracer().start_span("ignored")
        span.end()

        assert not span.is_recording()
        assert span_exporter.get_finished_spans() == ()


class TestGetTracer:
    def test_tracer_before_start_is_noop(self, subsystem):
        span = subsystem.get_tracer().start_span("early")
        assert not span.is_recording()

    def test_tracer_exports_to_injected_exporter(self, subsystem, span_exporter):
        subsystem.start()

        subsystem.get_tracer().start_span("work").end()

        assert [s.name for s in span_exporter.get_finished_spans()] == ["work"]

    def test_tracer_after_shutdown_is_noop(self, subsystem):
        subsystem.start()
        subsystem.shutdown()

        assert not subsystem.get_tracer().start_span("late").is_recording()


class TestShutdown:
    def test_shutdown_from_started(self, subsystem, caplog):
        subsystem.start()

        with caplog.at_level(logging.INFO, logger="fabric_telemetry.core.tracing"):
            assert subsystem.shutdown() is True

        assert subsystem.state == TracingState.TERMINATED
        assert "Tracing terminated" in caplog.text

    def test_shutdown_flushes_exporter(self, test_settings):
        exporter = MagicMock(wraps=InMemorySpanExporter())
        subsystem = TracingSubsystem(test_settings, span_exporter=exporter)
        subsystem.start()

        subsystem.shutdown()

        exporter.shutdown.assert_called_once()

    def test_shutdown_is_idempotent(self, subsystem):
        subsystem.start()
        subsystem.shutdown()

        assert subsystem.shutdown() is True
        assert subsystem.state == TracingState.TERMINATED

    def test_shutdown_before_start(self, subsystem):
        assert subsystem.shutdown() is True
        assert subsystem.state == TracingState.TERMINATED

    def test_shutdown_failure_is_logged_and_terminates(self, subsystem, caplog):
        subsystem.start()
        failing = MagicMock()
        failing.shutdown.side_effect = RuntimeError("exporter stuck")
        subsystem._provider = failing

        with caplog.at_level(logging.ERROR, logger="fabric_telemetry.core.tracing"):
            assert subsystem.shutdown() is False

        assert subsystem.state == TracingState.TERMINATED
        assert "Error terminating tracing" in caplog.text
        assert "exporter stuck" in caplog.text

    def test_shutdown_of_noop_provider(self, test_settings):
        settings = test_settings.model_copy(update={"tracing_enabled": False})
        subsystem = TracingSubsystem(settings)
        subsystem.start()

        assert subsystem.shutdown() is True
        assert subsystem.state == TracingState.TERMINATED

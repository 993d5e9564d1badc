"""Test configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

# Keep the module-level settings quiet before the app package is imported
os.environ.setdefault("OTEL_CONSOLE_EXPORT", "false")
os.environ.setdefault("DISCOVERY_DELAY_SECONDS", "0")

from fabric_telemetry.core.config import Settings  # noqa: E402
from fabric_telemetry.core.tracing import TracingSubsystem  # noqa: E402
from fabric_telemetry.main import create_app  # noqa: E402


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no exporters besides the in-memory one and no discovery delay."""
    return Settings(
        environment="testing",
        otel_console_export=False,
        otel_exporter_otlp_endpoint=None,
        tenant_data_file=None,
        discovery_delay_seconds=0.0,
    )


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracing(test_settings, span_exporter):
    """A started tracing subsystem exporting synchronously to memory."""
    subsystem = TracingSubsystem(test_settings, span_exporter=span_exporter)
    subsystem.start()
    try:
        yield subsystem
    finally:
        subsystem.shutdown()


@pytest.fixture
def app(test_settings, tracing):
    return create_app(settings=test_settings, tracing=tracing)


@pytest.fixture
def client(app):
    """Create a test client for the instrumented app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def finished_spans(span_exporter):
    """Callable returning finished spans, optionally filtered by name."""

    def _spans(name: str | None = None):
        spans = span_exporter.get_finished_spans()
        if name is None:
            return list(spans)
        return [span for span in spans if span.name == name]

    return _spans

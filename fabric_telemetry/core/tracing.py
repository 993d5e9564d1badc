"""OpenTelemetry tracing lifecycle.

The subsystem is started once, before the HTTP listener exists, and shut down
once when the process is asked to terminate. The tracer it hands out is
injected into request handlers instead of being looked up globally.
"""

from __future__ import annotations

import enum

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.trace import Tracer

from .config import Settings
from .logging import get_logger

logger = get_logger(__name__)


class TracingState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    STARTED = "started"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class TracingSubsystem:
    """Owns the tracer provider and its exporters for the life of the process.

    Transitions: uninitialized -> started -> shutting_down -> terminated.
    There is no way back out of terminated.
    """

    def __init__(
        self,
        settings: Settings,
        span_exporter: SpanExporter | None = None,
    ) -> None:
        """Initialize the subsystem without starting it.

        Args:
            settings: Application settings (service name, exporters).
            span_exporter: Extra exporter wired through a synchronous processor,
                mainly for tests (e.g. InMemorySpanExporter).
        """
        self.settings = settings
        self._span_exporter = span_exporter
        self._provider: trace.TracerProvider | None = None
        self.state = TracingState.UNINITIALIZED

    @property
    def provider(self) -> trace.TracerProvider | None:
        return self._provider

    @property
    def is_started(self) -> bool:
        return self.state == TracingState.STARTED

    def start(self, set_global: bool = False) -> trace.TracerProvider:
        """Build the tracer provider and begin collecting spans.

        Args:
            set_global: Also install the provider as the process-wide default,
                so libraries using ``trace.get_tracer`` export through it.

        Returns:
            The active tracer provider.

        Raises:
            RuntimeError: If the subsystem was already started or terminated.
        """
        if self.state != TracingState.UNINITIALIZED:
            raise RuntimeError(f"Tracing cannot be started from state '{self.state.value}'")

        if self.settings.tracing_enabled:
            self._provider = self._build_provider()
        else:
            self._provider = trace.NoOpTracerProvider()

        if set_global:
            trace.set_tracer_provider(self._provider)

        self.state = TracingState.STARTED
        logger.info(
            "Tracing started",
            extra={
                "service_name": self.settings.service_name,
                "tracing_enabled": self.settings.tracing_enabled,
            },
        )
        return self._provider

    def _build_provider(self) -> TracerProvider:
        resource = Resource.create({SERVICE_NAME: self.settings.service_name})
        provider = TracerProvider(resource=resource)

        if self._span_exporter is not None:
            provider.add_span_processor(SimpleSpanProcessor(self._span_exporter))

        endpoint = self.settings.otel_exporter_otlp_endpoint
        if endpoint:
            provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
            )

        if self.settings.otel_console_export:
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        return provider

    def get_tracer(self) -> Tracer:
        """Return the service tracer, or a no-op tracer when not started."""
        if self._provider is None or self.state != TracingState.STARTED:
            return trace.NoOpTracer()
        return self._provider.get_tracer(self.settings.tracer_name)

    def shutdown(self) -> bool:
        """Flush and close exporters.

        Returns:
            True if the provider shut down cleanly (or there was nothing to
            shut down), False if shutdown raised. Either way the subsystem
            ends up terminated.
        """
        if self.state in (TracingState.SHUTTING_DOWN, TracingState.TERMINATED):
            return True
        if self.state == TracingState.UNINITIALIZED:
            self.state = TracingState.TERMINATED
            return True

        self.state = TracingState.SHUTTING_DOWN
        try:
            shutdown = getattr(self._provider, "shutdown", None)
            if shutdown is not None:
                shutdown()
        except Exception:
            logger.exception("Error terminating tracing")
            return False
        else:
            logger.info("Tracing terminated")
            return True
        finally:
            self.state = TracingState.TERMINATED

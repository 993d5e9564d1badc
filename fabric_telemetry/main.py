"""Main FastAPI application."""

import time

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from starlette.routing import Match

from fabric_telemetry.api import errors, fabric, metrics
from fabric_telemetry.api.middleware import TenantContextMiddleware
from fabric_telemetry.core.config import Settings, settings as default_settings
from fabric_telemetry.core.logging import get_logger
from fabric_telemetry.core.metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_PROGRESS,
    HTTP_REQUESTS_TOTAL,
    set_app_info,
)
from fabric_telemetry.core.tracing import TracingState, TracingSubsystem
from fabric_telemetry.dependencies import get_tenant_context
from fabric_telemetry.domain.context import TenantRequestContext
from fabric_telemetry.domain.exceptions import DomainError
from fabric_telemetry.repositories import TenantRepository
from fabric_telemetry.services import DelayedDeviceSource, DeviceSource

logger = get_logger(__name__)

STATUS_MESSAGE = "Multi-tenancy telemetry service is running!"
UNMATCHED_ENDPOINT = "unmatched"


def endpoint_label(request: Request) -> str:
    """Return the route template serving the request, for low-cardinality metric labels.

    Paths no route matches share a single label.
    """
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match != Match.NONE:
            return getattr(route, "path", UNMATCHED_ENDPOINT)
    return UNMATCHED_ENDPOINT


async def prometheus_metrics_middleware(request: Request, call_next):
    """Middleware to collect Prometheus metrics for all HTTP requests."""
    # Skip metrics for the metrics endpoint itself to avoid recursion
    if request.url.path == "/metrics":
        return await call_next(request)

    method = request.method
    # Route templates, not raw paths, to bound label cardinality
    endpoint = endpoint_label(request)

    HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
    start_time = time.perf_counter()

    try:
        response = await call_next(request)
        status_code = str(response.status_code)
    except Exception:
        status_code = "500"
        raise
    finally:
        duration = time.perf_counter() - start_time
        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, endpoint=endpoint).observe(duration)
        HTTP_REQUESTS_TOTAL.labels(method=method, endpoint=endpoint, status_code=status_code).inc()

    return response


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Translate domain errors to HTTP responses globally."""
    http_exc = errors.to_http(exc)
    logger.warning(
        "Request failed: %s",
        exc.message,
        extra={"path": request.url.path, "status_code": http_exc.status_code},
    )
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"error": http_exc.detail},
    )


async def root(context: TenantRequestContext = Depends(get_tenant_context)) -> PlainTextResponse:
    """Root endpoint."""
    if context.span.is_recording():
        context.span.add_event("Root endpoint accessed")
    return PlainTextResponse(STATUS_MESSAGE)


async def health() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


def _build_tenant_repository(settings: Settings) -> TenantRepository:
    if settings.tenant_data_file:
        return TenantRepository.from_file(settings.tenant_data_file)
    return TenantRepository.with_defaults()


def create_app(
    settings: Settings | None = None,
    tracing: TracingSubsystem | None = None,
    tenant_repository: TenantRepository | None = None,
    device_source: DeviceSource | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Every collaborator can be injected; anything omitted is built from
    ``settings``. Tracing must already be running (it is started here only if
    the caller left it uninitialized) so that every request is traced.

    Args:
        settings: Application settings (defaults to the environment-loaded ones).
        tracing: Tracing subsystem providing the tracer and the provider used
            for server-span instrumentation.
        tenant_repository: Read-only tenant store.
        device_source: Asynchronous source of tenant devices.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or default_settings

    if tracing is None:
        tracing = TracingSubsystem(settings)
    if tracing.state == TracingState.UNINITIALIZED:
        tracing.start()
    elif not tracing.is_started:
        raise RuntimeError(f"Tracing is {tracing.state.value}; cannot create app")

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
    )

    app.state.settings = settings
    app.state.tracing = tracing
    app.state.tenant_repository = tenant_repository or _build_tenant_repository(settings)
    app.state.device_source = device_source or DelayedDeviceSource(
        settings.discovery_delay_seconds
    )

    set_app_info(version=settings.api_version, environment=settings.environment)

    app.middleware("http")(prometheus_metrics_middleware)
    app.add_middleware(
        TenantContextMiddleware,
        header_name=settings.tenant_header,
        default_tenant_id=settings.default_tenant_id,
    )

    app.add_exception_handler(DomainError, domain_exception_handler)

    app.include_router(metrics.router)  # Metrics at root level (not under /api/v1)
    app.include_router(fabric.router, prefix=settings.api_prefix)
    app.add_api_route("/", root, methods=["GET"], response_class=PlainTextResponse)
    app.add_api_route("/health", health, methods=["GET"])

    # Server spans wrap every middleware above, so the tenant middleware sees them as current.
    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=tracing.provider,
            excluded_urls="/metrics",
        )

    logger.info(
        "Application created",
        extra={
            "environment": settings.environment,
            "tenants": app.state.tenant_repository.list_ids(),
        },
    )
    return app

"""Shared FastAPI dependency factories."""

from fastapi import Depends, Request
from opentelemetry.trace import Tracer

from fabric_telemetry.api.middleware import resolve_tenant
from fabric_telemetry.core.config import Settings
from fabric_telemetry.core.tracing import TracingSubsystem
from fabric_telemetry.domain import TenantRequestContext
from fabric_telemetry.repositories import TenantRepository
from fabric_telemetry.services import DeviceSource, DiscoveryService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tracing(request: Request) -> TracingSubsystem:
    return request.app.state.tracing


def get_tracer(tracing: TracingSubsystem = Depends(get_tracing)) -> Tracer:
    return tracing.get_tracer()


def get_tenant_repository(request: Request) -> TenantRepository:
    return request.app.state.tenant_repository


def get_device_source(request: Request) -> DeviceSource:
    return request.app.state.device_source


def get_tenant_context(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> TenantRequestContext:
    """Return the context set by the tenant middleware.

    Falls back to resolving it here when the middleware is not installed,
    so routes never see a missing context.
    """
    context = getattr(request.state, "tenant_context", None)
    if context is None:
        context = resolve_tenant(request, settings.tenant_header, settings.default_tenant_id)
    return context


def get_discovery_service(
    tenants: TenantRepository = Depends(get_tenant_repository),
    source: DeviceSource = Depends(get_device_source),
    tracer: Tracer = Depends(get_tracer),
) -> DiscoveryService:
    return DiscoveryService(tenants, source, tracer)

"""Tenant context middleware."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from fabric_telemetry.core.logging import get_logger
from fabric_telemetry.domain.context import TENANT_ATTRIBUTE, TenantRequestContext

logger = get_logger(__name__)


def resolve_tenant(request: Request, header_name: str, default_tenant_id: str) -> TenantRequestContext:
    """Build the tenant context for a request. Never fails.

    A missing or blank header resolves to ``default_tenant_id`` with
    ``resolved=False``. Header lookup is case-insensitive.
    """
    raw = request.headers.get(header_name, "").strip()
    span = trace.get_current_span()
    if raw:
        return TenantRequestContext(tenant_id=raw, span=span, resolved=True)
    return TenantRequestContext(tenant_id=default_tenant_id, span=span, resolved=False)


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Resolves the tenant of every request before any route runs.

    Tags the active span with ``app.tenant.id`` when tracing is recording and
    stores the context on ``request.state.tenant_context``.
    """

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Tenant-ID",
        default_tenant_id: str = "unknown-tenant",
    ) -> None:
        super().__init__(app)
        self.header_name = header_name
        self.default_tenant_id = default_tenant_id

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        context = resolve_tenant(request, self.header_name, self.default_tenant_id)

        if context.span.is_recording():
            context.span.set_attribute(TENANT_ATTRIBUTE, context.tenant_id)

        request.state.tenant_context = context
        logger.debug(
            "Resolved tenant %s",
            context.tenant_id,
            extra={"tenant_id": context.tenant_id, "path": request.url.path},
        )
        return await call_next(request)

"""Request-scoped context for multi-tenant operations."""

from dataclasses import dataclass

from opentelemetry.trace import Span

# Span attribute naming the tenant, on both the server span and child spans
TENANT_ATTRIBUTE = "app.tenant.id"


@dataclass(slots=True)
class TenantRequestContext:
    """Carries the resolved tenant and the span active when the request entered.

    Built once per request by the tenant middleware and passed explicitly to
    the service layer, so span parenting never depends on ambient state.
    """

    tenant_id: str
    span: Span
    resolved: bool = True

"""Fabric discovery service."""

from __future__ import annotations

import time
from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode, Tracer

from fabric_telemetry.core.logging import LoggerAdapter, get_logger
from fabric_telemetry.core.metrics import record_discovery
from fabric_telemetry.domain.context import TENANT_ATTRIBUTE, TenantRequestContext
from fabric_telemetry.domain.exceptions import TenantNotFoundError
from fabric_telemetry.domain.tenants import Tenant
from fabric_telemetry.repositories import TenantRepository
from fabric_telemetry.schemas.discovery import DeviceSummary, DiscoveryResponse
from fabric_telemetry.services.device_source import DeviceSource

logger = get_logger(__name__)

SPAN_NAME = "fabric.discover"
DEVICES_FETCHED_EVENT = "devices.fetched"


class DiscoveryService:
    """Looks up a tenant's devices inside a dedicated child span."""

    def __init__(
        self,
        tenants: TenantRepository,
        source: DeviceSource,
        tracer: Tracer,
    ) -> None:
        self.tenants = tenants
        self.source = source
        self.tracer = tracer

    def _lookup(self, context: TenantRequestContext) -> Optional[Tenant]:
        # The fallback id never names a real tenant, even if the store has one by that name.
        if not context.resolved:
            return None
        return self.tenants.get(context.tenant_id)

    async def discover(self, context: TenantRequestContext) -> DiscoveryResponse:
        """Return the ``{id, status}`` view of the tenant's devices.

        The span is parented explicitly on ``context.span`` and is ended exactly
        once whether the tenant is found, missing, or the fetch fails.

        Raises:
            TenantNotFoundError: If the tenant is unknown or was not supplied.
        """
        tenant_id = context.tenant_id
        span = self.tracer.start_span(
            SPAN_NAME,
            context=trace.set_span_in_context(context.span),
            kind=SpanKind.INTERNAL,
            attributes={TENANT_ATTRIBUTE: tenant_id},
        )
        log = LoggerAdapter(logger, {"tenant_id": tenant_id})
        log.info("Discovering fabric for tenant: %s", tenant_id)

        started = time.perf_counter()
        outcome = "error"
        try:
            tenant = self._lookup(context)
            if tenant is None:
                span.set_status(Status(StatusCode.ERROR, f"Tenant ID not found: {tenant_id}"))
                raise TenantNotFoundError(tenant_id)

            devices = await self.source.fetch_devices(tenant)
            span.add_event(DEVICES_FETCHED_EVENT, attributes={"device.count": len(devices)})

            response = DiscoveryResponse(
                tenant_id=tenant_id,
                devices=[DeviceSummary.from_device(device) for device in devices],
            )
            outcome = "found"
            return response
        except TenantNotFoundError:
            outcome = "not_found"
            log.warning("Tenant not found: %s", tenant_id)
            raise
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            log.exception("Fabric discovery failed")
            raise
        finally:
            span.end()
            record_discovery(outcome, time.perf_counter() - started)

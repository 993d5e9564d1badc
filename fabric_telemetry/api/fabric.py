"""Fabric API endpoints."""

from fastapi import APIRouter, Depends

from fabric_telemetry.dependencies import get_discovery_service, get_tenant_context
from fabric_telemetry.domain.context import TenantRequestContext
from fabric_telemetry.schemas.discovery import DiscoveryResponse, ErrorResponse
from fabric_telemetry.services.discovery_service import DiscoveryService

router = APIRouter(prefix="/fabric", tags=["fabric"])


@router.get(
    "/discover",
    response_model=DiscoveryResponse,
    responses={404: {"model": ErrorResponse, "description": "Tenant not found"}},
)
async def discover_fabric(
    service: DiscoveryService = Depends(get_discovery_service),
    context: TenantRequestContext = Depends(get_tenant_context),
) -> DiscoveryResponse:
    """Discover the devices of the tenant named by the X-Tenant-ID header."""
    return await service.discover(context)

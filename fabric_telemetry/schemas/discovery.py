"""Fabric discovery schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fabric_telemetry.domain.tenants import Device, DeviceStatus


class DeviceSummary(BaseModel):
    """Minimal device view: display-only fields (ip, type) are not exposed."""

    id: str
    status: DeviceStatus

    @classmethod
    def from_device(cls, device: Device) -> "DeviceSummary":
        return cls(id=device.id, status=device.status)


class DiscoveryResponse(BaseModel):
    """Devices discovered for a tenant."""

    model_config = ConfigDict(populate_by_name=True)

    tenant_id: str = Field(..., alias="tenantId")
    devices: list[DeviceSummary]


class ErrorResponse(BaseModel):
    """Error body returned for domain errors."""

    error: str

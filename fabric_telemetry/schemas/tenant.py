"""Tenant fixture schemas used to load tenant data from JSON."""

from pydantic import BaseModel, Field, TypeAdapter

from fabric_telemetry.domain.tenants import Device, DeviceStatus, Tenant


class DeviceFixture(BaseModel):
    """Device entry of a tenant fixture file."""

    id: str = Field(..., min_length=1)
    ip: str
    type: str
    status: DeviceStatus


class TenantFixture(BaseModel):
    """Tenant entry of a tenant fixture file, keyed by tenant ID."""

    name: str
    devices: list[DeviceFixture] = Field(default_factory=list)

    def to_domain(self, tenant_id: str) -> Tenant:
        return Tenant(
            id=tenant_id,
            name=self.name,
            devices=tuple(
                Device(id=d.id, ip=d.ip, type=d.type, status=d.status) for d in self.devices
            ),
        )


TenantFixtureFile = TypeAdapter(dict[str, TenantFixture])

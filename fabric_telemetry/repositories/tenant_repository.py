"""Read-only tenant store."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from fabric_telemetry.core.logging import get_logger
from fabric_telemetry.domain.tenants import Device, DeviceStatus, Tenant
from fabric_telemetry.schemas.tenant import TenantFixtureFile

logger = get_logger(__name__)


def default_tenants() -> list[Tenant]:
    """Demo tenants served when no fixture file is configured."""
    return [
        Tenant(
            id="tenant-a",
            name="Tenant A",
            devices=(
                Device(id="dev1-A", ip="10.0.0.1", type="switch", status=DeviceStatus.ONLINE),
                Device(id="dev2-A", ip="10.0.0.2", type="router", status=DeviceStatus.OFFLINE),
            ),
        ),
        Tenant(
            id="tenant-b",
            name="Tenant B",
            devices=(
                Device(id="dev1-B", ip="192.168.1.1", type="firewall", status=DeviceStatus.ONLINE),
                Device(id="dev2-B", ip="192.168.1.2", type="switch", status=DeviceStatus.ONLINE),
            ),
        ),
    ]


class TenantRepository:
    """In-memory keyed tenant collection. Never mutated after construction."""

    def __init__(self, tenants: Iterable[Tenant]) -> None:
        by_id: dict[str, Tenant] = {}
        for tenant in tenants:
            if tenant.id in by_id:
                raise ValueError(f"Duplicate tenant id '{tenant.id}'")
            by_id[tenant.id] = tenant
        self._tenants: Mapping[str, Tenant] = MappingProxyType(by_id)

    def get(self, tenant_id: str) -> Optional[Tenant]:
        """Exact-match lookup; None when the tenant is unknown."""
        return self._tenants.get(tenant_id)

    def list_ids(self) -> list[str]:
        return list(self._tenants)

    def __len__(self) -> int:
        return len(self._tenants)

    @classmethod
    def with_defaults(cls) -> "TenantRepository":
        return cls(default_tenants())

    @classmethod
    def from_file(cls, path: str | Path) -> "TenantRepository":
        """Load tenants from a JSON fixture shaped ``{tenant_id: {name, devices}}``.

        Raises:
            FileNotFoundError: If the fixture does not exist.
            pydantic.ValidationError: If the fixture content is malformed.
        """
        raw = Path(path).read_text(encoding="utf-8")
        fixtures = TenantFixtureFile.validate_json(raw)
        repository = cls(fixture.to_domain(tenant_id) for tenant_id, fixture in fixtures.items())
        logger.info("Loaded %d tenants from %s", len(repository), path)
        return repository

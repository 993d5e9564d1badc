"""Asynchronous device data sources."""

from __future__ import annotations

import asyncio
from typing import Protocol, Sequence

from fabric_telemetry.domain.tenants import Device, Tenant


class DeviceSource(Protocol):
    """Fetches the device list of a tenant. Awaiting it is the request's only suspension point."""

    async def fetch_devices(self, tenant: Tenant) -> Sequence[Device]: ...


class DelayedDeviceSource:
    """Serves the tenant's own records after a fixed delay.

    Stands in for a database or controller round trip; the delay uses
    ``asyncio.sleep`` so other requests keep running while one waits.
    """

    def __init__(self, delay_seconds: float = 1.0) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds

    async def fetch_devices(self, tenant: Tenant) -> Sequence[Device]:
        await asyncio.sleep(self.delay_seconds)
        return tenant.devices

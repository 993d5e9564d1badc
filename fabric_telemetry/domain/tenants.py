"""Tenant and device records."""

import enum
from dataclasses import dataclass, field


class DeviceStatus(str, enum.Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True, slots=True)
class Device:
    """A network device. IDs are only unique within their tenant."""

    id: str
    ip: str
    type: str
    status: DeviceStatus


@dataclass(frozen=True, slots=True)
class Tenant:
    id: str
    name: str
    devices: tuple[Device, ...] = field(default_factory=tuple)

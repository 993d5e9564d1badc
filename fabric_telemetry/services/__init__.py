"""Service layer entry points."""

from .device_source import DelayedDeviceSource, DeviceSource
from .discovery_service import DiscoveryService

__all__ = ["DelayedDeviceSource", "DeviceSource", "DiscoveryService"]

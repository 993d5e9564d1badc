"""Pydantic schemas."""

from .discovery import DeviceSummary, DiscoveryResponse, ErrorResponse
from .tenant import DeviceFixture, TenantFixture, TenantFixtureFile

__all__ = [
    "DeviceFixture",
    "DeviceSummary",
    "DiscoveryResponse",
    "ErrorResponse",
    "TenantFixture",
    "TenantFixtureFile",
]

"""Multi-tenant fabric telemetry service."""

__version__ = "0.1.0"

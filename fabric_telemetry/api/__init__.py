"""API module initialization.

Routers are imported by ``fabric_telemetry.main``; importing them here would
make ``fabric_telemetry.dependencies`` circular through ``api.middleware``.
"""

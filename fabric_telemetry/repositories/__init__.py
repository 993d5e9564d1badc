"""Repository layer exports."""

from .tenant_repository import TenantRepository, default_tenants

__all__ = ["TenantRepository", "default_tenants"]

"""Domain layer primitives (contexts, records, exceptions)."""

from . import exceptions, tenants
from .context import TenantRequestContext

__all__ = ["TenantRequestContext", "exceptions", "tenants"]

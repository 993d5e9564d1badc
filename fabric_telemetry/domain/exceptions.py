"""Domain-level exception hierarchy."""


class DomainError(Exception):
    """Base exception for service-layer errors."""

    def __init__(self, message: str = "Domain error") -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Raised when a requested resource cannot be located."""


class TenantNotFoundError(NotFoundError):
    """Raised when the tenant store has no record for the requested tenant."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__("Tenant not found")
        self.tenant_id = tenant_id

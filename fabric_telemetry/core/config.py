"""Core configuration module."""

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_title: str = "Fabric Telemetry API"
    api_version: str = "0.1.0"
    api_prefix: str = "/api/v1"
    environment: str = os.getenv("ENVIRONMENT", "development")

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_format: str | None = None  # "json", "console", or None (auto-detect based on environment)

    # Tracing
    service_name: str = "multi-tenant-telemetry-service"
    tracer_name: str = "my-application-tracer"
    tracing_enabled: bool = True
    otel_console_export: bool = True
    otel_exporter_otlp_endpoint: str | None = None

    # Tenancy
    tenant_header: str = "X-Tenant-ID"
    default_tenant_id: str = "unknown-tenant"
    tenant_data_file: str | None = None

    # Discovery
    discovery_delay_seconds: float = Field(default=1.0, ge=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Reject level names the logging module does not know."""
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{value}'")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str | None) -> str | None:
        if value is None or value.strip() == "":
            return None
        value = value.strip().lower()
        if value not in {"json", "console"}:
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return value

    @field_validator("otel_exporter_otlp_endpoint", "tenant_data_file", mode="before")
    @classmethod
    def blank_as_none(cls, value):
        """Treat empty env values as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("tenant_header", "default_tenant_id")
    @classmethod
    def require_non_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


settings = Settings()

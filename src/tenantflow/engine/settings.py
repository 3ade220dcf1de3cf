"""Centralized configuration using pydantic-settings.

All configuration is loaded from environment variables and .env files.
This is the single source of truth for engine configuration.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SyncStrategy(str, Enum):
    """How the periodic cache sweep decides what to drop."""

    FULL = "full"  # Drop every cached entry on each tick
    VERSIONED = "versioned"  # Drop only entries whose registry version moved


class Settings(BaseSettings):
    """Main engine settings.

    All settings can be overridden via environment variables prefixed with
    ``TENANTFLOW_``. For nested settings, use double underscore:
    TENANTFLOW_CACHE__TTL_SECONDS=120
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ============================================================
    # Core Application Settings
    # ============================================================

    app_name: str = Field("tenantflow", description="Application name")
    app_version: str = Field("1.0.0", description="Application version")
    environment: Environment = Field(Environment.DEVELOPMENT, description="Deployment environment")
    debug: bool = Field(False, description="Debug mode")

    # ============================================================
    # Config Cache
    # ============================================================

    class CacheSettings(BaseModel):
        """Resolved-configuration cache."""

        enabled: bool = Field(True, description="Serve tenant configs through the cache")
        ttl_seconds: int = Field(300, gt=0, description="Maximum age of a cached entry")
        max_size: int = Field(1000, gt=0, description="Maximum number of cached tenants")

    cache: CacheSettings = CacheSettings()  # type: ignore[call-arg]

    # ============================================================
    # Background Sync
    # ============================================================

    class SyncSettings(BaseModel):
        """Periodic cache sweep."""

        enabled: bool = Field(True, description="Run the periodic sweep")
        interval_seconds: int = Field(60, gt=0, description="Seconds between sweeps")
        strategy: SyncStrategy = Field(
            SyncStrategy.VERSIONED, description="Sweep strategy: versioned or full"
        )

    sync: SyncSettings = SyncSettings()  # type: ignore[call-arg]

    # ============================================================
    # Tenant Settings
    # ============================================================

    class TenantSettings(BaseModel):
        """Tenant lookup behaviour."""

        default_tenant_id: str = Field("default", description="Baseline tenant ID")
        tenant_header_name: str = Field("X-Tenant-ID", description="Tenant header name")
        lazy_builtin_tenants: bool = Field(
            True, description="Provision built-in template tenants on first lookup"
        )

    tenant: TenantSettings = TenantSettings()  # type: ignore[call-arg]

    # ============================================================
    # Observability
    # ============================================================

    class ObservabilitySettings(BaseModel):
        """Logging configuration."""

        log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
        log_format: str = Field("json", description="Log format (json or console)")

    observability: ObservabilitySettings = ObservabilitySettings()  # type: ignore[call-arg]

    # ============================================================
    # Validation & Helpers
    # ============================================================

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Any) -> Any:
        """Accept environment names in any case."""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TEST


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore
    return _settings


def reset_settings() -> None:
    """Reset settings (mainly for testing)."""
    global _settings
    _settings = None

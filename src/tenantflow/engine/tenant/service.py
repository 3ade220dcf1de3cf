"""
Tenant configuration service.

The façade the rest of the application talks to. It composes the registry,
the read-through cache, the usage checks and the artifact generators behind
one awaitable API. Unknown tenants come back as ``None`` / ``False``; nothing
on a read path raises for "not found".
"""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, Field

from tenantflow.engine.logging import tenant_log_context
from tenantflow.engine.settings import Settings, SyncStrategy, get_settings
from tenantflow.engine.tenant import artifacts, usage
from tenantflow.engine.tenant.cache import CacheStats, ConfigCache
from tenantflow.engine.tenant.identification import resolve_tenant_id
from tenantflow.engine.tenant.models import (
    Branding,
    ConfigTree,
    Features,
    Limits,
    Security,
)
from tenantflow.engine.tenant.registry import WorkflowRegistry
from tenantflow.engine.tenant.templates import TemplateCatalog
from tenantflow.engine.tenant.usage import UsageEntry
from tenantflow.engine.tenant.validation import ValidationResult

logger = structlog.get_logger(__name__)


class TenantConfigOptions(BaseModel):
    """Knobs supplied once at service construction."""

    cache_enabled: bool = True
    cache_ttl: float = Field(300, gt=0, description="Cache TTL in seconds")
    cache_max_size: int = Field(1000, gt=0)
    auto_sync: bool = True
    sync_interval: float = Field(60, gt=0, description="Seconds between cache sweeps")
    sync_strategy: SyncStrategy = SyncStrategy.VERSIONED
    default_tenant_id: str = "default"
    lazy_builtin_tenants: bool = True
    tenant_header_name: str = "X-Tenant-ID"

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TenantConfigOptions":
        settings = settings or get_settings()
        return cls(
            cache_enabled=settings.cache.enabled,
            cache_ttl=settings.cache.ttl_seconds,
            cache_max_size=settings.cache.max_size,
            auto_sync=settings.sync.enabled,
            sync_interval=settings.sync.interval_seconds,
            sync_strategy=settings.sync.strategy,
            default_tenant_id=settings.tenant.default_tenant_id,
            lazy_builtin_tenants=settings.tenant.lazy_builtin_tenants,
            tenant_header_name=settings.tenant.tenant_header_name,
        )


class TenantConfigService:
    """Single entry point for reading and changing tenant configuration."""

    def __init__(
        self,
        options: TenantConfigOptions | None = None,
        registry: WorkflowRegistry | None = None,
        catalog: TemplateCatalog | None = None,
        cache: ConfigCache | None = None,
    ) -> None:
        self.options = options or TenantConfigOptions.from_settings()
        self.registry = registry or WorkflowRegistry(
            catalog=catalog, default_tenant_id=self.options.default_tenant_id
        )
        self.catalog = self.registry.catalog
        self.cache = cache or ConfigCache(
            self.registry,
            ttl=self.options.cache_ttl,
            max_size=self.options.cache_max_size,
            enabled=self.options.cache_enabled,
            sync_interval=self.options.sync_interval,
            strategy=self.options.sync_strategy,
        )
        # Built-in ids removed on purpose are not provisioned again on lookup
        self._removed: set[str] = set()

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    async def start_auto_sync(self) -> None:
        if self.options.auto_sync and self.options.cache_enabled:
            await self.cache.start_auto_sync()

    async def stop_auto_sync(self) -> None:
        await self.cache.stop_auto_sync()

    async def __aenter__(self) -> "TenantConfigService":
        await self.start_auto_sync()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop_auto_sync()

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    async def get_tenant_config(self, tenant_id: str) -> ConfigTree | None:
        tree = self.cache.get(tenant_id)
        if (
            tree is None
            and self.options.lazy_builtin_tenants
            and tenant_id in self.catalog
            and tenant_id not in self._removed
        ):
            logger.info("Provisioning built-in tenant on first lookup", tenant_id=tenant_id)
            tree = self.registry.create_from_template(tenant_id, tenant_id)
            self.cache.put(tenant_id, tree)
        return tree

    async def get_tenant_branding(self, tenant_id: str) -> Branding | None:
        tree = await self.get_tenant_config(tenant_id)
        return tree.branding if tree else None

    async def get_tenant_security(self, tenant_id: str) -> Security | None:
        tree = await self.get_tenant_config(tenant_id)
        return tree.security if tree else None

    async def get_tenant_features(self, tenant_id: str) -> Features | None:
        tree = await self.get_tenant_config(tenant_id)
        return tree.features if tree else None

    async def get_tenant_limits(self, tenant_id: str) -> Limits | None:
        tree = await self.get_tenant_config(tenant_id)
        return tree.limits if tree else None

    async def is_feature_enabled(self, tenant_id: str, feature_path: str) -> bool:
        tree = await self.get_tenant_config(tenant_id)
        if tree is None:
            return False
        return usage.is_feature_enabled(tree, feature_path)

    async def is_limit_reached(self, tenant_id: str, dimension: str) -> bool:
        tree = await self.get_tenant_config(tenant_id)
        if tree is None:
            return False
        return usage.is_limit_reached(tree, dimension)

    async def get_tenant_usage(self, tenant_id: str) -> dict[str, UsageEntry] | None:
        tree = await self.get_tenant_config(tenant_id)
        if tree is None:
            return None
        return usage.usage_report(tree)

    async def get_all_tenant_configs(self) -> dict[str, ConfigTree]:
        return self.registry.get_all()

    async def validate_tenant_config(self, tenant_id: str) -> ValidationResult:
        tree = await self.get_tenant_config(tenant_id)
        if tree is None:
            return ValidationResult(valid=False, errors=["Tenant not found"])
        return self.registry.validate(tree)

    def identify_tenant(
        self, host: str | None, headers: Mapping[str, str] | None = None
    ) -> str | None:
        """Tenant id for a request, looked up with the configured tenant header."""
        return resolve_tenant_id(host, headers, self.options.tenant_header_name)

    # ------------------------------------------------------------
    # Derived artifacts
    # ------------------------------------------------------------

    async def get_tenant_style_sheet(self, tenant_id: str) -> str | None:
        tree = await self.get_tenant_config(tenant_id)
        return artifacts.generate_style_sheet(tree.branding) if tree else None

    async def get_tenant_env_map(self, tenant_id: str) -> dict[str, str] | None:
        tree = await self.get_tenant_config(tenant_id)
        return artifacts.generate_env_map(tree) if tree else None

    async def get_tenant_headers(self, tenant_id: str) -> dict[str, str] | None:
        tree = await self.get_tenant_config(tenant_id)
        return artifacts.generate_response_headers(tree) if tree else None

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    async def update_tenant_config(
        self, tenant_id: str, updates: Mapping[str, Any] | BaseModel
    ) -> bool:
        with tenant_log_context(tenant_id):
            return self.cache.update(tenant_id, updates)

    async def create_tenant_from_template(
        self,
        tenant_id: str,
        template: str,
        overrides: Mapping[str, Any] | BaseModel | None = None,
        *,
        overwrite: bool = False,
    ) -> ConfigTree:
        with tenant_log_context(tenant_id):
            tree = self.registry.create_from_template(
                tenant_id, template, overrides, overwrite=overwrite
            )
        self._removed.discard(tenant_id)
        self.cache.put(tenant_id, tree)
        return tree

    async def remove_tenant_config(self, tenant_id: str) -> bool:
        with tenant_log_context(tenant_id):
            removed = self.cache.remove(tenant_id)
        if removed:
            self._removed.add(tenant_id)
        return removed

    # ------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------

    def clear_cache(self) -> None:
        self.cache.invalidate_all()

    def get_cache_stats(self) -> CacheStats:
        return self.cache.stats()

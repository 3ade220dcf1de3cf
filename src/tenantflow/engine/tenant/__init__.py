"""
Tenant configuration resolution.

Resolves per-tenant configuration trees from templates and overrides, keeps
them in a registry, caches them with time-based invalidation and derives
artifacts (CSS, environment maps, response headers) from them.
"""

from tenantflow.engine.tenant.artifacts import (
    generate_env_map,
    generate_response_headers,
    generate_style_sheet,
)
from tenantflow.engine.tenant.cache import CacheStats, ConfigCache
from tenantflow.engine.tenant.exceptions import (
    MergeError,
    TemplateNotFoundError,
    TenantAlreadyExistsError,
    TenantConfigError,
)
from tenantflow.engine.tenant.identification import extract_subdomain, resolve_tenant_id
from tenantflow.engine.tenant.merge import resolve
from tenantflow.engine.tenant.models import (
    Branding,
    ConfigTree,
    Features,
    Limits,
    PartialConfigTree,
    Security,
    TenantStatus,
    build_default_tree,
)
from tenantflow.engine.tenant.registry import WorkflowRegistry
from tenantflow.engine.tenant.service import TenantConfigOptions, TenantConfigService
from tenantflow.engine.tenant.templates import TemplateCatalog
from tenantflow.engine.tenant.usage import (
    UsageEntry,
    is_feature_enabled,
    is_limit_reached,
    usage_report,
)
from tenantflow.engine.tenant.validation import ValidationResult, validate_tree

__all__ = [
    # Models
    "ConfigTree",
    "PartialConfigTree",
    "Branding",
    "Security",
    "Features",
    "Limits",
    "TenantStatus",
    "build_default_tree",
    # Resolution
    "resolve",
    "TemplateCatalog",
    "WorkflowRegistry",
    "ValidationResult",
    "validate_tree",
    # Usage
    "UsageEntry",
    "is_limit_reached",
    "is_feature_enabled",
    "usage_report",
    # Cache
    "ConfigCache",
    "CacheStats",
    # Artifacts
    "generate_style_sheet",
    "generate_env_map",
    "generate_response_headers",
    # Identification
    "extract_subdomain",
    "resolve_tenant_id",
    # Service
    "TenantConfigOptions",
    "TenantConfigService",
    # Errors
    "TenantConfigError",
    "TenantAlreadyExistsError",
    "TemplateNotFoundError",
    "MergeError",
]

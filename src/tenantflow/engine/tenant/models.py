"""
Tenant configuration tree.

One ``ConfigTree`` describes everything a tenant is configured with. Every
nested field carries the baseline value as its default, so a tree built from
only the identity fields is already fully populated. Structural invariants
(subdomain pattern, hex colours, limit sanity) are not enforced
by the types; ``validation.validate_tree`` reports on them instead.

Field names are snake_case in Python. Every model also accepts and emits the
camelCase form used by persisted override documents.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConfigModel(BaseModel):
    """Base model for every ConfigTree section."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================
# Enumerations
# ============================================================


class TenantStatus(str, Enum):
    """Tenant lifecycle status."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    PENDING = "pending"
    ARCHIVED = "archived"


class TenantPlan(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"
    CUSTOM = "custom"


class TenantTier(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class RateLimitKey(str, Enum):
    """What a rate-limit window is counted against."""

    IP = "ip"
    USER = "user"
    TENANT = "tenant"


class IsolationMode(str, Enum):
    DATABASE = "database"
    SCHEMA = "schema"
    TABLE = "table"


class ResetPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# ============================================================
# Metadata
# ============================================================


class TenantMetadata(ConfigModel):
    plan: TenantPlan = TenantPlan.FREE
    tier: TenantTier = TenantTier.BASIC
    created_at: datetime = Field(default_factory=_utcnow)
    last_active: datetime = Field(default_factory=_utcnow)
    created_by: str = "system"
    tags: list[str] = Field(default_factory=list)
    region: str = "us-east-1"
    timezone: str = "UTC"


# ============================================================
# Branding
# ============================================================


class LogoSet(ConfigModel):
    primary: str = "/assets/logos/default-logo.svg"
    secondary: str = "/assets/logos/default-logo-secondary.svg"
    icon: str = "/assets/logos/default-icon.svg"
    favicon: str = "/assets/favicons/default-favicon.ico"
    animated: str | None = None


class TextPalette(ConfigModel):
    primary: str = "#0F172A"
    secondary: str = "#475569"
    muted: str = "#94A3B8"


class ColorPalette(ConfigModel):
    primary: str = "#3B82F6"
    secondary: str = "#6B7280"
    accent: str = "#10B981"
    success: str = "#10B981"
    warning: str = "#F59E0B"
    error: str = "#EF4444"
    info: str = "#3B82F6"
    background: str = "#FFFFFF"
    surface: str = "#F8FAFC"
    text: TextPalette = Field(default_factory=TextPalette)


class FontFamily(ConfigModel):
    primary: str = "Inter, system-ui, sans-serif"
    secondary: str = "Roboto, sans-serif"
    mono: str = "JetBrains Mono, monospace"


class Typography(ConfigModel):
    font_family: FontFamily = Field(default_factory=FontFamily)
    font_size: dict[str, str] = Field(
        default_factory=lambda: {
            "xs": "0.75rem",
            "sm": "0.875rem",
            "base": "1rem",
            "lg": "1.125rem",
            "xl": "1.25rem",
            "2xl": "1.5rem",
            "3xl": "1.875rem",
            "4xl": "2.25rem",
            "5xl": "3rem",
        }
    )
    font_weight: dict[str, int] = Field(
        default_factory=lambda: {
            "light": 300,
            "normal": 400,
            "medium": 500,
            "semibold": 600,
            "bold": 700,
            "extrabold": 800,
        }
    )
    line_height: dict[str, float] = Field(
        default_factory=lambda: {"tight": 1.25, "normal": 1.5, "relaxed": 1.75}
    )


class BrandAssets(ConfigModel):
    hero_image: str | None = "/assets/images/default-hero.jpg"
    background_pattern: str | None = "/assets/patterns/default-pattern.svg"
    placeholder_image: str | None = "/assets/images/default-placeholder.jpg"
    illustrations: dict[str, str] = Field(default_factory=dict)
    icons: dict[str, str] = Field(default_factory=dict)


class Branding(ConfigModel):
    logo: LogoSet = Field(default_factory=LogoSet)
    colors: ColorPalette = Field(default_factory=ColorPalette)
    typography: Typography = Field(default_factory=Typography)
    spacing: dict[str, str] = Field(
        default_factory=lambda: {
            "xs": "0.25rem",
            "sm": "0.5rem",
            "md": "1rem",
            "lg": "1.5rem",
            "xl": "2rem",
            "2xl": "3rem",
            "3xl": "4rem",
            "4xl": "6rem",
        }
    )
    border_radius: dict[str, str] = Field(
        default_factory=lambda: {
            "none": "0",
            "sm": "0.125rem",
            "base": "0.25rem",
            "md": "0.375rem",
            "lg": "0.5rem",
            "xl": "0.75rem",
            "2xl": "1rem",
            "full": "9999px",
        }
    )
    shadows: dict[str, str] = Field(
        default_factory=lambda: {
            "sm": "0 1px 2px 0 rgba(0, 0, 0, 0.05)",
            "base": "0 1px 3px 0 rgba(0, 0, 0, 0.1), 0 1px 2px 0 rgba(0, 0, 0, 0.06)",
            "md": "0 4px 6px -1px rgba(0, 0, 0, 0.1), 0 2px 4px -1px rgba(0, 0, 0, 0.06)",
            "lg": "0 10px 15px -3px rgba(0, 0, 0, 0.1), 0 4px 6px -2px rgba(0, 0, 0, 0.05)",
            "xl": "0 20px 25px -5px rgba(0, 0, 0, 0.1), 0 10px 10px -5px rgba(0, 0, 0, 0.04)",
            "2xl": "0 25px 50px -12px rgba(0, 0, 0, 0.25)",
        }
    )
    custom_css: str | None = None
    custom_js: str | None = None
    assets: BrandAssets = Field(default_factory=BrandAssets)


# ============================================================
# Security
# ============================================================


class AuthenticationPolicy(ConfigModel):
    session_timeout: int = 480  # minutes
    require_mfa: bool = Field(False, alias="requireMFA")
    max_login_attempts: int = 5
    lockout_duration: int = 30  # minutes
    password_expiry: int = 90  # days
    remember_me: bool = True
    remember_me_duration: int = 30  # days
    allowed_auth_methods: list[str] = Field(default_factory=lambda: ["password", "oauth"])


class PasswordPolicy(ConfigModel):
    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_symbols: bool = False
    prevent_common_passwords: bool = True
    prevent_user_info: bool = True
    prevent_sequential_chars: bool = True


class RateLimitPolicy(ConfigModel):
    enabled: bool = True
    max_requests: int = 1000
    window_ms: int = 900_000
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False
    key_generator: RateLimitKey = RateLimitKey.IP
    message: str = "Too many requests, please try again later."


class CorsPolicy(ConfigModel):
    enabled: bool = True
    origins: list[str] = Field(default_factory=list)
    methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
    )
    allowed_headers: list[str] = Field(
        default_factory=lambda: [
            "Origin",
            "X-Requested-With",
            "Content-Type",
            "Accept",
            "Authorization",
        ]
    )
    credentials: bool = True
    max_age: int = 86400


class DomainRestrictions(ConfigModel):
    allowed_domains: list[str] = Field(default_factory=list)
    blocked_domains: list[str] = Field(default_factory=list)
    redirect_to_https: bool = True
    enforce_subdomain: bool = False


class SecurityHeaders(ConfigModel):
    """The fixed response security headers, keyed by header name on the wire."""

    x_content_type_options: str = Field("nosniff", alias="X-Content-Type-Options")
    x_frame_options: str = Field("SAMEORIGIN", alias="X-Frame-Options")
    x_xss_protection: str = Field("1; mode=block", alias="X-XSS-Protection")
    referrer_policy: str = Field("strict-origin-when-cross-origin", alias="Referrer-Policy")
    permissions_policy: str = Field(
        "geolocation=(), microphone=(), camera=()", alias="Permissions-Policy"
    )
    strict_transport_security: str = Field(
        "max-age=31536000; includeSubDomains", alias="Strict-Transport-Security"
    )

    def as_headers(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class DataProtection(ConfigModel):
    encrypt_sensitive_data: bool = True
    encryption_algorithm: str = "aes-256-gcm"
    data_retention: int = 2555  # days
    anonymize_on_delete: bool = True
    audit_logging: bool = True
    gdpr_compliant: bool = True


class Security(ConfigModel):
    authentication: AuthenticationPolicy = Field(default_factory=AuthenticationPolicy)
    password_policy: PasswordPolicy = Field(default_factory=PasswordPolicy)
    rate_limiting: RateLimitPolicy = Field(default_factory=RateLimitPolicy)
    cors: CorsPolicy = Field(default_factory=CorsPolicy)
    domain_restrictions: DomainRestrictions = Field(default_factory=DomainRestrictions)
    security_headers: SecurityHeaders = Field(default_factory=SecurityHeaders)
    data_protection: DataProtection = Field(default_factory=DataProtection)


# ============================================================
# Features
# ============================================================


class CoreFeatures(ConfigModel):
    user_management: bool = True
    authentication: bool = True
    authorization: bool = True
    profile_management: bool = True
    settings: bool = True


class AnalyticsPrivacy(ConfigModel):
    anonymize_ip: bool = Field(True, alias="anonymizeIP")
    respect_do_not_track: bool = True
    cookie_consent: bool = True


class AnalyticsFeature(ConfigModel):
    enabled: bool = True
    provider: str = "google-analytics"
    tracking_id: str | None = None
    events: list[str] = Field(default_factory=lambda: ["page_view", "user_action"])
    privacy: AnalyticsPrivacy = Field(default_factory=AnalyticsPrivacy)


class NotificationPreferences(ConfigModel):
    user_controllable: bool = True
    default_enabled: list[str] = Field(default_factory=lambda: ["email", "in-app"])


class NotificationsFeature(ConfigModel):
    enabled: bool = True
    channels: list[str] = Field(default_factory=lambda: ["email", "in-app"])
    templates: dict[str, bool] = Field(
        default_factory=lambda: {"welcome": True, "passwordReset": True, "accountLocked": True}
    )
    preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)


class UploadStorage(ConfigModel):
    provider: str = "local"
    bucket: str = "uploads"
    cdn: bool = False


class UploadProcessing(ConfigModel):
    image_resize: bool = True
    thumbnail_generation: bool = True
    virus_scan: bool = True


class FileUploadFeature(ConfigModel):
    enabled: bool = True
    max_file_size: int = 10  # MB
    allowed_types: list[str] = Field(default_factory=lambda: ["image", "document"])
    storage: UploadStorage = Field(default_factory=UploadStorage)
    processing: UploadProcessing = Field(default_factory=UploadProcessing)


class ApiAccessFeature(ConfigModel):
    enabled: bool = True
    version: str = "v1"
    rate_limit: int = 1000
    authentication: str = "bearer"
    documentation: bool = True
    sandbox: bool = True


class PlatformFeatures(ConfigModel):
    analytics: AnalyticsFeature = Field(default_factory=AnalyticsFeature)
    notifications: NotificationsFeature = Field(default_factory=NotificationsFeature)
    file_upload: FileUploadFeature = Field(default_factory=FileUploadFeature)
    api_access: ApiAccessFeature = Field(default_factory=ApiAccessFeature)


class CustomDomainFeature(ConfigModel):
    enabled: bool = False
    ssl_required: bool = True
    dns_validation: bool = True
    max_domains: int = 1


class WhiteLabelFeature(ConfigModel):
    enabled: bool = False
    custom_branding: bool = False
    remove_powered_by: bool = False


class RetryPolicy(ConfigModel):
    max_retries: int = 3
    backoff_multiplier: float = 2


class WebhookPolicy(ConfigModel):
    enabled: bool = True
    max_endpoints: int = 5
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)


class IntegrationsFeature(ConfigModel):
    enabled: bool = True
    available: list[str] = Field(default_factory=lambda: ["slack", "microsoft-teams"])
    webhooks: WebhookPolicy = Field(default_factory=WebhookPolicy)


class ReportingFeature(ConfigModel):
    enabled: bool = True
    dashboards: bool = True
    exports: list[str] = Field(default_factory=lambda: ["pdf", "csv"])
    scheduled_reports: bool = True
    custom_metrics: bool = False


class BusinessFeatures(ConfigModel):
    custom_domain: CustomDomainFeature = Field(default_factory=CustomDomainFeature)
    white_label: WhiteLabelFeature = Field(default_factory=WhiteLabelFeature)
    integrations: IntegrationsFeature = Field(default_factory=IntegrationsFeature)
    reporting: ReportingFeature = Field(default_factory=ReportingFeature)


class MultiTenancyFeature(ConfigModel):
    enabled: bool = True
    isolation: IsolationMode = IsolationMode.DATABASE
    cross_tenant_access: bool = False


class AuditLoggingFeature(ConfigModel):
    enabled: bool = True
    events: list[str] = Field(default_factory=lambda: ["user_login", "user_logout", "data_access"])
    retention: int = 2555  # days
    encryption: bool = True


class BackupFeature(ConfigModel):
    enabled: bool = True
    frequency: str = "daily"
    retention: int = 30  # days
    encryption: bool = True
    compression: bool = True


class MonitoringFeature(ConfigModel):
    enabled: bool = True
    metrics: list[str] = Field(default_factory=lambda: ["performance", "errors", "usage"])
    alerts: bool = True
    dashboards: bool = True


class AdvancedFeatures(ConfigModel):
    multi_tenancy: MultiTenancyFeature = Field(default_factory=MultiTenancyFeature)
    audit_logging: AuditLoggingFeature = Field(default_factory=AuditLoggingFeature)
    backup: BackupFeature = Field(default_factory=BackupFeature)
    monitoring: MonitoringFeature = Field(default_factory=MonitoringFeature)


class Features(ConfigModel):
    core: CoreFeatures = Field(default_factory=CoreFeatures)
    platform: PlatformFeatures = Field(default_factory=PlatformFeatures)
    business: BusinessFeatures = Field(default_factory=BusinessFeatures)
    advanced: AdvancedFeatures = Field(default_factory=AdvancedFeatures)


# ============================================================
# Limits
# ============================================================


class QuotaLimit(ConfigModel):
    """One quota dimension."""

    max: int = 1
    current: int = 0
    warning_threshold: int | None = None


class ApiCallLimit(QuotaLimit):
    reset_period: ResetPeriod = ResetPeriod.MONTHLY


class Limits(ConfigModel):
    users: QuotaLimit = Field(
        default_factory=lambda: QuotaLimit(max=100, current=0, warning_threshold=80)
    )
    storage: QuotaLimit = Field(
        default_factory=lambda: QuotaLimit(max=1024, current=0, warning_threshold=800)
    )  # MB
    api_calls: ApiCallLimit = Field(
        default_factory=lambda: ApiCallLimit(max=10000, current=0, warning_threshold=8000)
    )
    custom_domains: QuotaLimit = Field(default_factory=lambda: QuotaLimit(max=1, current=0))
    integrations: QuotaLimit = Field(default_factory=lambda: QuotaLimit(max=5, current=0))

    def dimensions(self) -> dict[str, QuotaLimit]:
        """Quota records keyed by dimension name."""
        return {name: getattr(self, name) for name in type(self).model_fields}


# ============================================================
# Integrations
# ============================================================


class EmailIntegration(ConfigModel):
    provider: str = "sendgrid"
    api_key: str | None = None
    from_address: str = "noreply@example.com"
    templates: dict[str, str] = Field(default_factory=dict)


class PaymentIntegration(ConfigModel):
    provider: str = "stripe"
    api_key: str | None = None
    webhook_secret: str | None = None
    currency: str = "USD"


class AnalyticsIntegration(ConfigModel):
    provider: str = "google-analytics"
    tracking_id: str | None = None
    api_key: str | None = None


class StorageIntegration(ConfigModel):
    provider: str = "local"
    bucket: str = "uploads"
    region: str = "us-east-1"
    cdn: bool = False


class Integrations(ConfigModel):
    email: EmailIntegration = Field(default_factory=EmailIntegration)
    payment: PaymentIntegration = Field(default_factory=PaymentIntegration)
    analytics: AnalyticsIntegration = Field(default_factory=AnalyticsIntegration)
    storage: StorageIntegration = Field(default_factory=StorageIntegration)


# ============================================================
# Workflow
# ============================================================


class OnboardingStep(ConfigModel):
    enabled: bool = True
    steps: list[str] = Field(default_factory=lambda: ["welcome", "profile_setup", "feature_tour"])
    automation: bool = True


class OffboardingStep(ConfigModel):
    enabled: bool = True
    data_retention: int = 30  # days
    notification_period: int = 7  # days


class Lifecycle(ConfigModel):
    onboarding: OnboardingStep = Field(default_factory=OnboardingStep)
    offboarding: OffboardingStep = Field(default_factory=OffboardingStep)


class Rollouts(ConfigModel):
    feature_flags: dict[str, bool] = Field(default_factory=dict)
    gradual_rollout: dict[str, float] = Field(default_factory=dict)  # percentage
    beta_features: list[str] = Field(default_factory=list)
    experimental_features: list[str] = Field(default_factory=list)


class HealthChecks(ConfigModel):
    enabled: bool = True
    interval: int = 60  # seconds
    endpoints: list[str] = Field(default_factory=lambda: ["/health", "/api/status"])


class AlertPolicy(ConfigModel):
    enabled: bool = True
    channels: list[str] = Field(default_factory=lambda: ["email", "slack"])
    thresholds: dict[str, float] = Field(
        default_factory=lambda: {"errorRate": 5, "responseTime": 2000, "cpuUsage": 80}
    )


class MetricsPolicy(ConfigModel):
    enabled: bool = True
    providers: list[str] = Field(default_factory=lambda: ["prometheus"])
    retention: int = 90  # days


class OperationalMonitoring(ConfigModel):
    health_checks: HealthChecks = Field(default_factory=HealthChecks)
    alerts: AlertPolicy = Field(default_factory=AlertPolicy)
    metrics: MetricsPolicy = Field(default_factory=MetricsPolicy)


class Workflow(ConfigModel):
    lifecycle: Lifecycle = Field(default_factory=Lifecycle)
    rollouts: Rollouts = Field(default_factory=Rollouts)
    monitoring: OperationalMonitoring = Field(default_factory=OperationalMonitoring)


# ============================================================
# Compliance
# ============================================================


class GdprCompliance(ConfigModel):
    enabled: bool = True
    data_processing_basis: str = "consent"
    consent_required: bool = True
    right_to_erasure: bool = True


class Soc2Compliance(ConfigModel):
    enabled: bool = False
    type: str = "Type II"
    last_audit: datetime = Field(default_factory=_utcnow)


class HipaaCompliance(ConfigModel):
    enabled: bool = False
    baa_signed: bool = False
    encryption_required: bool = True


class Iso27001Compliance(ConfigModel):
    enabled: bool = False
    certification_date: datetime = Field(default_factory=_utcnow)
    renewal_date: datetime = Field(default_factory=_utcnow)


class Compliance(ConfigModel):
    gdpr: GdprCompliance = Field(default_factory=GdprCompliance)
    soc2: Soc2Compliance = Field(default_factory=Soc2Compliance)
    hipaa: HipaaCompliance = Field(default_factory=HipaaCompliance)
    iso27001: Iso27001Compliance = Field(default_factory=Iso27001Compliance)


# ============================================================
# The tree
# ============================================================


class ConfigTree(ConfigModel):
    """A tenant's complete configuration."""

    id: str
    name: str
    subdomain: str
    domain: str | None = None
    status: TenantStatus = TenantStatus.ACTIVE

    metadata: TenantMetadata = Field(default_factory=TenantMetadata)
    branding: Branding = Field(default_factory=Branding)
    security: Security = Field(default_factory=Security)
    features: Features = Field(default_factory=Features)
    limits: Limits = Field(default_factory=Limits)
    integrations: Integrations = Field(default_factory=Integrations)
    workflow: Workflow = Field(default_factory=Workflow)
    compliance: Compliance = Field(default_factory=Compliance)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON document form."""
        return self.model_dump(mode="json", by_alias=True)


# A partial tree is any nested mapping whose keys are ConfigTree field names
# or their camelCase aliases.
PartialConfigTree = dict[str, Any]

SECTION_NAMES: tuple[str, ...] = (
    "metadata",
    "branding",
    "security",
    "features",
    "limits",
    "integrations",
    "workflow",
    "compliance",
)


def build_default_tree(tenant_id: str = "default") -> ConfigTree:
    """Construct the baseline tree every template-based tenant is merged onto."""
    return ConfigTree(id=tenant_id, name="Default Tenant", subdomain=tenant_id)

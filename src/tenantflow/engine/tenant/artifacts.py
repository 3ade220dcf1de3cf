"""
Derived artifacts.

Pure functions that turn a resolved tree into text or flat maps consumed
outside the engine: a style sheet for page rendering, an environment map for
deployment tooling, and a response header map for the HTTP layer. Nothing
here is persisted; callers regenerate on demand.
"""

from tenantflow.engine.tenant.models import Branding, ConfigTree


def generate_style_sheet(branding: Branding) -> str:
    """
    Render tenant CSS variables and the canned component rules.

    The tenant's ``custom_css`` is appended verbatim after everything else so
    tenant overrides win by cascade order.
    """
    colors = branding.colors
    fonts = branding.typography.font_family
    spacing = branding.spacing
    radius = branding.border_radius
    shadows = branding.shadows
    weight = branding.typography.font_weight

    sheet = f"""
:root {{
  --tenant-primary-color: {colors.primary};
  --tenant-secondary-color: {colors.secondary};
  --tenant-accent-color: {colors.accent};
  --tenant-success-color: {colors.success};
  --tenant-warning-color: {colors.warning};
  --tenant-error-color: {colors.error};
  --tenant-info-color: {colors.info};
  --tenant-background-color: {colors.background};
  --tenant-surface-color: {colors.surface};
  --tenant-text-primary: {colors.text.primary};
  --tenant-text-secondary: {colors.text.secondary};
  --tenant-text-muted: {colors.text.muted};

  --tenant-font-family: {fonts.primary};
  --tenant-font-family-secondary: {fonts.secondary};
  --tenant-font-family-mono: {fonts.mono};
}}

body {{
  font-family: var(--tenant-font-family);
  background-color: var(--tenant-background-color);
  color: var(--tenant-text-primary);
}}

.tenant-button-primary {{
  background-color: var(--tenant-primary-color);
  color: white;
  border-radius: {radius.get("md", "0")};
  padding: {spacing.get("sm", "0")} {spacing.get("md", "0")};
  font-weight: {weight.get("medium", 500)};
  box-shadow: {shadows.get("sm", "none")};
  transition: all 0.2s ease;
}}

.tenant-button-primary:hover {{
  box-shadow: {shadows.get("md", "none")};
  transform: translateY(-1px);
}}

.tenant-card {{
  background-color: var(--tenant-surface-color);
  border-radius: {radius.get("lg", "0")};
  box-shadow: {shadows.get("base", "none")};
  padding: {spacing.get("lg", "0")};
  border: 1px solid #E5E7EB;
}}

.tenant-input {{
  border: 1px solid #D1D5DB;
  border-radius: {radius.get("md", "0")};
  padding: {spacing.get("sm", "0")} {spacing.get("md", "0")};
  font-family: var(--tenant-font-family);
  transition: border-color 0.2s ease;
}}

.tenant-input:focus {{
  border-color: var(--tenant-primary-color);
  box-shadow: 0 0 0 3px {colors.primary}20;
  outline: none;
}}
"""
    return sheet + (branding.custom_css or "") + "\n"


def generate_env_map(tree: ConfigTree) -> dict[str, str]:
    """Flatten the deployment-relevant fields into ``TENANT_*`` variables."""
    branding = tree.branding
    security = tree.security
    limits = tree.limits

    return {
        "TENANT_ID": tree.id,
        "TENANT_NAME": tree.name,
        "TENANT_SUBDOMAIN": tree.subdomain,
        "TENANT_PLAN": tree.metadata.plan.value,
        "TENANT_TIER": tree.metadata.tier.value,
        "TENANT_REGION": tree.metadata.region,
        "TENANT_TIMEZONE": tree.metadata.timezone,
        "TENANT_PRIMARY_COLOR": branding.colors.primary,
        "TENANT_SECONDARY_COLOR": branding.colors.secondary,
        "TENANT_ACCENT_COLOR": branding.colors.accent,
        "TENANT_FONT_FAMILY": branding.typography.font_family.primary,
        "TENANT_LOGO_URL": branding.logo.primary,
        "TENANT_FAVICON_URL": branding.logo.favicon,
        "TENANT_MAX_USERS": str(limits.users.max),
        "TENANT_MAX_STORAGE": str(limits.storage.max),
        "TENANT_MAX_API_CALLS": str(limits.api_calls.max),
        "TENANT_SESSION_TIMEOUT": str(security.authentication.session_timeout),
        "TENANT_REQUIRE_MFA": "true" if security.authentication.require_mfa else "false",
        "TENANT_RATE_LIMIT": str(security.rate_limiting.max_requests),
        "TENANT_CORS_ORIGINS": ",".join(security.cors.origins),
        "TENANT_ALLOWED_DOMAINS": ",".join(security.domain_restrictions.allowed_domains),
    }


def generate_response_headers(tree: ConfigTree) -> dict[str, str]:
    """Headers the HTTP layer attaches to every response served for the tenant."""
    branding = tree.branding
    security = tree.security

    headers = {
        "X-Tenant-ID": tree.id,
        "X-Tenant-Name": tree.name,
        "X-Tenant-Plan": tree.metadata.plan.value,
        "X-Tenant-Tier": tree.metadata.tier.value,
        "X-Tenant-Primary-Color": branding.colors.primary,
        "X-Tenant-Secondary-Color": branding.colors.secondary,
        "X-Tenant-Accent-Color": branding.colors.accent,
        "X-Tenant-Font-Family": branding.typography.font_family.primary,
        "X-Tenant-Logo": branding.logo.primary,
        "X-Tenant-Favicon": branding.logo.favicon,
        "X-Tenant-Hero-Image": branding.assets.hero_image or "",
    }
    headers.update(security.security_headers.as_headers())

    if security.cors.enabled:
        headers.update(
            {
                "Access-Control-Allow-Origin": ", ".join(security.cors.origins),
                "Access-Control-Allow-Methods": ", ".join(security.cors.methods),
                "Access-Control-Allow-Headers": ", ".join(security.cors.allowed_headers),
                "Access-Control-Allow-Credentials": str(security.cors.credentials).lower(),
                "Access-Control-Max-Age": str(security.cors.max_age),
            }
        )

    if security.rate_limiting.enabled:
        headers["X-RateLimit-Limit"] = str(security.rate_limiting.max_requests)
        headers["X-RateLimit-Window"] = str(security.rate_limiting.window_ms)

    return headers

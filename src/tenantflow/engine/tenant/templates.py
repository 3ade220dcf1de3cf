"""
Template catalog.

Templates are named partial trees merged between the baseline and caller
overrides when a tenant is provisioned.
"""

import copy
from collections.abc import Mapping
from typing import Any

import structlog

from tenantflow.engine.tenant.exceptions import TemplateNotFoundError
from tenantflow.engine.tenant.models import PartialConfigTree

logger = structlog.get_logger(__name__)


BUILTIN_TEMPLATES: dict[str, PartialConfigTree] = {
    "demo": {
        "name": "Demo Platform",
        "subdomain": "demo",
        "metadata": {"plan": "pro", "tier": "standard"},
        "branding": {
            "colors": {"primary": "#1E40AF", "secondary": "#64748B", "accent": "#059669"},
        },
        "limits": {
            "users": {"max": 50, "warning_threshold": 40},
            "storage": {"max": 2048, "warning_threshold": 1638},
            "api_calls": {"max": 20000, "warning_threshold": 16000},
        },
    },
    "idea-vibes": {
        "name": "Idea Vibes",
        "subdomain": "idea-vibes",
        "metadata": {"plan": "enterprise", "tier": "premium"},
        "branding": {
            "colors": {"primary": "#8B5CF6", "secondary": "#F59E0B", "accent": "#EC4899"},
        },
        "limits": {
            "users": {"max": 200, "warning_threshold": 160},
            "storage": {"max": 10240, "warning_threshold": 8192},
            "api_calls": {"max": 50000, "warning_threshold": 40000},
        },
    },
    "enterprise": {
        "name": "Enterprise",
        "subdomain": "enterprise",
        "metadata": {"plan": "enterprise", "tier": "enterprise", "tags": ["enterprise"]},
        "security": {
            "authentication": {"require_mfa": True, "session_timeout": 240},
            "password_policy": {"min_length": 12, "require_symbols": True},
        },
        "features": {
            "business": {
                "custom_domain": {"enabled": True, "max_domains": 5},
                "white_label": {"enabled": True, "custom_branding": True, "remove_powered_by": True},
                "reporting": {"custom_metrics": True, "exports": ["pdf", "csv", "xlsx"]},
            },
            "advanced": {"multi_tenancy": {"isolation": "database"}},
        },
        "limits": {
            "users": {"max": 1000, "warning_threshold": 800},
            "storage": {"max": 102400, "warning_threshold": 81920},
            "api_calls": {"max": 1000000, "warning_threshold": 800000},
            "custom_domains": {"max": 5},
            "integrations": {"max": 25},
        },
        "compliance": {"soc2": {"enabled": True}, "iso27001": {"enabled": True}},
    },
    "startup": {
        "name": "Startup",
        "subdomain": "startup",
        "metadata": {"plan": "free", "tier": "basic", "tags": ["startup"]},
        "features": {
            "platform": {"api_access": {"sandbox": True, "rate_limit": 500}},
            "advanced": {
                "backup": {"frequency": "weekly", "retention": 14},
                "multi_tenancy": {"isolation": "schema"},
            },
        },
        "limits": {
            "users": {"max": 10, "warning_threshold": 8},
            "storage": {"max": 512, "warning_threshold": 400},
            "api_calls": {"max": 5000, "warning_threshold": 4000},
            "integrations": {"max": 2},
        },
    },
}


class TemplateCatalog:
    """Named partial ConfigTrees used as merge bases."""

    def __init__(self, templates: Mapping[str, PartialConfigTree] | None = None) -> None:
        source = BUILTIN_TEMPLATES if templates is None else templates
        self._templates: dict[str, PartialConfigTree] = copy.deepcopy(dict(source))

    def get(self, name: str) -> PartialConfigTree:
        """Return a copy of the named template; unknown names give an empty partial."""
        template = self._templates.get(name)
        if template is None:
            logger.debug("Unknown template, falling back to baseline", template=name)
            return {}
        return copy.deepcopy(template)

    def require(self, name: str) -> PartialConfigTree:
        """Strict lookup for callers that must not fall back to the baseline."""
        if name not in self._templates:
            raise TemplateNotFoundError(name)
        return copy.deepcopy(self._templates[name])

    def register(self, name: str, template: Mapping[str, Any]) -> None:
        self._templates[name] = copy.deepcopy(dict(template))
        logger.info("Template registered", template=name)

    def names(self) -> list[str]:
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

"""
Advisory validation of tenant configuration trees.

Validation never blocks registration and never raises: it walks the whole
tree and reports every violation it finds.
"""

import re

from pydantic import BaseModel, Field

from tenantflow.engine.tenant.models import ColorPalette, ConfigTree, TextPalette

SUBDOMAIN_PATTERN = re.compile(r"[a-z0-9-]+")
HEX_COLOR_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")


class ValidationResult(BaseModel):
    """Outcome of a validation run."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


def _color_fields(palette: BaseModel, prefix: str) -> list[tuple[str, str]]:
    fields: list[tuple[str, str]] = []
    for name in type(palette).model_fields:
        value = getattr(palette, name)
        if isinstance(value, (ColorPalette, TextPalette)):
            fields.extend(_color_fields(value, f"{prefix}{name}."))
        else:
            fields.append((f"{prefix}{name}", value))
    return fields


def validate_tree(tree: ConfigTree) -> ValidationResult:
    """Check the structural invariants of a tree and collect every violation."""
    errors: list[str] = []

    # Required identity fields
    if not tree.id:
        errors.append("Tenant ID is required")
    if not tree.name:
        errors.append("Tenant name is required")
    if not tree.subdomain:
        errors.append("Subdomain is required")
    if not tree.status:
        errors.append("Status is required")

    if tree.subdomain and not SUBDOMAIN_PATTERN.fullmatch(tree.subdomain):
        errors.append("Subdomain can only contain lowercase letters, numbers, and hyphens")

    for path, value in _color_fields(tree.branding.colors, "branding.colors."):
        if not isinstance(value, str) or not HEX_COLOR_PATTERN.fullmatch(value):
            errors.append(f"{path} must be a valid hex color (got {value!r})")

    for dimension, limit in tree.limits.dimensions().items():
        if limit.max < 1:
            errors.append(f"{dimension} limit must be at least 1")
        elif limit.warning_threshold is not None and limit.warning_threshold >= limit.max:
            errors.append(f"{dimension} warning threshold must be below the limit")
        if limit.current < 0:
            errors.append(f"{dimension} current usage cannot be negative")

    return ValidationResult(valid=not errors, errors=errors)

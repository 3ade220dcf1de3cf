"""Quota and feature checks over a resolved tree."""

import math

from pydantic import BaseModel

from tenantflow.engine.tenant.merge import field_lookup
from tenantflow.engine.tenant.models import ConfigTree, Limits, QuotaLimit


class UsageEntry(BaseModel):
    current: int
    max: int
    percentage: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _dimension(tree: ConfigTree, dimension: str) -> QuotaLimit | None:
    name = field_lookup(Limits).get(dimension)
    if name is None:
        return None
    return getattr(tree.limits, name)


def usage_percentage(current: int, maximum: int) -> int:
    """Share of a quota in use, as a whole percentage; an empty quota reads 0%."""
    if maximum == 0:
        return 0
    return _round_half_up(current / maximum * 100)


def is_limit_reached(tree: ConfigTree, dimension: str) -> bool:
    """True once ``current >= max``; False for an unknown dimension."""
    limit = _dimension(tree, dimension)
    if limit is None:
        return False
    return limit.current >= limit.max


def usage_report(tree: ConfigTree) -> dict[str, UsageEntry]:
    return {
        name: UsageEntry(
            current=limit.current,
            max=limit.max,
            percentage=usage_percentage(limit.current, limit.max),
        )
        for name, limit in tree.limits.dimensions().items()
    }


def threshold_warnings(tree: ConfigTree) -> list[str]:
    """Dimensions whose usage has reached their warning threshold."""
    return [
        name
        for name, limit in tree.limits.dimensions().items()
        if limit.warning_threshold is not None and limit.current >= limit.warning_threshold
    ]


def is_feature_enabled(tree: ConfigTree, path: str) -> bool:
    """
    Walk a dot-separated path into the ``features`` section.

    Segments may use snake_case or camelCase (``business.whiteLabel.enabled``).
    Any segment that does not exist makes the feature count as disabled.
    """
    current: object = tree.features
    for part in path.split("."):
        if isinstance(current, BaseModel):
            name = field_lookup(type(current)).get(part)
            if name is None:
                return False
            current = getattr(current, name)
        elif isinstance(current, dict):
            if part not in current:
                return False
            current = current[part]
        else:
            return False
    return bool(current)

"""
Layered deep merge of tenant configuration.

``resolve`` combines a baseline tree, a template partial and caller overrides
into one fully populated ``ConfigTree`` with precedence
``overrides > template > baseline``. The merge walks the ConfigTree schema
rather than the data, so every field kind has exactly one rule:

- nested section model: merged recursively, key by key
- string-keyed map (font sizes, rollout percentages, ...): merged key by key
- list, scalar, datetime: replaced wholesale by the higher layer

Partial keys may be snake_case field names or their camelCase aliases. Keys
the schema does not know are ignored.
"""

import copy
from collections.abc import Mapping
from datetime import UTC, datetime
from functools import lru_cache
from typing import Any, get_origin

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tenantflow.engine.tenant.exceptions import MergeError
from tenantflow.engine.tenant.models import ConfigTree

logger = structlog.get_logger(__name__)


@lru_cache(maxsize=None)
def field_lookup(model_cls: type[BaseModel]) -> dict[str, str]:
    """Map every accepted key (field name and alias) of a model to its field name."""
    lookup: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        lookup[name] = name
        if info.alias:
            lookup[info.alias] = name
    return lookup


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _is_map(annotation: Any) -> bool:
    return get_origin(annotation) is dict


def layer_as_mapping(layer: Any, path: str = "") -> Mapping[str, Any]:
    """Normalize a merge layer into a mapping of explicitly set keys."""
    if layer is None:
        return {}
    if isinstance(layer, BaseModel):
        return layer.model_dump(exclude_unset=True)
    if isinstance(layer, Mapping):
        return layer
    where = path.rstrip(".")
    raise MergeError(
        f"Expected a mapping at '{where or '<root>'}', got {type(layer).__name__}",
        path=where or None,
    )


def merge_layer(
    model_cls: type[BaseModel],
    current: Mapping[str, Any],
    layer: Any,
    path: str = "",
) -> dict[str, Any]:
    """Merge one partial layer onto ``current`` following the ``model_cls`` schema.

    ``current`` is a python-named dump of ``model_cls`` and is never mutated;
    the returned dict shares no mutable state with ``layer``.
    """
    layer = layer_as_mapping(layer, path)
    lookup = field_lookup(model_cls)
    merged = dict(current)

    for key, value in layer.items():
        name = lookup.get(key)
        if name is None:
            logger.debug("Ignoring unknown config key", path=f"{path}{key}")
            continue

        annotation = model_cls.model_fields[name].annotation
        sub_model = _nested_model(annotation)
        field_path = f"{path}{name}"

        if sub_model is not None:
            # A null section means "not supplied" for this layer
            if value is None:
                continue
            merged[name] = merge_layer(sub_model, current.get(name) or {}, value, f"{field_path}.")
        elif _is_map(annotation) and value is not None:
            entries = layer_as_mapping(value, field_path)
            combined = dict(current.get(name) or {})
            combined.update(copy.deepcopy(dict(entries)))
            merged[name] = combined
        else:
            merged[name] = copy.deepcopy(value)

    return merged


def resolve(
    baseline: ConfigTree,
    template: Any = None,
    overrides: Any = None,
    *,
    tenant_id: str | None = None,
    now: datetime | None = None,
) -> ConfigTree:
    """
    Resolve a tenant configuration from three layers.

    Args:
        baseline: Fully populated tree supplying every unset field
        template: Partial tree from the template catalog
        overrides: Partial tree supplied by the caller
        tenant_id: Identifier stamped onto the result; keeps the merged id when omitted
        now: Timestamp stamped onto ``metadata.created_at`` and ``metadata.last_active``

    Returns:
        A new ConfigTree; none of the inputs are modified

    Raises:
        MergeError: A layer does not fit the schema (caller defect)
    """
    stamp = now or datetime.now(UTC)

    merged = baseline.model_dump()
    merged = merge_layer(ConfigTree, merged, template)
    merged = merge_layer(ConfigTree, merged, overrides)

    if tenant_id is not None:
        merged["id"] = tenant_id
    merged["metadata"] = dict(merged["metadata"])
    merged["metadata"]["created_at"] = stamp
    merged["metadata"]["last_active"] = stamp

    try:
        return ConfigTree.model_validate(merged)
    except PydanticValidationError as e:
        raise MergeError(f"Merged configuration does not fit the schema: {e}") from e

"""
Workflow registry.

The single source of truth for resolved tenant configurations. The registry
owns its backing map; everything it hands out is a deep copy, so nothing a
caller does to a returned tree can leak back into registry state.
"""

import itertools
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tenantflow.engine.tenant.exceptions import MergeError, TenantAlreadyExistsError
from tenantflow.engine.tenant.merge import field_lookup, resolve
from tenantflow.engine.tenant.models import ConfigTree, build_default_tree
from tenantflow.engine.tenant.templates import TemplateCatalog
from tenantflow.engine.tenant.validation import ValidationResult, validate_tree

logger = structlog.get_logger(__name__)


class WorkflowRegistry:
    """Process-wide store of resolved ConfigTrees keyed by tenant id."""

    def __init__(
        self,
        catalog: TemplateCatalog | None = None,
        default_tenant_id: str = "default",
    ) -> None:
        self.catalog = catalog or TemplateCatalog()
        self.default_tenant_id = default_tenant_id
        self._workflows: dict[str, ConfigTree] = {}
        self._versions: dict[str, int] = {}
        self._version_counter = itertools.count(1)

        # The baseline is built once, eagerly, and doubles as the default tenant
        self._baseline = build_default_tree(default_tenant_id)
        self.register(default_tenant_id, self._baseline)

    @property
    def baseline(self) -> ConfigTree:
        """Copy of the tree every template-based creation is merged onto."""
        return self._baseline.model_copy(deep=True)

    def _bump(self, tenant_id: str) -> None:
        self._versions[tenant_id] = next(self._version_counter)

    def register(self, tenant_id: str, tree: ConfigTree) -> None:
        """Insert or replace a tenant's tree (last write wins)."""
        replaced = tenant_id in self._workflows
        self._workflows[tenant_id] = tree.model_copy(deep=True)
        self._bump(tenant_id)
        logger.info("Tenant workflow registered", tenant_id=tenant_id, replaced=replaced)

    def get(self, tenant_id: str) -> ConfigTree | None:
        tree = self._workflows.get(tenant_id)
        if tree is None:
            return None
        return tree.model_copy(deep=True)

    def get_all(self) -> dict[str, ConfigTree]:
        """Snapshot of every registered tree."""
        return {tid: tree.model_copy(deep=True) for tid, tree in self._workflows.items()}

    def update(self, tenant_id: str, updates: Mapping[str, Any] | BaseModel) -> bool:
        """
        Shallow-merge ``updates`` onto a registered tree.

        Only the top level is merged: a section present in ``updates`` replaces
        the stored section entirely, and any field the new section leaves out
        takes its schema default rather than the previous value.

        Returns:
            False if the tenant is unknown, True once the update is stored

        Raises:
            MergeError: ``updates`` does not fit the ConfigTree schema
        """
        existing = self._workflows.get(tenant_id)
        if existing is None:
            logger.debug("Update for unknown tenant ignored", tenant_id=tenant_id)
            return False

        if isinstance(updates, BaseModel):
            updates = updates.model_dump(exclude_unset=True)

        lookup = field_lookup(ConfigTree)
        data = existing.model_dump()
        changed: list[str] = []
        for key, value in updates.items():
            name = lookup.get(key)
            if name is None:
                logger.debug("Ignoring unknown config key", tenant_id=tenant_id, key=key)
                continue
            if name == "id":
                # Tenant ids are immutable once registered
                if value != tenant_id:
                    logger.warning("Ignoring attempt to change tenant id", tenant_id=tenant_id)
                continue
            data[name] = value.model_dump() if isinstance(value, BaseModel) else value
            changed.append(name)

        try:
            updated = ConfigTree.model_validate(data)
        except PydanticValidationError as e:
            raise MergeError(f"Update for tenant '{tenant_id}' does not fit the schema: {e}") from e

        self._workflows[tenant_id] = updated
        self._bump(tenant_id)
        logger.info("Tenant workflow updated", tenant_id=tenant_id, sections=changed)
        return True

    def remove(self, tenant_id: str) -> bool:
        if self._workflows.pop(tenant_id, None) is None:
            return False
        self._versions.pop(tenant_id, None)
        logger.info("Tenant workflow removed", tenant_id=tenant_id)
        return True

    def validate(self, tree: ConfigTree) -> ValidationResult:
        """Tree-level checks plus subdomain uniqueness across registered tenants."""
        result = validate_tree(tree)
        if tree.subdomain:
            for other_id, other in self._workflows.items():
                if other_id != tree.id and other.subdomain == tree.subdomain:
                    result.errors.append(
                        f"Subdomain '{tree.subdomain}' is already used by tenant '{other_id}'"
                    )
        result.valid = not result.errors
        return result

    def version(self, tenant_id: str) -> int | None:
        """Version stamp that changes on every register/update of the tenant."""
        return self._versions.get(tenant_id)

    def tenant_ids(self) -> list[str]:
        return list(self._workflows)

    def create_from_template(
        self,
        tenant_id: str,
        template_name: str,
        overrides: Mapping[str, Any] | BaseModel | None = None,
        *,
        overwrite: bool = False,
        now: datetime | None = None,
    ) -> ConfigTree:
        """
        Provision a tenant from a named template and register it.

        Args:
            tenant_id: Identifier of the new tenant
            template_name: Catalog entry to merge; unknown names resolve from the baseline alone
            overrides: Caller-supplied partial tree, highest precedence
            overwrite: Re-provision an existing tenant instead of refusing

        Raises:
            TenantAlreadyExistsError: The tenant exists and ``overwrite`` is False
        """
        if tenant_id in self._workflows and not overwrite:
            raise TenantAlreadyExistsError(tenant_id)

        template = self.catalog.get(template_name)
        tree = resolve(self._baseline, template, overrides, tenant_id=tenant_id, now=now)
        self.register(tenant_id, tree)
        logger.info(
            "Tenant created from template",
            tenant_id=tenant_id,
            template=template_name,
            overwrite=overwrite,
        )
        return tree.model_copy(deep=True)

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._workflows

    def __len__(self) -> int:
        return len(self._workflows)

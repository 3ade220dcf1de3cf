"""
Tests for the workflow registry.
"""

import pytest

from tenantflow.engine.tenant.exceptions import MergeError, TenantAlreadyExistsError
from tenantflow.engine.tenant.models import ColorPalette, ConfigTree, TenantPlan
from tenantflow.engine.tenant.registry import WorkflowRegistry
from tenantflow.engine.tenant.templates import TemplateCatalog


@pytest.mark.unit
class TestRegistryBasics:
    def test_default_tenant_is_registered(self, registry):
        default = registry.get("default")

        assert default is not None
        assert default.name == "Default Tenant"
        assert "default" in registry
        assert len(registry) == 1

    def test_custom_default_tenant_id(self):
        registry = WorkflowRegistry(default_tenant_id="root")

        assert registry.get("root") is not None
        assert registry.get("default") is None
        assert registry.baseline.id == "root"

    def test_register_then_get_round_trip(self, registry):
        tree = ConfigTree(id="acme", name="Acme", subdomain="acme")

        registry.register("acme", tree)

        assert registry.get("acme").model_dump() == tree.model_dump()

    def test_register_replaces_existing(self, registry):
        registry.register("acme", ConfigTree(id="acme", name="First", subdomain="acme"))
        registry.register("acme", ConfigTree(id="acme", name="Second", subdomain="acme"))

        assert registry.get("acme").name == "Second"
        assert len(registry) == 2

    def test_unknown_tenant_reads_are_safe(self, registry):
        assert registry.get("ghost") is None
        assert registry.update("ghost", {"name": "x"}) is False
        assert registry.remove("ghost") is False
        assert registry.version("ghost") is None

    def test_get_all_and_tenant_ids(self, registry):
        registry.create_from_template("acme", "demo")

        snapshot = registry.get_all()

        assert set(snapshot) == {"default", "acme"}
        assert registry.tenant_ids() == ["default", "acme"]

    def test_remove(self, registry):
        registry.create_from_template("acme", "demo")

        assert registry.remove("acme") is True
        assert registry.get("acme") is None
        assert "acme" not in registry


@pytest.mark.unit
class TestRegistryIsolation:
    def test_get_returns_copies(self, registry):
        first = registry.get("default")
        first.branding.colors.primary = "#000000"
        first.security.cors.origins.append("https://evil.test")

        second = registry.get("default")

        assert second.branding.colors.primary == ColorPalette().primary
        assert second.security.cors.origins == []

    def test_register_stores_a_copy(self, registry):
        tree = ConfigTree(id="acme", name="Acme", subdomain="acme")
        registry.register("acme", tree)

        tree.name = "Mutated"

        assert registry.get("acme").name == "Acme"

    def test_get_all_is_a_snapshot(self, registry):
        snapshot = registry.get_all()
        snapshot["default"].name = "Changed"
        snapshot.pop("default")

        assert registry.get("default").name == "Default Tenant"

    def test_baseline_is_not_exposed(self, registry):
        baseline = registry.baseline
        baseline.limits.users.max = 1

        assert registry.baseline.limits.users.max == 100

    def test_created_tree_is_independent_of_stored(self, registry):
        created = registry.create_from_template("acme", "demo")
        created.limits.users.current = 49

        assert registry.get("acme").limits.users.current == 0


@pytest.mark.unit
class TestRegistryUpdate:
    def test_update_replaces_whole_section(self, registry):
        registry.create_from_template("acme", "demo")

        assert registry.update("acme", {"branding": {"colors": {"primary": "#000000"}}}) is True

        colors = registry.get("acme").branding.colors
        assert colors.primary == "#000000"
        # Fields omitted from the new section take schema defaults, not the old values
        assert colors.secondary == ColorPalette().secondary

    def test_update_leaves_other_sections_alone(self, registry):
        registry.create_from_template("acme", "demo")

        registry.update("acme", {"name": "Acme Corp"})

        tree = registry.get("acme")
        assert tree.name == "Acme Corp"
        assert tree.branding.colors.primary == "#1E40AF"
        assert tree.metadata.plan == TenantPlan.PRO

    def test_update_accepts_camel_case_sections(self, registry):
        registry.update("default", {"limits": {"apiCalls": {"max": 42}}})

        limits = registry.get("default").limits
        assert limits.api_calls.max == 42
        assert limits.users.max == 100

    def test_update_accepts_model_values(self, registry):
        registry.update("default", {"branding": registry.baseline.branding.model_copy()})

        assert registry.get("default").branding.colors.primary == ColorPalette().primary

    def test_tenant_id_cannot_change(self, registry):
        registry.update("default", {"id": "hijacked", "name": "Renamed"})

        tree = registry.get("default")
        assert tree.id == "default"
        assert tree.name == "Renamed"
        assert registry.get("hijacked") is None

    def test_unknown_keys_ignored(self, registry):
        assert registry.update("default", {"sparkles": True}) is True

    def test_ill_typed_update_raises_and_keeps_old_tree(self, registry):
        with pytest.raises(MergeError):
            registry.update("default", {"limits": {"users": {"max": "many"}}})

        assert registry.get("default").limits.users.max == 100


@pytest.mark.unit
class TestRegistryVersions:
    def test_versions_move_on_every_write(self, registry):
        registry.create_from_template("acme", "demo")
        created = registry.version("acme")

        registry.update("acme", {"name": "Acme"})
        updated = registry.version("acme")

        registry.register("acme", registry.get("acme"))
        reregistered = registry.version("acme")

        assert created < updated < reregistered

    def test_reads_do_not_move_versions(self, registry):
        before = registry.version("default")

        registry.get("default")
        registry.get_all()

        assert registry.version("default") == before

    def test_remove_drops_version(self, registry):
        registry.create_from_template("acme", "demo")
        registry.remove("acme")

        assert registry.version("acme") is None


@pytest.mark.unit
class TestCreateFromTemplate:
    def test_creates_and_registers(self, registry, fixed_now):
        tree = registry.create_from_template(
            "acme", "demo", {"name": "Acme", "subdomain": "acme"}, now=fixed_now
        )

        assert tree.id == "acme"
        assert tree.name == "Acme"
        assert tree.subdomain == "acme"
        assert tree.branding.colors.primary == "#1E40AF"
        assert tree.limits.users.max == 50
        assert tree.metadata.created_at == fixed_now
        assert registry.get("acme").model_dump() == tree.model_dump()

    def test_existing_tenant_is_refused(self, registry):
        registry.create_from_template("acme", "demo")

        with pytest.raises(TenantAlreadyExistsError) as exc_info:
            registry.create_from_template("acme", "startup")

        assert exc_info.value.context == {"tenant_id": "acme"}
        assert registry.get("acme").limits.users.max == 50

    def test_overwrite_reprovisions(self, registry):
        registry.create_from_template("acme", "demo")

        tree = registry.create_from_template("acme", "startup", overwrite=True)

        assert tree.limits.users.max == 10
        assert registry.get("acme").limits.users.max == 10

    def test_default_tenant_is_protected_too(self, registry):
        with pytest.raises(TenantAlreadyExistsError):
            registry.create_from_template("default", "demo")

    def test_unknown_template_uses_baseline_only(self, registry):
        tree = registry.create_from_template("acme", "no-such-template", {"name": "Acme"})

        assert tree.name == "Acme"
        assert tree.branding.colors.primary == ColorPalette().primary
        assert tree.limits.users.max == 100

    def test_custom_catalog(self):
        catalog = TemplateCatalog({"tiny": {"limits": {"users": {"max": 2, "warningThreshold": 1}}}})
        registry = WorkflowRegistry(catalog=catalog)

        tree = registry.create_from_template("t1", "tiny")

        assert tree.limits.users.max == 2
        assert tree.limits.users.warning_threshold == 1

    def test_validate_delegates_to_tree_validation(self, registry):
        tree = registry.create_from_template("acme", "demo", {"subdomain": "Bad_Sub"})

        result = registry.validate(tree)

        assert result.valid is False
        assert any("Subdomain" in error for error in result.errors)


@pytest.mark.unit
class TestRegistryValidate:
    def test_duplicate_subdomain_is_reported(self, registry):
        registry.create_from_template("demo", "demo")
        second = registry.create_from_template("acme", "demo")

        result = registry.validate(second)

        assert result.valid is False
        assert result.errors == ["Subdomain 'demo' is already used by tenant 'demo'"]

    def test_own_subdomain_is_not_a_duplicate(self, registry):
        tree = registry.create_from_template("demo", "demo")

        assert registry.validate(tree).valid is True

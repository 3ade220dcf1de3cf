"""
Tests for the layered configuration merge.
"""

import copy
from datetime import UTC, datetime

import pytest

from tenantflow.engine.tenant.exceptions import MergeError
from tenantflow.engine.tenant.merge import field_lookup, resolve
from tenantflow.engine.tenant.models import (
    SECTION_NAMES,
    AuthenticationPolicy,
    ConfigModel,
    ConfigTree,
    SecurityHeaders,
    TenantPlan,
)


def _assert_fully_populated(model: ConfigModel, path: str = "") -> None:
    for name, info in type(model).model_fields.items():
        value = getattr(model, name)
        if isinstance(value, ConfigModel):
            _assert_fully_populated(value, f"{path}{name}.")
        elif info.is_required():
            assert value is not None, f"{path}{name} is missing"


@pytest.mark.unit
class TestMergePrecedence:
    """overrides > template > baseline, per field."""

    def test_override_beats_template_beats_baseline(self, baseline, fixed_now):
        template = {"branding": {"colors": {"primary": "#111111", "secondary": "#222222"}}}
        overrides = {"branding": {"colors": {"primary": "#333333"}}}

        result = resolve(baseline, template, overrides, tenant_id="acme", now=fixed_now)

        assert result.branding.colors.primary == "#333333"
        assert result.branding.colors.secondary == "#222222"
        assert result.branding.colors.accent == baseline.branding.colors.accent

    def test_scalar_identity_fields(self, baseline):
        result = resolve(
            baseline,
            {"name": "Template Name", "subdomain": "tpl"},
            {"name": "Override Name"},
            tenant_id="acme",
        )

        assert result.name == "Override Name"
        assert result.subdomain == "tpl"

    def test_enum_fields_follow_precedence(self, baseline):
        result = resolve(baseline, {"metadata": {"plan": "pro"}}, {"metadata": {"tier": "premium"}})

        assert result.metadata.plan == TenantPlan.PRO
        assert result.metadata.tier == "premium"

    def test_lists_are_replaced_not_unioned(self, baseline):
        overrides = {"security": {"cors": {"methods": ["GET"]}}}

        result = resolve(baseline, {}, overrides)

        assert result.security.cors.methods == ["GET"]

    def test_empty_list_replaces_baseline_list(self, baseline):
        result = resolve(baseline, {}, {"workflow": {"monitoring": {"healthChecks": {"endpoints": []}}}})

        assert result.workflow.monitoring.health_checks.endpoints == []

    def test_maps_merge_key_by_key(self, baseline):
        overrides = {"branding": {"spacing": {"md": "2rem", "huge": "10rem"}}}

        result = resolve(baseline, {}, overrides)

        assert result.branding.spacing["md"] == "2rem"
        assert result.branding.spacing["huge"] == "10rem"
        assert result.branding.spacing["sm"] == baseline.branding.spacing["sm"]

    def test_camel_case_keys_are_accepted(self, baseline):
        overrides = {
            "security": {"authentication": {"requireMFA": True, "sessionTimeout": 60}},
            "limits": {"apiCalls": {"max": 5, "warningThreshold": 4}},
            "features": {"platform": {"analytics": {"privacy": {"anonymizeIP": False}}}},
        }

        result = resolve(baseline, {}, overrides)

        assert result.security.authentication.require_mfa is True
        assert result.security.authentication.session_timeout == 60
        assert result.limits.api_calls.max == 5
        assert result.limits.api_calls.warning_threshold == 4
        assert result.features.platform.analytics.privacy.anonymize_ip is False

    def test_security_headers_use_wire_names(self, baseline):
        overrides = {"security": {"securityHeaders": {"X-Frame-Options": "DENY"}}}

        result = resolve(baseline, {}, overrides)

        assert result.security.security_headers.x_frame_options == "DENY"
        assert result.security.security_headers.referrer_policy == (
            SecurityHeaders().referrer_policy
        )

    def test_unknown_keys_are_ignored(self, baseline):
        result = resolve(baseline, {"nonsense": 1}, {"branding": {"glitter": True}})

        assert result.branding.model_dump() == baseline.branding.model_dump()

    def test_none_section_counts_as_absent(self, baseline):
        result = resolve(baseline, {"branding": None}, None)

        assert result.branding.model_dump() == baseline.branding.model_dump()

    def test_model_layer_only_contributes_set_fields(self, baseline):
        layer = ConfigTree(id="x", name="Model Layer", subdomain="model")

        result = resolve(baseline, {"branding": {"colors": {"primary": "#ABCDEF"}}}, layer)

        assert result.name == "Model Layer"
        assert result.branding.colors.primary == "#ABCDEF"


@pytest.mark.unit
class TestStamping:
    def test_tenant_id_and_timestamps_come_from_call_context(self, baseline, fixed_now):
        overrides = {
            "id": "spoofed",
            "metadata": {
                "createdAt": "2000-01-01T00:00:00Z",
                "lastActive": "2000-01-01T00:00:00Z",
            },
        }

        result = resolve(baseline, {}, overrides, tenant_id="acme", now=fixed_now)

        assert result.id == "acme"
        assert result.metadata.created_at == fixed_now
        assert result.metadata.last_active == fixed_now

    def test_merged_id_kept_without_tenant_id(self, baseline):
        result = resolve(baseline, {}, {"id": "from-layer"})

        assert result.id == "from-layer"

    def test_default_timestamp_is_now(self, baseline):
        before = datetime.now(UTC)
        result = resolve(baseline, {}, {})
        after = datetime.now(UTC)

        assert before <= result.metadata.created_at <= after


@pytest.mark.unit
class TestCoverageAndIsolation:
    def test_result_is_fully_populated(self, baseline, catalog):
        for name in catalog.names():
            result = resolve(baseline, catalog.get(name), {"name": "x"}, tenant_id=name)
            _assert_fully_populated(result)
            for section in SECTION_NAMES:
                assert isinstance(getattr(result, section), ConfigModel)

    def test_empty_layers_reproduce_baseline(self, baseline):
        result = resolve(baseline, {}, {})

        exclude = {"metadata": {"created_at", "last_active"}}
        assert result.model_dump(exclude=exclude) == baseline.model_dump(exclude=exclude)

    def test_inputs_are_not_mutated(self, baseline):
        template = {"metadata": {"tags": ["alpha"]}, "branding": {"spacing": {"md": "3rem"}}}
        overrides = {"security": {"cors": {"origins": ["https://acme.test"]}}}
        baseline_before = baseline.model_dump()
        template_before = copy.deepcopy(template)
        overrides_before = copy.deepcopy(overrides)

        result = resolve(baseline, template, overrides, tenant_id="acme")

        assert baseline.model_dump() == baseline_before
        assert template == template_before
        assert overrides == overrides_before

        # Mutating the output must not reach back into any layer
        result.metadata.tags.append("beta")
        result.security.cors.origins.append("https://evil.test")
        result.branding.spacing["md"] = "99rem"
        result.limits.users.max = 1

        assert template == template_before
        assert overrides == overrides_before
        assert baseline.model_dump() == baseline_before


@pytest.mark.unit
class TestMergeErrors:
    def test_mapping_expected_for_section(self, baseline):
        with pytest.raises(MergeError) as exc_info:
            resolve(baseline, {}, {"branding": "red"})

        assert exc_info.value.error_code == "MERGE_ERROR"
        assert exc_info.value.context["path"] == "branding"

    def test_ill_typed_scalar(self, baseline):
        with pytest.raises(MergeError):
            resolve(baseline, {}, {"limits": {"users": {"max": "lots"}}})

    def test_non_mapping_layer(self, baseline):
        with pytest.raises(MergeError):
            resolve(baseline, ["not", "a", "mapping"], {})


@pytest.mark.unit
def test_field_lookup_covers_names_and_aliases():
    assert field_lookup(ConfigTree)["metadata"] == "metadata"
    assert "borderRadius" not in field_lookup(ConfigTree)

    lookup = field_lookup(AuthenticationPolicy)
    assert lookup["requireMFA"] == "require_mfa"
    assert lookup["require_mfa"] == "require_mfa"
    assert lookup["sessionTimeout"] == "session_timeout"

"""
Fixtures for tenant configuration tests.
"""

from datetime import UTC, datetime

import pytest

from tenantflow.engine.tenant.cache import ConfigCache
from tenantflow.engine.tenant.models import ConfigTree, build_default_tree
from tenantflow.engine.tenant.registry import WorkflowRegistry
from tenantflow.engine.tenant.service import TenantConfigOptions, TenantConfigService
from tenantflow.engine.tenant.templates import TemplateCatalog


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def baseline() -> ConfigTree:
    return build_default_tree()


@pytest.fixture
def catalog() -> TemplateCatalog:
    return TemplateCatalog()


@pytest.fixture
def registry(catalog: TemplateCatalog) -> WorkflowRegistry:
    return WorkflowRegistry(catalog=catalog)


@pytest.fixture
def cache(registry: WorkflowRegistry, clock: FakeClock) -> ConfigCache:
    return ConfigCache(registry, ttl=300, timer=clock)


@pytest.fixture
def options() -> TenantConfigOptions:
    return TenantConfigOptions(cache_ttl=300, auto_sync=False)


@pytest.fixture
def service(
    options: TenantConfigOptions, registry: WorkflowRegistry, cache: ConfigCache
) -> TenantConfigService:
    return TenantConfigService(options, registry=registry, cache=cache)

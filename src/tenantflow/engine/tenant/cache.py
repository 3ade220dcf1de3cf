"""
Read-through cache of resolved tenant configurations.

Backed by a cachetools ``TTLCache``: an entry stored at ``cached_at`` is served
while ``now - cached_at < ttl`` and re-read from the registry afterwards. The
clock is injectable so tests can move time instead of sleeping.

A periodic sweep guards against the registry being changed behind the
cache's back (admin tooling writing to the registry directly). The
``versioned`` strategy drops only entries whose registry version moved; the
``full`` strategy drops everything on every tick.
"""

import asyncio
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from cachetools import TTLCache
from pydantic import BaseModel

from tenantflow.engine.settings import SyncStrategy
from tenantflow.engine.tenant.models import ConfigTree
from tenantflow.engine.tenant.registry import WorkflowRegistry

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    """A cached tree plus its freshness side channel."""

    tree: ConfigTree
    cached_at: float
    version: int | None


class CacheStats(BaseModel):
    size: int
    keys: list[str]
    hits: int = 0
    misses: int = 0


class ConfigCache:
    """Time-boxed read-through cache in front of a WorkflowRegistry."""

    def __init__(
        self,
        registry: WorkflowRegistry,
        ttl: float = 300,
        max_size: int = 1000,
        enabled: bool = True,
        sync_interval: float = 60,
        strategy: SyncStrategy = SyncStrategy.VERSIONED,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = registry
        self.ttl = ttl
        self.enabled = enabled
        self.sync_interval = sync_interval
        self.strategy = SyncStrategy(strategy)
        self._timer = timer
        self._entries: TTLCache = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)
        self._sync_task: asyncio.Task[None] | None = None
        self.hits = 0
        self.misses = 0

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get(self, tenant_id: str) -> ConfigTree | None:
        """Return a fresh-enough copy of the tenant's tree, reading through on a miss."""
        if self.enabled:
            entry: CacheEntry | None = self._entries.get(tenant_id)
            if entry is not None:
                self.hits += 1
                logger.debug("Tenant config cache hit", tenant_id=tenant_id)
                return entry.tree.model_copy(deep=True)

        self.misses += 1
        tree = self.registry.get(tenant_id)
        if tree is None:
            # Negative lookups are never cached
            return None

        self._store(tenant_id, tree)
        logger.debug("Tenant config cache miss", tenant_id=tenant_id)
        return tree.model_copy(deep=True)

    def _store(self, tenant_id: str, tree: ConfigTree) -> None:
        if not self.enabled:
            return
        self._entries[tenant_id] = CacheEntry(
            tree=tree.model_copy(deep=True),
            cached_at=self._timer(),
            version=self.registry.version(tenant_id),
        )

    def put(self, tenant_id: str, tree: ConfigTree) -> None:
        """Seed the cache with a tree that was just registered."""
        self._store(tenant_id, tree)

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def update(self, tenant_id: str, updates: Mapping[str, Any] | BaseModel) -> bool:
        """Update through the registry and refresh the entry right away."""
        if not self.registry.update(tenant_id, updates):
            return False
        refreshed = self.registry.get(tenant_id)
        if refreshed is not None:
            self._store(tenant_id, refreshed)
        return True

    def remove(self, tenant_id: str) -> bool:
        removed = self.registry.remove(tenant_id)
        self.invalidate(tenant_id)
        return removed

    def invalidate(self, tenant_id: str) -> bool:
        return self._entries.pop(tenant_id, None) is not None

    def invalidate_all(self) -> None:
        self._entries.clear()

    # ------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------

    def sweep(self) -> int:
        """Run one sync tick; returns the number of entries dropped."""
        self._entries.expire()

        if self.strategy == SyncStrategy.FULL:
            dropped = len(self._entries)
            self.invalidate_all()
            return dropped

        stale = [
            tenant_id
            for tenant_id, entry in list(self._entries.items())
            if entry.version != self.registry.version(tenant_id)
        ]
        for tenant_id in stale:
            self._entries.pop(tenant_id, None)
        return len(stale)

    async def _sync_loop(self) -> None:
        """Periodically sweep the cache."""
        while True:
            try:
                await asyncio.sleep(self.sync_interval)
                dropped = self.sweep()
                logger.debug("Tenant config cache swept", dropped=dropped, strategy=self.strategy)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Failed to sync tenant configurations", error=str(e), exc_info=True)

    @property
    def auto_sync_running(self) -> bool:
        return self._sync_task is not None and not self._sync_task.done()

    async def start_auto_sync(self) -> None:
        if self.auto_sync_running:
            return
        self._sync_task = asyncio.create_task(self._sync_loop())
        logger.info("Tenant config auto-sync started", interval=self.sync_interval)

    async def stop_auto_sync(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        if self._sync_task is None:
            return
        self._sync_task.cancel()
        await asyncio.gather(self._sync_task, return_exceptions=True)
        self._sync_task = None
        logger.info("Tenant config auto-sync stopped")

    # ------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------

    def stats(self) -> CacheStats:
        self._entries.expire()
        keys = list(self._entries.keys())
        return CacheStats(size=len(keys), keys=keys, hits=self.hits, misses=self.misses)

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._entries

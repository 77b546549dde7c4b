"""Hostname -> tenant resolution with a read-through cache."""

from __future__ import annotations

import logging
from typing import Any

from ..config import TenantConfig
from ..exceptions import DomainNotFoundError
from .base import TenantCacheBackend, TenantSource

logger = logging.getLogger("sitefront.tenants")


def normalize_hostname(hostname: str) -> str:
    """Strip a single leading "www." label.

    Matching stays case-sensitive and any port suffix is kept, so
    "WWW.docs.example.com" and "docs.example.com:8080" are distinct keys.
    """
    return hostname.removeprefix("www.")


class TenantResolver:
    """Resolve request hostnames to tenant configurations.

    On a cache hit the directory is not consulted. On a miss the directory
    entry is snapshotted (derived fields recomputed) and cached under the
    normalized hostname; failed lookups are never cached.

    Concurrent misses for the same hostname may each hit the directory and
    write the cache. The writes are equivalent, so the last one wins.
    """

    def __init__(self, directory: TenantSource, cache: TenantCacheBackend) -> None:
        self.directory = directory
        self.cache = cache

    def resolve(self, hostname: str) -> TenantConfig:
        key = normalize_hostname(hostname)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        tenant = self.directory.get(key)
        if tenant is None:
            raise DomainNotFoundError(key)

        snapshot = tenant.snapshot()
        self.cache.set(key, snapshot)
        logger.debug(f"Cached tenant config for {key}")
        return snapshot

    def invalidate(self, hostname: str) -> bool:
        """Drop a hostname from the cache so the next lookup refills it."""
        return self.cache.delete(normalize_hostname(hostname))

    def stats(self) -> dict[str, Any]:
        return {
            "domains": len(self.directory.domains()),
            "cache": self.cache.get_stats(),
        }

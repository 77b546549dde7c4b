"""In-memory LRU + TTL cache for resolved tenant configurations.

Data is lost when the process exits.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..config import TenantConfig


@dataclass
class _CacheEntry:
    tenant: TenantConfig
    expires_at: float


class TenantCache:
    """Thread-safe bounded cache with least-recently-used eviction and
    a fixed time-to-live per entry.

    Characteristics:
    - O(1) get/set/delete
    - An entry is dropped when it expires or when it is the least
      recently used one and room is needed, whichever comes first
    - Expired entries are removed lazily, on access

    Usage:
        cache = TenantCache(max_entries=1000, ttl_seconds=3600)
        cache.set("docs.example.com", tenant)
        tenant = cache.get("docs.example.com")
    """

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of entries kept at once.
            ttl_seconds: Lifetime of an entry from the moment it is set.
            clock: Monotonic time source, injectable for tests.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def get(self, hostname: str) -> TenantConfig | None:
        with self._lock:
            entry = self._store.get(hostname)
            if entry is None:
                self._misses += 1
                return None

            if self._clock() >= entry.expires_at:
                del self._store[hostname]
                self._expirations += 1
                self._misses += 1
                return None

            self._store.move_to_end(hostname)
            self._hits += 1
            return entry.tenant

    def set(self, hostname: str, tenant: TenantConfig) -> None:
        with self._lock:
            if hostname in self._store:
                del self._store[hostname]

            while len(self._store) >= self.max_entries:
                self._store.popitem(last=False)
                self._evictions += 1

            self._store[hostname] = _CacheEntry(
                tenant=tenant,
                expires_at=self._clock() + self.ttl_seconds,
            )

    def delete(self, hostname: str) -> bool:
        with self._lock:
            if hostname in self._store:
                del self._store[hostname]
                return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def count(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> list[str]:
        """Cached hostnames, least recently used first."""
        with self._lock:
            return list(self._store.keys())

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "backend_type": "memory",
                "entry_count": len(self._store),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }

"""Tenant lookup: static directory, resolution cache and resolver.

Usage:
    from sitefront.tenants import StaticTenantDirectory, TenantCache, TenantResolver

    resolver = TenantResolver(
        StaticTenantDirectory(config.tenants),
        TenantCache(max_entries=1000, ttl_seconds=3600),
    )
    tenant = resolver.resolve("www.docs.example.com")
"""

from .base import TenantCacheBackend, TenantSource
from .cache import TenantCache
from .directory import StaticTenantDirectory
from .resolver import TenantResolver, normalize_hostname

__all__ = [
    "TenantSource",
    "TenantCacheBackend",
    "TenantCache",
    "StaticTenantDirectory",
    "TenantResolver",
    "normalize_hostname",
]

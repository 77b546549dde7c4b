"""Static tenant directory, populated once from configuration."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from ..config import TenantConfig


class StaticTenantDirectory:
    """Read-only hostname -> TenantConfig mapping.

    Usage:
        directory = StaticTenantDirectory(config.tenants)
        tenant = directory.get("docs.example.com")
    """

    def __init__(self, tenants: Mapping[str, TenantConfig]) -> None:
        self._tenants = MappingProxyType(dict(tenants))

    def get(self, hostname: str) -> TenantConfig | None:
        return self._tenants.get(hostname)

    def domains(self) -> list[str]:
        return list(self._tenants.keys())

    def __len__(self) -> int:
        return len(self._tenants)

    def __contains__(self, hostname: object) -> bool:
        return hostname in self._tenants

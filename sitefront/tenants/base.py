"""Protocols for tenant lookup.

Resolution is a read-through composition of two pieces:

- a TenantSource, the authoritative hostname -> TenantConfig mapping
  (a static directory loaded once at startup), and
- a TenantCacheBackend, a bounded store in front of it.

Neither knows about the other; TenantResolver wires them together.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..config import TenantConfig


@runtime_checkable
class TenantSource(Protocol):
    """Authoritative source of tenant configurations."""

    def get(self, hostname: str) -> TenantConfig | None:
        """Return the tenant for a normalized hostname, or None."""
        ...

    def domains(self) -> list[str]:
        """Return every hostname the source knows about."""
        ...


@runtime_checkable
class TenantCacheBackend(Protocol):
    """Protocol for tenant cache backends.

    Design Principles:
    - Simple CRUD operations only
    - Expiry and capacity are the backend's responsibility
    - Thread-safety is the backend's responsibility
    """

    def get(self, hostname: str) -> TenantConfig | None:
        """Return a live (non-expired) entry, or None."""
        ...

    def set(self, hostname: str, tenant: TenantConfig) -> None:
        """Store an entry, overwriting any existing one."""
        ...

    def delete(self, hostname: str) -> bool:
        """Delete an entry. Returns True if it existed."""
        ...

    def clear(self) -> None:
        """Remove all entries."""
        ...

    def count(self) -> int:
        """Number of entries currently stored, expired ones included."""
        ...

    def get_stats(self) -> dict[str, Any]:
        """Backend statistics. Includes at least "entry_count" and "backend_type"."""
        ...

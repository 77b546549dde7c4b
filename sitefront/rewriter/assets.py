"""Rewriting of the upstream's JavaScript bundles."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import TenantConfig, UpstreamConfig


def rewrite_js_asset(source: str, tenant: TenantConfig, upstream: UpstreamConfig) -> str:
    """Replace upstream domain references with the tenant's domain.

    The public domain goes first: it contains the brand domain, and
    replacing the shorter string first would leave a stray "www.".
    """
    return (
        source.replace(upstream.public_domain, tenant.domain)
        .replace(upstream.brand_domain, tenant.domain)
        .replace(upstream.host, tenant.domain)
    )

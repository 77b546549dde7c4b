"""Request classification.

Every inbound request maps to exactly one RouteKind. The decision is a
pure function of method, path and tenant mappings; query string and
headers are accepted for call-site symmetry but never change the result.

Decision order (first match wins):
    1. OPTIONS                          -> CORS_PREFLIGHT
    2. /robots.txt                      -> ROBOTS_TXT
    3. /sitemap.xml                     -> SITEMAP
    4. /app*.js                         -> JS_ASSET
    5. /api*                            -> API_CALL
    6. /<configured slug>               -> SLUG_REDIRECT(page_id)
    7. /<32 hex chars, not a known page> -> UNKNOWN_PAGE_REDIRECT
    8. anything else                    -> HTML_PASSTHROUGH
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .sync import SlugTranslator

if TYPE_CHECKING:
    from .config import TenantConfig


class RouteKind(str, Enum):
    """How a request is handled."""

    CORS_PREFLIGHT = "cors_preflight"
    ROBOTS_TXT = "robots_txt"
    SITEMAP = "sitemap"
    JS_ASSET = "js_asset"
    API_CALL = "api_call"
    SLUG_REDIRECT = "slug_redirect"
    UNKNOWN_PAGE_REDIRECT = "unknown_page_redirect"
    HTML_PASSTHROUGH = "html_passthrough"

    @property
    def is_local(self) -> bool:
        """True when the response is synthesized without calling upstream."""
        return self not in (RouteKind.JS_ASSET, RouteKind.API_CALL, RouteKind.HTML_PASSTHROUGH)


@dataclass(frozen=True)
class Route:
    """Classification result. page_id is set for SLUG_REDIRECT only."""

    kind: RouteKind
    page_id: str | None = None


def classify_request(
    method: str,
    path: str,
    tenant: TenantConfig,
    query: str = "",
    headers: Mapping[str, str] | None = None,
) -> Route:
    """Classify a request into its handling strategy."""
    if method.upper() == "OPTIONS":
        return Route(RouteKind.CORS_PREFLIGHT)

    if path == "/robots.txt":
        return Route(RouteKind.ROBOTS_TXT)

    if path == "/sitemap.xml":
        return Route(RouteKind.SITEMAP)

    if path.startswith("/app") and path.endswith(".js"):
        return Route(RouteKind.JS_ASSET)

    if path.startswith("/api"):
        return Route(RouteKind.API_CALL)

    # Slugs win over the page id heuristic, even when a slug is 32 hex chars
    translator = SlugTranslator(tenant)
    candidate = path.removeprefix("/")
    page_id = translator.page_for_slug(candidate)
    if page_id is not None:
        return Route(RouteKind.SLUG_REDIRECT, page_id=page_id)

    if translator.is_unknown_page_id(candidate):
        return Route(RouteKind.UNKNOWN_PAGE_REDIRECT)

    return Route(RouteKind.HTML_PASSTHROUGH)

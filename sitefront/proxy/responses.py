"""Responses synthesized locally, without calling the upstream."""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from fastapi import Response
from fastapi.responses import PlainTextResponse

if TYPE_CHECKING:
    from ..config import TenantConfig

CORS_ALLOW_ORIGIN = {"Access-Control-Allow-Origin": "*"}

CORS_PREFLIGHT_HEADERS = {
    **CORS_ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": "GET, HEAD, POST, PUT, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def cors_preflight_response() -> Response:
    return Response(status_code=200, headers=CORS_PREFLIGHT_HEADERS)


def robots_txt_response(tenant: TenantConfig) -> Response:
    content = f"User-agent: *\nAllow: /\n\nSitemap: https://{tenant.domain}/sitemap.xml\n"
    return PlainTextResponse(content)


def build_sitemap(tenant: TenantConfig) -> str:
    """Sitemap with one <url><loc> per slug, in configured order."""
    urls = "".join(
        f"<url><loc>{escape(f'https://{tenant.domain}/{slug}')}</loc></url>"
        for slug in tenant.slugs
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{urls}</urlset>'
    )


def sitemap_response(tenant: TenantConfig) -> Response:
    return Response(content=build_sitemap(tenant), media_type="application/xml")


def redirect_response(location: str) -> Response:
    """301 redirect. Built by hand so the body stays empty."""
    return Response(status_code=301, headers={"location": location})


def error_response(message: str, status_code: int = 500) -> Response:
    return PlainTextResponse(message, status_code=status_code)

"""Calls to the upstream content host.

Each forwarding strategy has its own header and body policy:

- JS assets: plain GET, body rewritten to reference the tenant's domain.
- API calls: forced JSON content type and upstream user agent; body sent
  verbatim except to the read-only endpoint, which never gets one.
- HTML passthrough: client method, headers and body preserved; script
  blocking security headers stripped from the response.

Every request is attempted exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

import httpx
from fastapi import Response

from ..exceptions import ContentDecodeError, UpstreamRequestError
from ..rewriter import rewrite_js_asset
from .responses import CORS_ALLOW_ORIGIN

if TYPE_CHECKING:
    from ..config import TenantConfig, UpstreamConfig

logger = logging.getLogger("sitefront.proxy")

# Request headers that describe the inbound connection, not the content
EXCLUDED_REQUEST_HEADERS = {"host", "content-length", "accept-encoding"}

# Would block the injected script
SECURITY_HEADERS = {"content-security-policy", "x-content-security-policy"}

# Describe the upstream framing, recomputed for the body we send
FRAMING_HEADERS = {"content-length", "content-encoding", "transfer-encoding", "connection"}

JS_CACHE_CONTROL = "public, max-age=31536000"


def decode_text(response: httpx.Response, url: str) -> str:
    """Strictly decode a response body as text."""
    encoding = response.charset_encoding or "utf-8"
    try:
        return response.content.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise ContentDecodeError(
            "Upstream body is not valid text", details={"url": url, "encoding": encoding}
        ) from e


def is_html(response: httpx.Response) -> bool:
    return "text/html" in response.headers.get("content-type", "").lower()


class UpstreamForwarder:
    """Forwards classified requests to the upstream content host."""

    def __init__(self, upstream: UpstreamConfig, client: httpx.AsyncClient):
        self.upstream = upstream
        self.client = client

    def build_url(self, path: str, query: str = "") -> str:
        """Upstream URL for a request path, query string kept as is."""
        url = f"{self.upstream.base_url}{path}"
        if query:
            url += f"?{query}"
        return url

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        logger.debug(f"Proxying {method} to {url}")
        try:
            return await self.client.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamRequestError(
                "Upstream request failed",
                details={"method": method, "url": url, "error": repr(e)},
            ) from e

    async def fetch_js_asset(self, url: str, tenant: TenantConfig) -> Response:
        response = await self._send("GET", url)
        body = rewrite_js_asset(decode_text(response, url), tenant, self.upstream)
        return Response(
            content=body,
            status_code=response.status_code,
            media_type="application/javascript",
            headers={**CORS_ALLOW_ORIGIN, "Cache-Control": JS_CACHE_CONTROL},
        )

    async def forward_api(self, method: str, url: str, path: str, body: bytes) -> Response:
        headers = {
            "content-type": "application/json;charset=UTF-8",
            "user-agent": self.upstream.user_agent,
        }
        # Upstream ignores or rejects a body on this endpoint
        content = None if path.endswith(self.upstream.read_only_endpoint) else body

        response = await self._send(method, url, headers=headers, content=content)
        return Response(
            content=response.content,
            status_code=response.status_code,
            media_type="application/json",
            headers=CORS_ALLOW_ORIGIN,
        )

    async def forward_html(
        self,
        method: str,
        url: str,
        headers: Iterable[tuple[str, str]],
        body: bytes,
        rewrite: Callable[[str], str],
    ) -> Response:
        """Forward a page request and rewrite the HTML it returns.

        Non-HTML bodies (images, stylesheets) are returned byte for byte.
        """
        forward_headers = [
            (name, value)
            for name, value in headers
            if name.lower() not in EXCLUDED_REQUEST_HEADERS
        ]
        response = await self._send(
            method, url, headers=forward_headers, content=body or None
        )

        if is_html(response):
            encoding = response.charset_encoding or "utf-8"
            rewritten = rewrite(decode_text(response, url))
            # Keep the upstream charset so its content-type header stays true
            content = rewritten.encode(encoding, errors="xmlcharrefreplace")
            logger.info(f"Fetched and rewrote HTML from {url}")
        else:
            content = response.content

        proxied = Response(content=content, status_code=response.status_code)
        for name, value in response.headers.multi_items():
            lowered = name.lower()
            if lowered in SECURITY_HEADERS or lowered in FRAMING_HEADERS:
                continue
            proxied.headers.append(name, value)
        proxied.headers.update(CORS_ALLOW_ORIGIN)
        return proxied

"""sitefront proxy server.

Serves every configured tenant's upstream content under the tenant's
own domain:

- Host header (minus "www.") selects the tenant
- Slug URLs redirect to upstream page ids, the injected script shows
  the slug again once the page has loaded
- robots.txt and sitemap.xml generated per tenant
- HTML rewritten with tenant title, description and font

Usage:
    sitefront serve --config config.toml
"""

from __future__ import annotations

import logging

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from ..config import SiteConfig, TenantConfig
from ..exceptions import SitefrontError
from ..rewriter import ContentRewriter
from ..routing import Route, RouteKind, classify_request
from ..tenants import StaticTenantDirectory, TenantCache, TenantResolver
from .forwarder import UpstreamForwarder
from .responses import (
    CORS_ALLOW_ORIGIN,
    cors_preflight_response,
    error_response,
    redirect_response,
    robots_txt_response,
    sitemap_response,
)

logger = logging.getLogger("sitefront.proxy")

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class SiteProxy:
    """Per-process proxy context: configuration, tenant resolver and
    upstream client. Handlers receive everything through this object.
    """

    def __init__(
        self,
        config: SiteConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.resolver = TenantResolver(
            StaticTenantDirectory(config.tenants),
            TenantCache(
                max_entries=config.cache.max_capacity,
                ttl_seconds=config.cache.time_to_live_seconds,
            ),
        )

        # HTTP client, created on startup
        self._transport = transport
        self.http_client: httpx.AsyncClient | None = None
        self.forwarder: UpstreamForwarder | None = None

    async def startup(self):
        """Initialize async resources."""
        upstream = self.config.upstream
        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=upstream.connect_timeout_seconds,
                read=upstream.request_timeout_seconds,
                write=upstream.request_timeout_seconds,
                pool=upstream.connect_timeout_seconds,
            ),
            transport=self._transport,
        )
        self.forwarder = UpstreamForwarder(upstream, self.http_client)
        logger.info("sitefront proxy started")
        logger.info(f"Upstream: {upstream.base_url}")
        logger.info(f"Tenants: {len(self.config.tenants)}")

    async def shutdown(self):
        """Cleanup async resources."""
        if self.http_client:
            await self.http_client.aclose()

    async def handle(self, request: Request) -> Response:
        """Resolve the tenant, classify the request and produce a response.

        Any SitefrontError becomes a 500 carrying the error description.
        """
        host = request.headers.get("host", "localhost")
        method = request.method
        path = request.url.path
        logger.info(f"Handling request: {method} {path} for {host}")

        try:
            tenant = self.resolver.resolve(host)
            route = classify_request(
                method, path, tenant, query=request.url.query, headers=request.headers
            )
            logger.debug(f"{method} {path} classified as {route.kind.value}")
            return await self._dispatch(route, request, tenant)
        except SitefrontError as e:
            logger.error(f"Request failed: {method} {path} for {host}: {e}")
            return error_response(str(e))

    async def _dispatch(self, route: Route, request: Request, tenant: TenantConfig) -> Response:
        if route.kind.is_local:
            return self._local_response(route, request, tenant)

        forwarder = self.forwarder
        if forwarder is None:
            raise RuntimeError("SiteProxy.startup() has not been called")

        # Upstream gets the path as sent, percent escapes included
        path = upstream_path(request)
        url = forwarder.build_url(path, request.url.query)

        if route.kind is RouteKind.JS_ASSET:
            return await forwarder.fetch_js_asset(url, tenant)

        body = await request.body()
        if route.kind is RouteKind.API_CALL:
            return await forwarder.forward_api(request.method, url, path, body)

        rewriter = ContentRewriter(tenant, self.config.upstream)
        return await forwarder.forward_html(
            request.method, url, request.headers.items(), body, rewriter.rewrite
        )

    def _local_response(self, route: Route, request: Request, tenant: TenantConfig) -> Response:
        kind = route.kind
        if kind is RouteKind.CORS_PREFLIGHT:
            return cors_preflight_response()
        if kind is RouteKind.ROBOTS_TXT:
            return robots_txt_response(tenant)
        if kind is RouteKind.SITEMAP:
            return sitemap_response(tenant)
        if kind is RouteKind.SLUG_REDIRECT:
            logger.info(f"Redirecting slug '{request.url.path[1:]}' to page '{route.page_id}'")
            return redirect_response(f"https://{tenant.domain}/{route.page_id}")
        logger.info(f"Redirecting unknown page id '{request.url.path[1:]}' to main page")
        return redirect_response(f"https://{tenant.domain}")


def upstream_path(request: Request) -> str:
    """Request path without percent-decoding.

    Routing works on the decoded path; the upstream must see the original
    one so that escapes such as %2F keep their meaning.
    """
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    return raw_path.decode("latin-1").partition("?")[0]


# =============================================================================
# FastAPI App
# =============================================================================


def create_app(
    config: SiteConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Site configuration. Defaults to no tenants.
        transport: Optional httpx transport for the upstream client.
    """
    config = config or SiteConfig()

    app = FastAPI(
        title="sitefront",
        description="Custom-domain proxy for hosted content sites",
        version="0.1.0",
    )

    proxy = SiteProxy(config, transport=transport)
    app.state.proxy = proxy

    @app.middleware("http")
    async def allow_any_origin(request: Request, call_next):
        # Every response, local or proxied, is readable cross-origin
        response = await call_next(request)
        response.headers.update(CORS_ALLOW_ORIGIN)
        return response

    @app.on_event("startup")
    async def startup():
        await proxy.startup()

    @app.on_event("shutdown")
    async def shutdown():
        await proxy.shutdown()

    @app.get("/health", response_class=PlainTextResponse)
    @app.get("/_health", response_class=PlainTextResponse)
    async def health():
        return "OK"

    @app.api_route("/{path:path}", methods=PROXY_METHODS)
    async def proxy_request(request: Request, path: str):
        return await proxy.handle(request)

    return app


def run_server(config: SiteConfig | None = None):
    """Run the proxy server."""
    config = config or SiteConfig()
    level = config.server.log_level.upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app(config)
    logger.info(f"Server listening on {config.server.host}:{config.server.port}")
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level="warning")

"""Tests for the proxy application.

The upstream is replaced by an httpx.MockTransport, so every test runs
offline and can inspect exactly what the proxy sent upstream.
"""

from contextlib import ExitStack

import httpx
import pytest
from fastapi.testclient import TestClient

from sitefront.proxy import create_app

GUIDE_PAGE = "abcd1234abcd1234abcd1234abcd1234"
HOME_PAGE = "0123456789abcdef0123456789abcdef"


class FakeUpstream:
    """Records upstream requests and answers with a canned response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.response = httpx.Response(200, content=b"")
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def upstream_server() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_client(site_config, upstream_server):
    """Factory for test clients bound to a request hostname."""
    with ExitStack() as stack:

        def _make(host: str = "docs.example.com") -> TestClient:
            app = create_app(site_config, transport=httpx.MockTransport(upstream_server))
            client = TestClient(app, base_url=f"http://{host}", follow_redirects=False)
            return stack.enter_context(client)

        yield _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


# =============================================================================
# Locally generated responses
# =============================================================================


class TestLocalResponses:
    @pytest.mark.parametrize(
        "path",
        ["/health", "/guide", "/deadbeefdeadbeefdeadbeefdeadbeef", "/robots.txt", "/sitemap.xml"],
    )
    def test_cors_header_on_local_responses(self, client, path):
        assert client.get(path).headers["access-control-allow-origin"] == "*"

    def test_health(self, client, upstream_server):
        for path in ["/health", "/_health"]:
            response = client.get(path)
            assert response.status_code == 200
            assert response.text == "OK"
        assert upstream_server.requests == []

    def test_slug_redirect(self, client):
        response = client.get("/guide")
        assert response.status_code == 301
        assert response.headers["location"] == f"https://docs.example.com/{GUIDE_PAGE}"
        assert response.content == b""

    def test_root_slug_redirect(self, client):
        response = client.get("/")
        assert response.status_code == 301
        assert response.headers["location"] == f"https://docs.example.com/{HOME_PAGE}"

    def test_unknown_page_redirects_home(self, client, upstream_server):
        response = client.get("/deadbeefdeadbeefdeadbeefdeadbeef")
        assert response.status_code == 301
        assert response.headers["location"] == "https://docs.example.com"
        assert upstream_server.requests == []

    def test_robots(self, client):
        response = client.get("/robots.txt")
        assert response.status_code == 200
        assert response.text == (
            "User-agent: *\nAllow: /\n\nSitemap: https://docs.example.com/sitemap.xml\n"
        )

    def test_sitemap(self, client, branded_tenant):
        response = client.get("/sitemap.xml")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert "<url><loc>https://docs.example.com/guide</loc></url>" in response.text
        assert response.text.count("<url>") == len(branded_tenant.slugs)

    def test_preflight_never_reaches_upstream(self, client, upstream_server):
        for path in ["/api/v3/loadPageChunk", "/guide", "/robots.txt"]:
            response = client.options(path)
            assert response.status_code == 200
            assert response.headers["access-control-allow-origin"] == "*"
            assert "POST" in response.headers["access-control-allow-methods"]
            assert response.headers["access-control-allow-headers"] == "Content-Type"
        assert upstream_server.requests == []

    def test_www_host_is_same_tenant(self, make_client):
        response = make_client("www.docs.example.com").get("/robots.txt")
        assert response.status_code == 200
        assert "https://docs.example.com/sitemap.xml" in response.text


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    def test_unknown_domain(self, make_client, upstream_server):
        response = make_client("unknown.example.com").get("/guide")
        assert response.status_code == 500
        assert "Domain not found: unknown.example.com" in response.text
        assert upstream_server.requests == []

    def test_error_responses_carry_cors_header(self, make_client):
        response = make_client("unknown.example.com").get("/")
        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "*"

    def test_upstream_connection_error(self, client, upstream_server):
        upstream_server.error = httpx.ConnectError("connection refused")
        response = client.get(f"/{GUIDE_PAGE}")
        assert response.status_code == 500
        assert "Upstream request failed" in response.text

    def test_undecodable_html(self, client, upstream_server):
        upstream_server.response = httpx.Response(
            200,
            headers={"content-type": "text/html; charset=utf-8"},
            content=b"<html>\xff\xfe</html>",
        )
        response = client.get(f"/{GUIDE_PAGE}")
        assert response.status_code == 500
        assert "not valid text" in response.text

    def test_one_attempt_per_request(self, client, upstream_server):
        upstream_server.error = httpx.ReadTimeout("timed out")
        client.get("/app-1.js")
        assert len(upstream_server.requests) == 1


# =============================================================================
# Forwarded requests
# =============================================================================


class TestJsAssets:
    def test_rewritten_with_cache_headers(self, client, upstream_server):
        upstream_server.response = httpx.Response(
            200,
            headers={"content-type": "application/javascript"},
            content=b'var a="https://www.notion.so/x",b="acme.notion.site";',
        )
        response = client.get("/app-8f3a.js")

        assert response.status_code == 200
        assert response.text == 'var a="https://docs.example.com/x",b="docs.example.com";'
        assert response.headers["content-type"].startswith("application/javascript")
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["cache-control"] == "public, max-age=31536000"

        sent = upstream_server.requests[0]
        assert sent.method == "GET"
        assert str(sent.url) == "https://acme.notion.site/app-8f3a.js"

    def test_upstream_status_kept(self, client, upstream_server):
        upstream_server.response = httpx.Response(404, content=b"missing")
        assert client.get("/app-gone.js").status_code == 404


class TestApiCalls:
    def test_headers_forced_and_body_forwarded(self, client, upstream_server):
        upstream_server.response = httpx.Response(200, content=b'{"ok":true}')
        response = client.post(
            "/api/v3/loadPageChunk?x=1",
            content=b'{"pageId":"1"}',
            headers={"content-type": "text/plain", "user-agent": "browser"},
        )

        assert response.status_code == 200
        assert response.content == b'{"ok":true}'
        assert response.headers["content-type"].startswith("application/json")
        assert response.headers["access-control-allow-origin"] == "*"

        sent = upstream_server.requests[0]
        assert str(sent.url) == "https://acme.notion.site/api/v3/loadPageChunk?x=1"
        assert sent.headers["content-type"] == "application/json;charset=UTF-8"
        assert sent.headers["user-agent"] == "sitefront-test-agent"
        assert sent.content == b'{"pageId":"1"}'

    def test_read_only_endpoint_gets_no_body(self, client, upstream_server):
        client.post("/api/v3/getPublicPageData", content=b'{"blockId":"1"}')
        sent = upstream_server.requests[0]
        assert sent.method == "POST"
        assert sent.content == b""

    def test_upstream_status_kept(self, client, upstream_server):
        upstream_server.response = httpx.Response(429, content=b"{}")
        assert client.post("/api/v3/search", content=b"{}").status_code == 429


class TestHtmlPassthrough:
    def test_html_rewritten_and_security_headers_stripped(
        self, client, upstream_server, sample_html
    ):
        upstream_server.response = httpx.Response(
            200,
            headers={
                "content-type": "text/html; charset=utf-8",
                "content-security-policy": "script-src 'self'",
                "x-content-security-policy": "script-src 'self'",
                "x-upstream-trace": "abc",
            },
            content=sample_html.encode(),
        )
        response = client.get(f"/{GUIDE_PAGE}")

        assert response.status_code == 200
        assert "content-security-policy" not in response.headers
        assert "x-content-security-policy" not in response.headers
        assert response.headers["x-upstream-trace"] == "abc"
        assert "<title>Acme Docs</title>" in response.text
        assert "var SLUG_TO_PAGE" in response.text
        assert "<script>window.acme = 1;</script>" in response.text
        assert int(response.headers["content-length"]) == len(response.content)

    def test_request_forwarded_as_is(self, client, upstream_server):
        upstream_server.response = httpx.Response(200, content=b"")
        client.get(f"/Guide-{GUIDE_PAGE}?pvs=4", headers={"x-custom": "1"})
        sent = upstream_server.requests[0]
        assert str(sent.url) == f"https://acme.notion.site/Guide-{GUIDE_PAGE}?pvs=4"
        assert sent.headers["x-custom"] == "1"
        assert sent.headers["host"] == "acme.notion.site"

    def test_percent_escapes_kept_in_upstream_path(self, client, upstream_server):
        client.get("/files/a%2Fb%20c?q=1")
        sent = upstream_server.requests[0]
        assert sent.url.raw_path == b"/files/a%2Fb%20c?q=1"

    def test_escaped_control_character_is_forwarded(self, client, upstream_server):
        response = client.get("/x%01y")
        assert response.status_code == 200
        assert upstream_server.requests[0].url.raw_path == b"/x%01y"

    def test_cors_header_on_html(self, client, upstream_server, sample_html):
        upstream_server.response = httpx.Response(
            200,
            headers={"content-type": "text/html", "access-control-allow-origin": "https://x"},
            content=sample_html.encode(),
        )
        response = client.get(f"/{GUIDE_PAGE}")
        assert response.headers.get_list("access-control-allow-origin") == ["*"]

    def test_cors_header_on_other_content(self, client, upstream_server):
        upstream_server.response = httpx.Response(
            200, headers={"content-type": "image/png"}, content=b"\x89PNG"
        )
        response = client.get("/image/logo.png")
        assert response.headers["access-control-allow-origin"] == "*"

    def test_non_html_passes_through(self, client, upstream_server):
        image = b"\x89PNG\r\n\x1a\n\x00\xff"
        upstream_server.response = httpx.Response(
            200, headers={"content-type": "image/png"}, content=image
        )
        response = client.get("/image/logo.png")
        assert response.content == image
        assert response.headers["content-type"] == "image/png"

    def test_upstream_error_status_kept(self, client, upstream_server):
        upstream_server.response = httpx.Response(
            404, headers={"content-type": "text/html"}, content=b"<html><body></body></html>"
        )
        response = client.get("/missing-page")
        assert response.status_code == 404
        assert "var SLUG_TO_PAGE" in response.text

"""Shared pytest fixtures for sitefront tests."""

from pathlib import Path

import pytest

from sitefront.config import CacheConfig, SiteConfig, TenantConfig, UpstreamConfig

GUIDE_PAGE = "abcd1234abcd1234abcd1234abcd1234"
HOME_PAGE = "0123456789abcdef0123456789abcdef"
HEX_SLUG_PAGE = "11112222333344445555666677778888"
# A slug that itself looks like a page id
HEX_SLUG = "deadbeefdeadbeefdeadbeefdeadbee0"


@pytest.fixture
def tenant() -> TenantConfig:
    """Tenant from the docs.example.com walkthrough."""
    return TenantConfig(
        domain="docs.example.com",
        slug_to_page={"guide": GUIDE_PAGE},
    )


@pytest.fixture
def branded_tenant() -> TenantConfig:
    """Tenant with every optional branding field set."""
    return TenantConfig(
        domain="docs.example.com",
        slug_to_page={"": HOME_PAGE, "guide": GUIDE_PAGE, HEX_SLUG: HEX_SLUG_PAGE},
        title="Acme Docs",
        description="Guides & reference",
        google_font="IBM Plex Sans",
        custom_script="<script>window.acme = 1;</script>",
    )


@pytest.fixture
def upstream() -> UpstreamConfig:
    return UpstreamConfig(account="acme", user_agent="sitefront-test-agent")


@pytest.fixture
def site_config(branded_tenant, upstream) -> SiteConfig:
    """Site with one branded tenant."""
    return SiteConfig(
        upstream=upstream,
        cache=CacheConfig(max_capacity=10, time_to_live_seconds=60),
        tenants={"docs.example.com": branded_tenant},
    )


@pytest.fixture
def sample_html() -> str:
    """Page as rendered by the upstream, trimmed to the rewritten parts."""
    return (
        "<!DOCTYPE html><html><head>"
        "<title>Upstream Page</title>"
        '<meta name="description" content="Upstream description">'
        '<meta property="og:title" content="Upstream Page">'
        '<meta property="og:description" content="Upstream description">'
        '<meta property="og:url" content="https://acme.notion.site/abcd">'
        '<meta name="twitter:title" content="Upstream Page">'
        '<meta name="twitter:description" content="Upstream description">'
        '<meta name="twitter:url" content="https://acme.notion.site/abcd">'
        '<meta name="apple-itunes-app" content="app-id=1232780281">'
        "</head><body><div id=\"notion-app\"></div></body></html>"
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """TOML configuration file with two tenants."""
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[server]
host = "0.0.0.0"
port = 4000
log_level = "debug"

[upstream]
account = "acme"
user_agent = "test-agent"

[cache]
max_capacity = 5
time_to_live_seconds = 30

[domains."docs.example.com"]
page_title = "Acme Docs"
page_description = "Guides"
google_font = "Inter"
slug_to_page = {{ "" = "{HOME_PAGE}", "guide" = "{GUIDE_PAGE}" }}

[domains."blog.example.com"]
my_domain = "blog.example.org"
slug_to_page = {{ "post" = "{HEX_SLUG_PAGE}" }}
"""
    )
    return path

"""Configuration models for sitefront.

The whole process runs from one SiteConfig, normally loaded from a TOML
file:

    [server]
    host = "0.0.0.0"
    port = 3000
    log_level = "info"

    [upstream]
    account = "acme"
    user_agent = "Mozilla/5.0 ..."

    [cache]
    max_capacity = 1000
    time_to_live_seconds = 3600

    [domains."docs.example.com"]
    page_title = "Acme Docs"
    slug_to_page = { "" = "0123...", "guide" = "abcd..." }
"""

from __future__ import annotations

import dataclasses
import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

from .exceptions import ConfigurationError

logger = logging.getLogger("sitefront.config")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_12_6) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/80.0.3987.163 Safari/537.36"
)

PAGE_ID_RE = re.compile(r"^[0-9a-f]{32}$")

TENANT_STRING_KEYS = (
    "my_domain",
    "page_title",
    "page_description",
    "google_font",
    "custom_script",
)

_Section = TypeVar("_Section")


@dataclass
class ServerConfig:
    """Where the HTTP server listens."""

    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "info"


@dataclass
class UpstreamConfig:
    """The upstream content host shared by all tenants.

    Pages live at https://{account}.{site}/{page_id}. The JS bundles served
    from that host also reference the host's public domain and its bare
    brand domain, both of which get rewritten to the tenant's domain.
    """

    account: str = "faeton"
    user_agent: str = DEFAULT_USER_AGENT
    site: str = "notion.site"
    public_domain: str = "www.notion.so"
    brand_domain: str = "notion.so"

    # Endpoint that must be called without a request body
    read_only_endpoint: str = "/api/v3/getPublicPageData"

    # Timeouts
    connect_timeout_seconds: float = 10
    request_timeout_seconds: float = 60

    @property
    def host(self) -> str:
        return f"{self.account}.{self.site}"

    @property
    def base_url(self) -> str:
        return f"https://{self.host}"


@dataclass
class CacheConfig:
    """Bounds of the tenant resolution cache."""

    max_capacity: int = 1000
    time_to_live_seconds: float = 3600


@dataclass
class TenantConfig:
    """One custom domain and how its content is presented.

    slug_to_page is the only mapping set by hand. page_to_slug, slugs and
    pages are derived from it on construction and whenever it is replaced
    through update_slug_to_page().
    """

    domain: str
    slug_to_page: dict[str, str] = field(default_factory=dict)
    title: str | None = None
    description: str | None = None
    google_font: str | None = None
    custom_script: str | None = None

    # Derived
    page_to_slug: dict[str, str] = field(init=False, default_factory=dict)
    slugs: list[str] = field(init=False, default_factory=list)
    pages: list[str] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self.compute_derived_fields()

    def compute_derived_fields(self) -> None:
        """Rebuild page_to_slug, slugs and pages from slug_to_page."""
        self.page_to_slug = {}
        self.slugs = []
        self.pages = []
        for slug, page in self.slug_to_page.items():
            self.slugs.append(slug)
            self.pages.append(page)
            self.page_to_slug[page] = slug

    def update_slug_to_page(self, mapping: dict[str, str]) -> None:
        """Replace the slug mapping and recompute the derived fields."""
        self.slug_to_page = dict(mapping)
        self.compute_derived_fields()

    def snapshot(self) -> TenantConfig:
        """Return an independent copy with derived fields freshly computed."""
        return dataclasses.replace(self, slug_to_page=dict(self.slug_to_page))

    @classmethod
    def from_dict(cls, key: str, data: dict[str, Any]) -> TenantConfig:
        """Build a tenant from its [domains."<key>"] table."""
        if not isinstance(data, dict):
            raise ConfigurationError("Domain entry must be a table", details={"domain": key})

        for name in TENANT_STRING_KEYS:
            if name in data and not isinstance(data[name], str):
                raise ConfigurationError(
                    "Invalid configuration value",
                    details={"domain": key, "key": name, "expected": "str"},
                )

        slug_to_page = data.get("slug_to_page", {})
        if not isinstance(slug_to_page, dict):
            raise ConfigurationError(
                "slug_to_page must be a table", details={"domain": key}
            )

        seen: dict[str, str] = {}
        for slug, page in slug_to_page.items():
            if not isinstance(page, str):
                raise ConfigurationError(
                    "Page ids must be strings", details={"domain": key, "slug": slug}
                )
            if page in seen:
                raise ConfigurationError(
                    "Duplicate page id",
                    details={"domain": key, "page_id": page, "slugs": f"{seen[page]},{slug}"},
                )
            seen[page] = slug
            if not PAGE_ID_RE.match(page):
                logger.warning(
                    f"Tenant {key}: page id for slug '{slug}' is not 32 lowercase hex chars"
                )

        return cls(
            domain=data.get("my_domain", key),
            slug_to_page=dict(slug_to_page),
            title=data.get("page_title"),
            description=data.get("page_description"),
            google_font=data.get("google_font"),
            custom_script=data.get("custom_script"),
        )


@dataclass
class SiteConfig:
    """Complete process configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    tenants: dict[str, TenantConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SiteConfig:
        """Build a SiteConfig from parsed TOML."""
        server = _build_section(ServerConfig, "server", data.get("server", {}))
        upstream = _build_section(UpstreamConfig, "upstream", data.get("upstream", {}))
        cache = _build_section(CacheConfig, "cache", data.get("cache", {}))
        if cache.max_capacity < 1:
            raise ConfigurationError(
                "cache.max_capacity must be at least 1",
                details={"max_capacity": cache.max_capacity},
            )

        domains = data.get("domains", {})
        if not isinstance(domains, dict):
            raise ConfigurationError("[domains] must be a table")
        tenants = {key: TenantConfig.from_dict(key, table) for key, table in domains.items()}
        return cls(server=server, upstream=upstream, cache=cache, tenants=tenants)


def _build_section(section_cls: type[_Section], name: str, values: Any) -> _Section:
    """Instantiate a section dataclass, checking keys and value types.

    TOML integers are accepted for float fields; booleans never count as
    numbers.
    """
    if not isinstance(values, dict):
        raise ConfigurationError(f"[{name}] must be a table")

    hints = get_type_hints(section_cls)
    for key, value in values.items():
        expected = hints.get(key)
        if expected is None:
            raise ConfigurationError(
                "Invalid configuration section", details={"section": name, "key": key}
            )
        allowed = (int, float) if expected is float else (expected,)
        if isinstance(value, bool) or not isinstance(value, allowed):
            raise ConfigurationError(
                "Invalid configuration value",
                details={
                    "section": name,
                    "key": key,
                    "expected": expected.__name__,
                    "got": type(value).__name__,
                },
            )
    return section_cls(**values)


def load_config(path: str | Path) -> SiteConfig:
    """Load configuration from a TOML file.

    A missing file is not an error: the defaults are used and no tenant is
    configured.
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"Config file {path} not found, using default configuration")
        return SiteConfig()

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            "Invalid TOML", details={"path": str(path), "error": e}
        ) from e

    config = SiteConfig.from_dict(data)
    logger.info(f"Loaded configuration for {len(config.tenants)} domains")
    for domain in config.tenants:
        logger.info(f"  - {domain}")
    return config

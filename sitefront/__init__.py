"""
sitefront - custom domains for hosted content sites.

Serves pages from a hosted content service under each tenant's own domain,
with readable slugs in place of the service's 32-character page ids.

Quick Start:

    from sitefront import load_config
    from sitefront.proxy import run_server

    run_server(load_config("config.toml"))

Or from the command line:

    sitefront serve --config config.toml

Error Handling:

    from sitefront import SitefrontError, DomainNotFoundError

    try:
        tenant = resolver.resolve(host)
    except DomainNotFoundError as e:
        print(f"No tenant for {e.hostname}")
"""

from .config import (
    CacheConfig,
    ServerConfig,
    SiteConfig,
    TenantConfig,
    UpstreamConfig,
    load_config,
)
from .exceptions import (
    ConfigurationError,
    ContentDecodeError,
    DomainNotFoundError,
    RewriteError,
    SitefrontError,
    UpstreamRequestError,
)
from .routing import Route, RouteKind, classify_request

__version__ = "0.1.0"

__all__ = [
    # Config
    "SiteConfig",
    "ServerConfig",
    "UpstreamConfig",
    "CacheConfig",
    "TenantConfig",
    "load_config",
    # Routing
    "Route",
    "RouteKind",
    "classify_request",
    # Exceptions
    "SitefrontError",
    "ConfigurationError",
    "DomainNotFoundError",
    "UpstreamRequestError",
    "ContentDecodeError",
    "RewriteError",
]

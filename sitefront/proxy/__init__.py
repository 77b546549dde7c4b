"""HTTP proxy: FastAPI app, upstream forwarding and local responses."""

from .forwarder import UpstreamForwarder
from .server import SiteProxy, create_app, run_server

__all__ = [
    "SiteProxy",
    "UpstreamForwarder",
    "create_app",
    "run_server",
]

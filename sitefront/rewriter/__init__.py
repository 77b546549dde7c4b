"""Content rewriting for proxied pages and scripts."""

from .assets import rewrite_js_asset
from .client_script import build_client_script
from .html import ContentRewriter

__all__ = [
    "ContentRewriter",
    "build_client_script",
    "rewrite_js_asset",
]

"""HTML rewriting for proxied upstream pages.

Three passes run in order over the whole document as one text buffer:

1. Metadata: title, description and URL meta tags are pointed at the tenant.
2. Head injection: optional web font plus the style hiding the upstream top bar.
3. Body injection: the slug synchronization script and the tenant's custom script.

The rewriting is textual, not structural. Meta tags are matched with the
attribute order the upstream renders (name/property first, then content);
a tag with its attributes in another order is left untouched.
"""

from __future__ import annotations

import html
import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import quote_plus

from ..exceptions import RewriteError
from ..sync import SlugTranslator
from .client_script import build_client_script

if TYPE_CHECKING:
    from ..config import TenantConfig, UpstreamConfig

logger = logging.getLogger("sitefront.rewriter")

HIDDEN_TITLE_TAG = '<title style="display:none">'

TOPBAR_STYLE = """<style>
div.notion-topbar,
div.notion-topbar-mobile { display: none !important; }
div.notion-topbar > div > div:nth-child(1n).toggle-mode,
div.notion-topbar-mobile > div:nth-child(1n).toggle-mode { display: block !important; }
</style>"""

FONT_URL = "https://fonts.googleapis.com/css?family={family}:Regular,Bold,Italic&display=swap"


def _meta_pattern(attr: str, value: str) -> re.Pattern[str]:
    return re.compile(rf'<meta\s+{attr}="{re.escape(value)}"\s+content="[^"]*"')


TITLE_PATTERNS = [
    ("property", "og:title", _meta_pattern("property", "og:title")),
    ("name", "twitter:title", _meta_pattern("name", "twitter:title")),
]

DESCRIPTION_PATTERNS = [
    ("name", "description", _meta_pattern("name", "description")),
    ("property", "og:description", _meta_pattern("property", "og:description")),
    ("name", "twitter:description", _meta_pattern("name", "twitter:description")),
]

URL_PATTERNS = [
    ("property", "og:url", _meta_pattern("property", "og:url")),
    ("name", "twitter:url", _meta_pattern("name", "twitter:url")),
]

ITUNES_PATTERN = re.compile(r'<meta\s+name="apple-itunes-app"[^>]*>')

# Characters that could end the CSS string or the <style> element
_CSS_STRING_ESCAPES = {ord(c): f"\\{ord(c):x} " for c in '\\"<>\n\r'}


def css_string(value: str) -> str:
    """Escape value for use inside a double-quoted CSS string."""
    return value.translate(_CSS_STRING_ESCAPES)


def _replace_meta(
    document: str,
    patterns: list[tuple[str, str, re.Pattern[str]]],
    content: str,
) -> str:
    for attr, value, pattern in patterns:
        replacement = f'<meta {attr}="{value}" content="{content}"'
        # Callable replacement: content must not be read as a regex template
        document = pattern.sub(lambda _m, r=replacement: r, document)
    return document


class ContentRewriter:
    """Rewrites upstream HTML for one tenant.

    Each pass can be applied to already rewritten content: title and
    description substitution give the same result the second time.

    Example:
        >>> rewriter = ContentRewriter(tenant, upstream)
        >>> page = rewriter.rewrite(upstream_html)
    """

    def __init__(self, tenant: TenantConfig, upstream: UpstreamConfig):
        self.tenant = tenant
        self.upstream = upstream
        self.translator = SlugTranslator(tenant)

    def rewrite(self, document: str) -> str:
        """Run the metadata, head and body passes in order."""
        document = self.rewrite_metadata(document)
        document = self.inject_head(document)
        document = self.inject_body(document)
        return document

    def rewrite_metadata(self, document: str) -> str:
        tenant = self.tenant

        if tenant.title is not None:
            title = html.escape(tenant.title)
            injected = f"<title>{title}</title>{HIDDEN_TITLE_TAG}"
            # Upstream <title> is kept but hidden, page scripts still read it
            if injected not in document:
                document = document.replace("<title>", injected)
            document = _replace_meta(document, TITLE_PATTERNS, title)

        if tenant.description is not None:
            description = html.escape(tenant.description)
            document = _replace_meta(document, DESCRIPTION_PATTERNS, description)

        document = _replace_meta(document, URL_PATTERNS, html.escape(tenant.domain))
        document = ITUNES_PATTERN.sub("", document)
        return document

    def inject_head(self, document: str) -> str:
        index = document.find("</head>")
        if index == -1:
            logger.debug(f"No </head> in document for {self.tenant.domain}, skipping head injection")
            return document

        head = ""
        if self.tenant.google_font:
            font = self.tenant.google_font
            font_url = FONT_URL.format(family=quote_plus(font))
            head += (
                f'<link href="{html.escape(font_url)}" rel="stylesheet">'
                f'<style>* {{ font-family: "{css_string(font)}" !important; }}</style>'
            )
        head += TOPBAR_STYLE

        return document[:index] + head + document[index:]

    def inject_body(self, document: str) -> str:
        index = document.rfind("</body>")
        if index == -1:
            logger.debug(f"No </body> in document for {self.tenant.domain}, skipping body injection")
            return document

        try:
            script = build_client_script(self.translator, self.upstream.host)
        except (TypeError, ValueError) as e:
            raise RewriteError(
                "Failed to serialize slug mappings",
                details={"domain": self.tenant.domain, "error": e},
            ) from e

        body = script + (self.tenant.custom_script or "")
        return document[:index] + body + document[index:]

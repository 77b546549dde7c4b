"""Slug <-> page id translation and the client synchronization model.

The upstream content host addresses pages by 32-character hex ids while
tenants expose human-readable slugs. Translation happens in three places:

- the router turns a slug request into a redirect to the page id path,
- the rewriter serializes the mappings into every HTML page, and
- the injected browser script keeps the visible URL in slug form while the
  upstream app keeps navigating by page id.

ClientSyncMachine is the executable model of that browser script. The
script rendered by sitefront.rewriter.client_script follows the same states
and transitions:

    UNINITIALIZED --start()--> WATCHING --chrome rendered--> SYNCHRONIZED

SYNCHRONIZED is terminal for the page's lifetime.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit, urlunsplit

from .config import PAGE_ID_RE

if TYPE_CHECKING:
    from .config import TenantConfig

PAGE_ID_LENGTH = 32

# replaceState title used by the script's own calls
BYPASS_MARKER = "bypass"


def is_page_id(text: str) -> bool:
    """True for exactly 32 lowercase hexadecimal characters."""
    return bool(PAGE_ID_RE.match(text))


class SlugTranslator:
    """Bidirectional slug <-> page id lookups for one tenant."""

    def __init__(self, tenant: TenantConfig):
        self.tenant = tenant
        self._pages = set(tenant.pages)

    def page_for_slug(self, slug: str) -> str | None:
        return self.tenant.slug_to_page.get(slug)

    def slug_for_page(self, page_id: str) -> str | None:
        return self.tenant.page_to_slug.get(page_id)

    def is_known_page(self, page_id: str) -> bool:
        return page_id in self._pages

    def is_unknown_page_id(self, candidate: str) -> bool:
        """True when candidate looks like a page id the tenant does not publish."""
        return is_page_id(candidate) and not self.is_known_page(candidate)

    def page_from_path(self, path: str) -> str | None:
        """Return the known page id ending the path, if any.

        Upstream paths may prefix the id with a title ("/Guide-abcd..."),
        so only the trailing 32 characters are inspected.
        """
        candidate = path[-PAGE_ID_LENGTH:]
        if self.is_known_page(candidate):
            return candidate
        return None

    def slug_path_for(self, path: str) -> str | None:
        """Slug form ("/guide") of a page id path, or None if unmapped."""
        page_id = self.page_from_path(path)
        if page_id is None:
            return None
        return "/" + self.tenant.page_to_slug[page_id]

    def page_path_for(self, path: str) -> str | None:
        """Page id form ("/abcd...") of a slug path, or None if unmapped."""
        page_id = self.page_for_slug(path[1:] if path.startswith("/") else path)
        if page_id is None:
            return None
        return "/" + page_id

    def client_payload(self) -> dict[str, Any]:
        """The structures made available to the in-page script."""
        return {
            "SLUG_TO_PAGE": self.tenant.slug_to_page,
            "PAGE_TO_SLUG": self.tenant.page_to_slug,
            "slugs": self.tenant.slugs,
            "pages": self.tenant.pages,
        }


class SyncState(str, Enum):
    """States of the in-page synchronization protocol."""

    UNINITIALIZED = "uninitialized"
    WATCHING = "watching"  # Mutation observer installed, waiting for chrome
    SYNCHRONIZED = "synchronized"  # Slug URL shown, theme toggle installed


class ClientSyncMachine:
    """Model of the browser-side synchronization protocol.

    Each handler takes what the browser would deliver and returns what the
    script does in response, so the protocol can be exercised without a
    browser.

    Example:
        >>> machine = ClientSyncMachine(SlugTranslator(tenant), "acme.notion.site")
        >>> machine.start()
        >>> machine.on_mutation(chrome_rendered=True, path="/abcd...")
        '/guide'
    """

    def __init__(self, translator: SlugTranslator, upstream_host: str):
        self.translator = translator
        self.upstream_host = upstream_host
        self.state = SyncState.UNINITIALIZED

    def start(self) -> None:
        """Page loaded: observer installed on the upstream app root."""
        if self.state is SyncState.UNINITIALIZED:
            self.state = SyncState.WATCHING

    def on_mutation(self, chrome_rendered: bool, path: str) -> str | None:
        """Handle a DOM mutation.

        Fires the WATCHING -> SYNCHRONIZED transition the first time the
        navigation chrome has rendered. Returns the slug path that replaces
        the visible URL (no history entry), or None when nothing changes.
        """
        if self.state is not SyncState.WATCHING or not chrome_rendered:
            return None
        self.state = SyncState.SYNCHRONIZED
        return self.translator.slug_path_for(path)

    def on_replace_state(self, current_path: str, title: str = "") -> bool:
        """Whether a history.replaceState call may proceed.

        Suppressed while a slug URL is displayed, unless the call comes
        from the script itself.
        """
        if title == BYPASS_MARKER:
            return True
        slug = current_path[1:] if current_path.startswith("/") else current_path
        return self.translator.page_for_slug(slug) is None

    def on_push_state(self, url: str) -> str:
        """Rewrite a trailing page id in a pushState target to its slug."""
        parts = urlsplit(url)
        slug_path = self.translator.slug_path_for(parts.path)
        if slug_path is None:
            return url
        return urlunsplit(("", "", slug_path, "", ""))

    def on_popstate(self, current_path: str) -> tuple[str | None, str | None]:
        """Handle back/forward navigation.

        Returns (bypass_path, display_path): the page id path installed
        before the upstream handler runs, and the slug path shown after it.
        Only active once synchronized.
        """
        if self.state is not SyncState.SYNCHRONIZED:
            return None, None
        bypass_path = self.translator.page_path_for(current_path)
        if bypass_path is None:
            return None, None
        return bypass_path, self.translator.slug_path_for(bypass_path)

    def rewrite_request_url(self, url: str) -> str:
        """Point in-page network calls at the real upstream host."""
        return url.replace(self.translator.tenant.domain, self.upstream_host)

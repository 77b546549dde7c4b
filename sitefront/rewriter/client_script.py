"""Browser-side synchronization script injected before </body>.

The script is a small state machine mirroring sitefront.sync.ClientSyncMachine:

    uninitialized -> watching      mutation observer installed on #notion-app
    watching -> synchronized       first mutation where the top bar has rendered:
                                   show slug URL, install theme toggle,
                                   start intercepting back/forward

History and network interception is installed at load and stays active
for the page's lifetime.
"""

from __future__ import annotations

import json
from string import Template
from typing import Any

from ..sync import BYPASS_MARKER, PAGE_ID_LENGTH, SlugTranslator, SyncState

_SCRIPT = Template(
    """<script>
(function () {
  window.CONFIG = window.CONFIG || {};
  window.CONFIG.domainBaseUrl = location.origin;

  var SLUG_TO_PAGE = $slug_to_page;
  var PAGE_TO_SLUG = $page_to_slug;
  var slugs = $slugs;
  var pages = $pages;
  var TENANT_DOMAIN = $tenant_domain;
  var UPSTREAM_HOST = $upstream_host;
  var BYPASS = $bypass;

  var STATE = $states;
  var state = STATE.UNINITIALIZED;
  var toggle = document.createElement('div');

  function currentSlug() { return location.pathname.slice(1); }
  function currentPage() { return location.pathname.slice(-$page_id_length); }

  function showSlug() {
    var slug = PAGE_TO_SLUG[currentPage()];
    if (slug != null) history.replaceState(history.state, BYPASS, '/' + slug);
  }

  function themeStore() {
    var c = window.__console;
    return c && c.environment && c.environment.ThemeStore;
  }

  function renderToggle(dark) {
    toggle.innerHTML =
      '<div title="Change to ' + (dark ? 'Light' : 'Dark') + ' Mode" style="margin: auto 14px 0 0; min-width: 0;">' +
      '<div role="button" tabindex="0" style="user-select: none; cursor: pointer; border-radius: 44px;">' +
      '<div style="display: flex; height: 14px; width: 26px; border-radius: 44px; padding: 2px; background: ' +
      (dark ? 'rgb(46, 170, 220)' : 'rgba(135, 131, 120, 0.3)') + ';">' +
      '<div style="width: 14px; height: 14px; border-radius: 44px; background: white; transform: translateX(' +
      (dark ? '12px' : '0') + ');"></div></div></div></div>';
  }

  function setTheme(dark) {
    renderToggle(dark);
    document.body.classList.toggle('dark', dark);
    var store = themeStore();
    if (store) store.setState({ mode: dark ? 'dark' : 'light' });
  }

  function installToggle(chrome) {
    toggle.className = 'toggle-mode';
    toggle.addEventListener('click', function () {
      setTheme(!document.body.classList.contains('dark'));
    });
    chrome.appendChild(toggle);
    var query = window.matchMedia ? window.matchMedia('(prefers-color-scheme: dark)') : null;
    setTheme(!!(query && query.matches));
    if (query) query.addEventListener('change', function (e) { setTheme(e.matches); });
  }

  function renderedChrome() {
    var web = document.querySelector('.notion-topbar');
    var mobile = document.querySelector('.notion-topbar-mobile');
    if (web && web.firstChild && web.firstChild.firstChild) return web.firstChild;
    if (mobile && mobile.firstChild) return mobile;
    return null;
  }

  function interceptPopstate() {
    var previous = window.onpopstate;
    window.onpopstate = function () {
      var page = SLUG_TO_PAGE[currentSlug()];
      if (page != null) history.replaceState(history.state, BYPASS, '/' + page);
      if (previous) previous.apply(this, arguments);
      showSlug();
    };
  }

  function onMutation() {
    if (state !== STATE.WATCHING) return;
    var chrome = renderedChrome();
    if (!chrome) return;
    state = STATE.SYNCHRONIZED;
    showSlug();
    installToggle(chrome);
    interceptPopstate();
  }

  var replaceState = window.history.replaceState;
  window.history.replaceState = function (data, title) {
    if (title !== BYPASS && slugs.indexOf(currentSlug()) !== -1) return;
    return replaceState.apply(window.history, arguments);
  };

  var pushState = window.history.pushState;
  window.history.pushState = function (data, title, url) {
    if (url != null) {
      var dest = new URL(url, location.origin);
      var id = dest.pathname.slice(-$page_id_length);
      if (pages.indexOf(id) !== -1) arguments[2] = '/' + PAGE_TO_SLUG[id];
    }
    return pushState.apply(window.history, arguments);
  };

  function toUpstream(url) {
    return typeof url === 'string' ? url.split(TENANT_DOMAIN).join(UPSTREAM_HOST) : url;
  }

  var open = window.XMLHttpRequest.prototype.open;
  window.XMLHttpRequest.prototype.open = function () {
    arguments[1] = toUpstream(arguments[1]);
    return open.apply(this, arguments);
  };

  if (window.fetch) {
    var fetch = window.fetch;
    window.fetch = function (input) {
      arguments[0] = toUpstream(input);
      return fetch.apply(this, arguments);
    };
  }

  var root = document.querySelector('#notion-app');
  if (root) {
    state = STATE.WATCHING;
    new MutationObserver(onMutation).observe(root, { childList: true, subtree: true });
    onMutation();
  }
})();
</script>"""
)


def _json(value: Any) -> str:
    # "</" would close the surrounding <script> element
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


def build_client_script(translator: SlugTranslator, upstream_host: str) -> str:
    """Render the synchronization script for one tenant.

    Args:
        translator: Slug translator holding the tenant's mappings.
        upstream_host: Real upstream hostname, e.g. "acme.notion.site".

    Returns:
        A complete <script> element.

    Raises:
        TypeError, ValueError: If the mappings cannot be serialized.
    """
    payload = translator.client_payload()
    return _SCRIPT.substitute(
        slug_to_page=_json(payload["SLUG_TO_PAGE"]),
        page_to_slug=_json(payload["PAGE_TO_SLUG"]),
        slugs=_json(payload["slugs"]),
        pages=_json(payload["pages"]),
        tenant_domain=_json(translator.tenant.domain),
        upstream_host=_json(upstream_host),
        bypass=_json(BYPASS_MARKER),
        states=_json({state.name: state.value for state in SyncState}),
        page_id_length=PAGE_ID_LENGTH,
    )

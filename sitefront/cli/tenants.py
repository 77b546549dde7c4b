"""Tenant inspection CLI commands."""

from __future__ import annotations

import click

from ..exceptions import DomainNotFoundError
from ..tenants import StaticTenantDirectory, TenantCache, TenantResolver
from ._utils import print_error, print_stats, print_table, print_warning, truncate
from .main import main
from .options import config_option, load_or_exit


@main.group()
def tenants() -> None:
    """Inspect configured tenants.

    \b
    Examples:
        sitefront tenants list
        sitefront tenants show docs.example.com
    """
    pass


@tenants.command("list")
@config_option
def list_tenants(config_path: str) -> None:
    """List configured domains."""
    config = load_or_exit(config_path)
    if not config.tenants:
        print_warning(f"No domains configured in {config_path}")
        return

    rows = [
        [
            key,
            tenant.domain,
            str(len(tenant.slugs)),
            truncate(tenant.title or "-", 40),
            tenant.google_font or "-",
        ]
        for key, tenant in sorted(config.tenants.items())
    ]
    print_table(
        ["Host", "Domain", "Slugs", "Title", "Font"],
        rows,
        title=f"{len(rows)} domains",
    )


@tenants.command("show")
@click.argument("hostname")
@config_option
def show_tenant(hostname: str, config_path: str) -> None:
    """Show how HOSTNAME resolves and its slug mapping."""
    config = load_or_exit(config_path)
    resolver = TenantResolver(StaticTenantDirectory(config.tenants), TenantCache())

    try:
        tenant = resolver.resolve(hostname)
    except DomainNotFoundError as e:
        print_error(str(e))
        raise SystemExit(1) from None

    print_stats(
        {
            "Domain": tenant.domain,
            "Title": tenant.title or "-",
            "Description": truncate(tenant.description or "-", 60),
            "Font": tenant.google_font or "-",
            "Custom script": "yes" if tenant.custom_script else "no",
        },
        title=hostname,
    )
    rows = [
        [slug or "(root)", page, f"https://{tenant.domain}/{slug}"]
        for slug, page in tenant.slug_to_page.items()
    ]
    print_table(["Slug", "Page id", "URL"], rows)

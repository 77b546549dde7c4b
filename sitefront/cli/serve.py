"""Proxy server CLI command."""

import click

from .main import main
from .options import config_option, load_or_exit


@main.command()
@config_option
@click.option("--host", default=None, help="Host to bind to (overrides [server].host)")
@click.option(
    "--port", "-p", default=None, type=int, help="Port to bind to (overrides [server].port)"
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (overrides [server].log_level)",
)
def serve(
    config_path: str,
    host: str | None,
    port: int | None,
    log_level: str | None,
) -> None:
    """Start the proxy server.

    \b
    Examples:
        sitefront serve                         Use ./config.toml
        sitefront serve -c /etc/sitefront.toml  Use another config file
        sitefront serve --port 8080             Override the port
    """
    config = load_or_exit(config_path)

    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = port
    if log_level is not None:
        config.server.log_level = log_level

    # Import here to avoid slow startup
    from ..proxy import run_server

    click.echo(f"""
sitefront proxy

  URL:       http://{config.server.host}:{config.server.port}
  Upstream:  {config.upstream.base_url}
  Tenants:   {len(config.tenants)}

Endpoints:
  GET  /health        Health check
  GET  /robots.txt    Per-tenant robots file
  GET  /sitemap.xml   Per-tenant sitemap
  *    /*             Proxied to the upstream

Press Ctrl+C to stop.
""")

    try:
        run_server(config)
    except KeyboardInterrupt:
        click.echo("\nShutting down...")

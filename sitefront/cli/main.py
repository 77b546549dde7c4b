"""`sitefront` command group.

Subcommands live in sibling modules and attach themselves to `main`
when imported.
"""

import logging

import click

from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="sitefront")
@click.option("--verbose", "-v", is_flag=True, help="Log configuration loading details.")
def main(verbose: bool) -> None:
    """sitefront - serve hosted content sites under custom domains.

    \b
    Examples:
        sitefront serve                     Start the proxy
        sitefront tenants list              List configured domains
        sitefront tenants show example.com  Show a domain's slugs
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")


def _register_commands() -> None:
    from . import (
        serve,  # noqa: F401
        tenants,  # noqa: F401
    )


_register_commands()

if __name__ == "__main__":
    main()

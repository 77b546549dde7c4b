"""Options shared by several commands."""

from typing import Any

import click

from ..config import SiteConfig, load_config
from ..exceptions import ConfigurationError
from ._utils import print_error


def config_option(fn: Any) -> Any:
    """Shared --config option, also read from SITEFRONT_CONFIG."""
    return click.option(
        "--config",
        "-c",
        "config_path",
        type=click.Path(dir_okay=False),
        default="config.toml",
        envvar="SITEFRONT_CONFIG",
        show_default=True,
        help="Path to the TOML configuration file.",
    )(fn)


def load_or_exit(config_path: str) -> SiteConfig:
    """Load configuration, exiting with status 1 on error."""
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        print_error(str(e))
        raise SystemExit(1) from None

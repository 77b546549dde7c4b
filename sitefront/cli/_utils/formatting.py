"""Rich output helpers shared by the CLI commands."""

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: str | None = None,
) -> None:
    """Print rows under the given column headers.

    The first column is the lookup key (a hostname or slug) and is
    highlighted; cells are never wrapped so hostnames and page ids stay
    copyable.

    Args:
        headers: Column headers.
        rows: Cell values, one list per row.
        title: Optional title above the table.
    """
    table = Table(title=title, header_style="bold")
    for i, header in enumerate(headers):
        table.add_column(header, style="cyan" if i == 0 else None, no_wrap=True)
    for row in rows:
        table.add_row(*row)
    console.print(table)


def print_stats(stats: dict[str, Any], title: str = "Details") -> None:
    """Print key/value pairs in a panel, keys aligned.

    Args:
        stats: Mapping of labels to values, printed in insertion order.
        title: Title shown on the panel border.
    """
    width = max((len(key) for key in stats), default=0)
    lines = [f"[bold]{key + ':':<{width + 1}}[/bold] {value}" for key, value in stats.items()]
    console.print(Panel("\n".join(lines), title=title, expand=False))


def print_error(msg: str) -> None:
    """Print an error message in red.

    Args:
        msg: The error message to display.
    """
    console.print(f"[bold red]Error:[/bold red] {msg}")


def print_warning(msg: str) -> None:
    """Print a warning message in yellow.

    Args:
        msg: The warning message to display.
    """
    console.print(f"[bold yellow]Warning:[/bold yellow] {msg}")


def truncate(text: str, max_len: int = 50) -> str:
    """Shorten text to max_len characters, ending in "..." when cut.

    Args:
        text: The text to shorten.
        max_len: Maximum length including the ellipsis.

    Returns:
        text unchanged when it fits, otherwise its cut-down form.
    """
    return text if len(text) <= max_len else text[: max_len - 3] + "..."

"""CLI utilities for formatting."""

from .formatting import (
    console,
    print_error,
    print_stats,
    print_table,
    print_warning,
    truncate,
)

__all__ = [
    "console",
    "print_table",
    "print_stats",
    "print_error",
    "print_warning",
    "truncate",
]

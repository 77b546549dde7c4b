"""Command line interface for sitefront."""

from .main import main

__all__ = ["main"]

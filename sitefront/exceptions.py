"""Custom exceptions for sitefront.

All exceptions inherit from SitefrontError, so the request boundary can
turn any failure of a single proxied request into one explicit error
response without taking the process down.

Example:
    from sitefront.exceptions import DomainNotFoundError, SitefrontError

    try:
        tenant = resolver.resolve("docs.example.com")
    except DomainNotFoundError as e:
        print(f"Unknown domain: {e}")
    except SitefrontError as e:
        print(f"sitefront error: {e}")
"""

from __future__ import annotations

from typing import Any


class SitefrontError(Exception):
    """Base exception for all sitefront errors.

    Carries a human-readable message plus optional structured details
    that are appended to the string form:

        SitefrontError("Upstream request failed", details={"url": "..."})
        # -> "Upstream request failed (url=...)"
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(SitefrontError):
    """Raised when the site configuration cannot be loaded.

    This includes:
    - Unparseable TOML
    - Wrong value types in a section
    - Two slugs pointing at the same page id within one tenant

    Example:
        ConfigurationError(
            "Duplicate page id",
            details={"domain": "docs.example.com", "page_id": "abcd..."}
        )
    """

    pass


class DomainNotFoundError(SitefrontError):
    """Raised when a hostname does not resolve to any configured tenant."""

    def __init__(self, hostname: str):
        super().__init__(f"Domain not found: {hostname}", details={})
        self.hostname = hostname


class UpstreamRequestError(SitefrontError):
    """Raised when the call to the upstream content host fails.

    Covers connection errors, timeouts and malformed upstream responses.
    Requests are never retried.
    """

    pass


class ContentDecodeError(SitefrontError):
    """Raised when an upstream body expected to be text cannot be decoded."""

    pass


class RewriteError(SitefrontError):
    """Raised when HTML rewriting fails.

    The unrewritten upstream content is never returned in its place.

    Example:
        RewriteError(
            "Failed to serialize slug mapping",
            details={"domain": "docs.example.com", "error": "..."}
        )
    """

    pass

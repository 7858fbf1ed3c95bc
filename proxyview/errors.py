"""Exceptions raised by proxy view components."""

from __future__ import annotations


class ProxyViewError(Exception):
    """Base class for view-state errors."""


class InvalidRouteIdentifierError(ProxyViewError, ValueError):
    """Raised when a route parameter is not a positive integer identifier."""

    def __init__(self, raw: object) -> None:
        super().__init__(f"Invalid route identifier: {raw!r}")
        self.raw = raw


class ColumnVisibilityError(ProxyViewError):
    """Raised when a change would leave a table without visible columns."""


def describe_error(exc: BaseException | None) -> str:
    """Return the most useful human-readable message carried by *exc*."""
    if exc is None:
        return "Unknown error"
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    text = str(exc).strip()
    return text or "Unknown error"


__all__ = [
    "ColumnVisibilityError",
    "InvalidRouteIdentifierError",
    "ProxyViewError",
    "describe_error",
]

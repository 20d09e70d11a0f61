"""Central error types used across the application."""

from __future__ import annotations


class RouteExtractorError(RuntimeError):
    """Base error for route extraction failures."""


class RouteInputError(RouteExtractorError):
    """Raised when route geometry cannot be processed (no fragments, bad type)."""


class RouteSourceError(RouteExtractorError):
    """Raised when the route data service fails or returns an unusable payload."""


class RouteNotFoundError(RouteSourceError):
    """Raised when no route feature exists for the requested stage."""


__all__ = [
    "RouteExtractorError",
    "RouteInputError",
    "RouteSourceError",
    "RouteNotFoundError",
]

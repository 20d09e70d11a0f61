"""Service layer package.

Exports high-level services consumed by the CLI.
"""

from .route_service import RouteOutcome, RouteService, RouteServiceConfig

__all__ = ["RouteOutcome", "RouteService", "RouteServiceConfig"]

"""Orient a route so it runs towards the official finish."""

from __future__ import annotations

import logging
from typing import Optional

from ..models import ReferencePoint, Route
from .primitives import great_circle_distance_km

LOGGER = logging.getLogger(__name__)


def normalize_direction(route: Route, finish: Optional[ReferencePoint]) -> Route:
    """Reverse ``route`` when its first point is closer to the finish than its last.

    Without a finish reference the route is returned as given.
    """

    if finish is None:
        LOGGER.info("No finish reference; keeping source direction")
        return route
    if len(route) < 2:
        return route

    start_to_finish = great_circle_distance_km(route[0], finish.location)
    end_to_finish = great_circle_distance_km(route[-1], finish.location)
    LOGGER.debug(
        "Finish check against %s: route start %.0fm, route end %.0fm",
        finish.name,
        start_to_finish * 1000,
        end_to_finish * 1000,
    )
    if start_to_finish < end_to_finish:
        LOGGER.info("Route start is closer to the finish; reversing")
        return tuple(reversed(route))
    return route

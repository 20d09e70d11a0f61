"""Remove the neutralised rollout that precedes the official start.

Route geometry for point-to-point stages often begins well before the
official start (the "rolling start"). The route is cut so that it begins at
the first trackpoint within a few metres of the start reference, or, when no
trackpoint is that close, at the start reference projected onto the route.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..config import ROLLING_START_TOLERANCE_M
from ..models import GeoPoint, ReferencePoint, Route
from .primitives import great_circle_distance_km, project_point_onto_polyline

LOGGER = logging.getLogger(__name__)


# Parameters this close below 0.5 count as the midpoint.
_MIDPOINT_TOLERANCE = 1e-9


def insertion_index(segment_index: int, t: float) -> int:
    """Index at which a point projected onto ``segment_index`` is spliced.

    ``t`` is rounded half up, so a point at or past the segment midpoint goes
    in front of the segment's far endpoint and anything earlier goes in front
    of its near endpoint.
    """

    return segment_index + int(math.floor(t + 0.5 + _MIDPOINT_TOLERANCE))


def trim_rolling_start(
    route: Route,
    start: Optional[ReferencePoint],
    keep_original: bool = False,
    *,
    tolerance_m: float = ROLLING_START_TOLERANCE_M,
) -> Route:
    """Return ``route`` cut so that it begins at the official start."""

    if keep_original:
        LOGGER.info("Keeping original route start (rolling start not removed)")
        return route
    if start is None:
        LOGGER.info("No start reference; rolling start elimination skipped")
        return route
    if not route:
        return route

    route = tuple(route)
    tolerance_km = tolerance_m / 1000.0
    if great_circle_distance_km(route[0], start.location) <= tolerance_km:
        LOGGER.debug("Route already begins at %s", start.name)
        return route

    for index, point in enumerate(route):
        if great_circle_distance_km(point, start.location) <= tolerance_km:
            LOGGER.info(
                "Trimmed %d rolling-start points before %s", index, start.name
            )
            return route[index:]

    return _splice_projected_start(route, start)


def _splice_projected_start(route: Route, start: ReferencePoint) -> Route:
    """Insert the start projected onto the route and drop everything before it.

    The projection runs on the route's own longitude/latitude polyline.
    """

    projection = project_point_onto_polyline(start.location, route)
    start_point = GeoPoint(projection.point[0], projection.point[1])
    index = insertion_index(projection.segment_index, projection.t)
    LOGGER.info(
        "No trackpoint within tolerance of %s; inserted projected start at "
        "index %d (segment %d, t=%.3f, offset %.1fm), dropping %d points",
        start.name,
        index,
        projection.segment_index,
        projection.t,
        great_circle_distance_km(start_point, start.location) * 1000,
        index,
    )
    return (start_point,) + route[index:]

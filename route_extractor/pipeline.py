"""Route reconstruction pipeline.

Takes the raw fragments and reference points of one route and produces the
final, oriented and trimmed coordinate sequence:

    fragments -> stitch (multiple only) -> project -> orient to finish
              -> remove rolling start -> endpoint report

Every stage returns a new value; the :class:`RouteSource` is never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import List, Optional

from .config import (
    ENDPOINT_WARNING_THRESHOLD_M,
    FRAGMENT_JOIN_MAX_DISTANCE,
    KEEP_ROLLING_START,
    MIN_SIGNIFICANT_FRAGMENT_POINTS,
    ROLLING_START_TOLERANCE_M,
)
from .errors import RouteInputError
from .geometry.direction import normalize_direction
from .geometry.projection import DEFAULT_BOUNDING_BOX, BoundingBox, CoordinateProjector
from .geometry.rolling_start import trim_rolling_start
from .geometry.stitching import stitch_route
from .geometry.validation import validate_endpoints
from .models import GeometryKind, RouteResult, RouteSource

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineOptions:
    """Thresholds and switches for a single pipeline run."""

    bounding_box: BoundingBox = field(default_factory=lambda: DEFAULT_BOUNDING_BOX)
    min_fragment_points: int = MIN_SIGNIFICANT_FRAGMENT_POINTS
    max_join_distance: float = FRAGMENT_JOIN_MAX_DISTANCE
    keep_rolling_start: bool = KEEP_ROLLING_START
    rolling_start_tolerance_m: float = ROLLING_START_TOLERANCE_M
    endpoint_threshold_m: float = ENDPOINT_WARNING_THRESHOLD_M


def build_route(
    source: RouteSource,
    options: Optional[PipelineOptions] = None,
    *,
    projector: Optional[CoordinateProjector] = None,
) -> RouteResult:
    """Run every stage for ``source`` and return the final route with diagnostics.

    Raises:
        RouteInputError: If the geometry is missing, malformed, has more than
            one start or finish reference, or lies entirely outside the
            bounding box.
    """

    options = options or PipelineOptions()
    projector = projector or CoordinateProjector(options.bounding_box)
    degraded: List[str] = []

    if not source.fragments:
        raise RouteInputError(f"No geometry fragments for {source.name}")
    start = source.start
    finish = source.finish
    if finish is None:
        degraded.append("No finish reference; route direction left as delivered")
        _log_direction_hint(source.name)

    if source.geometry_kind == GeometryKind.MULTIPLE:
        LOGGER.info(
            "%s: stitching %d fragments", source.name, len(source.fragments)
        )
        stitched = stitch_route(
            source.fragments,
            finish,
            projector,
            min_points=options.min_fragment_points,
            max_distance=options.max_join_distance,
        )
        route, stats = stitched.route, stitched.stats
        if stitched.connection is None:
            degraded.append("No connectable fragments; using the longest one")
    elif source.geometry_kind == GeometryKind.SINGLE:
        if len(source.fragments) != 1:
            raise RouteInputError(
                f"Single geometry for {source.name} has "
                f"{len(source.fragments)} fragments"
            )
        route, stats = projector.project_fragment(source.fragments[0])
        route = normalize_direction(route, finish)
    else:
        raise RouteInputError(f"Unsupported geometry kind: {source.geometry_kind}")

    LOGGER.info(
        "%s: converted %d/%d coordinates inside bounds",
        source.name,
        stats.accepted,
        stats.total,
    )
    if not route:
        raise RouteInputError(
            f"No coordinates of {source.name} fall inside the bounding box"
        )

    if start is None and not options.keep_rolling_start:
        degraded.append("No start reference; rolling start not removed")
    trimmed = trim_rolling_start(
        route,
        start,
        options.keep_rolling_start,
        tolerance_m=options.rolling_start_tolerance_m,
    )
    if len(trimmed) != len(route):
        LOGGER.info(
            "%s: route now has %d points (was %d)",
            source.name,
            len(trimmed),
            len(route),
        )

    report = validate_endpoints(
        trimmed,
        start,
        finish,
        threshold_m=options.endpoint_threshold_m,
        route_name=source.name,
    )
    for note in degraded:
        LOGGER.info("%s: %s", source.name, note)
    return RouteResult(
        source=source,
        route=trimmed,
        report=report,
        degraded=degraded,
        accepted_points=stats.accepted,
        total_points=stats.total,
    )


def _log_direction_hint(name: str) -> None:
    """Log the direction implied by a ``"Start > Finish"`` style route name."""

    if ">" not in name:
        return
    origin, _, destination = name.partition(">")
    LOGGER.info(
        "Direction from name: %s -> %s (not verified)",
        origin.strip(),
        destination.strip(),
    )

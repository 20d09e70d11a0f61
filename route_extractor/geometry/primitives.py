"""Distance and projection primitives shared by the route stages."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence

from ..config import EARTH_RADIUS_M
from ..models import GeoPoint, ProjectedPoint


@dataclass(frozen=True, slots=True)
class SegmentProjection:
    """Closest point on a segment, its clamped parameter and offset."""

    point: ProjectedPoint
    t: float
    distance: float


@dataclass(frozen=True, slots=True)
class PolylineProjection:
    """Closest point on a polyline and the segment it lies on."""

    point: ProjectedPoint
    segment_index: int
    t: float
    distance: float


def planar_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance in the projected coordinate system."""

    return math.hypot(b[0] - a[0], b[1] - a[1])


def great_circle_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two geographic points, in kilometres."""

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.lon - a.lon)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1 - h)))
    return EARTH_RADIUS_M * c / 1000.0


def project_point_onto_segment(
    point: Sequence[float],
    seg_start: Sequence[float],
    seg_end: Sequence[float],
) -> SegmentProjection:
    """Project ``point`` onto the segment, clamping the parameter to [0, 1].

    A zero-length segment projects everything onto its single point with
    ``t = 0``.
    """

    dx = seg_end[0] - seg_start[0]
    dy = seg_end[1] - seg_start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        nearest = ProjectedPoint(float(seg_start[0]), float(seg_start[1]))
        return SegmentProjection(nearest, 0.0, planar_distance(point, nearest))
    t = ((point[0] - seg_start[0]) * dx + (point[1] - seg_start[1]) * dy) / length_sq
    t = min(max(t, 0.0), 1.0)
    nearest = ProjectedPoint(
        float(seg_start[0] + t * dx), float(seg_start[1] + t * dy)
    )
    return SegmentProjection(nearest, float(t), planar_distance(point, nearest))


def project_point_onto_polyline(
    point: Sequence[float],
    points: Sequence[Sequence[float]],
) -> PolylineProjection:
    """Return the closest projection of ``point`` over every polyline segment.

    On exact ties the earliest segment wins. A single-point polyline is
    treated as one degenerate segment.
    """

    if len(points) == 0:
        raise ValueError("Cannot project onto an empty polyline")
    if len(points) == 1:
        single = project_point_onto_segment(point, points[0], points[0])
        return PolylineProjection(single.point, 0, single.t, single.distance)

    first = project_point_onto_segment(point, points[0], points[1])
    best = PolylineProjection(first.point, 0, first.t, first.distance)
    for index in range(1, len(points) - 1):
        candidate = project_point_onto_segment(point, points[index], points[index + 1])
        if candidate.distance < best.distance:
            best = PolylineProjection(
                candidate.point, index, candidate.t, candidate.distance
            )
    return best

"""Dataclasses describing route geometry inputs and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .config import ENDPOINT_WARNING_THRESHOLD_M
from .errors import RouteInputError


class ProjectedPoint(NamedTuple):
    """Planar coordinate in the source projection (Web Mercator metres)."""

    x: float
    y: float


class GeoPoint(NamedTuple):
    """Geographic coordinate in decimal degrees, longitude first."""

    lon: float
    lat: float


# Fragments and routes are tuples so no pipeline stage can edit them in place.
PathFragment = Tuple[ProjectedPoint, ...]
Route = Tuple[GeoPoint, ...]


class ReferenceRole(str, Enum):
    START = "start"
    FINISH = "finish"
    CLIMB = "climb"
    SPRINT = "sprint"
    OTHER = "other"


class GeometryKind(str, Enum):
    """Shape of the raw geometry delivered by the data source."""

    SINGLE = "single"
    MULTIPLE = "multiple"

    @classmethod
    def from_geojson_type(cls, geometry_type: Optional[str]) -> "GeometryKind":
        if geometry_type == "LineString":
            return cls.SINGLE
        if geometry_type == "MultiLineString":
            return cls.MULTIPLE
        raise RouteInputError(f"Unsupported geometry type: {geometry_type}")


class ConnectionType(str, Enum):
    """Which endpoints of two fragments meet (first fragment named first)."""

    START_START = "start-start"
    START_END = "start-end"
    END_START = "end-start"
    END_END = "end-end"


@dataclass(frozen=True, slots=True)
class Connection:
    kind: ConnectionType
    distance: float


@dataclass(frozen=True, slots=True)
class ReferencePoint:
    """Official waypoint published alongside the route."""

    role: ReferenceRole
    name: str
    location: GeoPoint
    description: Optional[str] = None
    label: Optional[str] = None
    distance_km: Optional[float] = None


@dataclass(slots=True)
class RouteSource:
    """Raw route as delivered by the data source, before any processing."""

    route_id: str
    name: str
    geometry_kind: GeometryKind
    fragments: List[PathFragment]
    references: List[ReferencePoint] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def start(self) -> Optional[ReferencePoint]:
        return single_reference(self.references, ReferenceRole.START)

    @property
    def finish(self) -> Optional[ReferencePoint]:
        return single_reference(self.references, ReferenceRole.FINISH)


@dataclass(slots=True)
class EndpointReport:
    """Distances between the final route ends and the official references."""

    start_distance_km: Optional[float] = None
    end_distance_km: Optional[float] = None
    threshold_m: float = ENDPOINT_WARNING_THRESHOLD_M
    warnings: List[str] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.start_distance_km is not None and self.end_distance_km is not None

    @property
    def start_distance_m(self) -> Optional[float]:
        if self.start_distance_km is None:
            return None
        return self.start_distance_km * 1000.0

    @property
    def end_distance_m(self) -> Optional[float]:
        if self.end_distance_km is None:
            return None
        return self.end_distance_km * 1000.0


@dataclass(slots=True)
class RouteResult:
    """Final route plus the diagnostics gathered while building it."""

    source: RouteSource
    route: Route
    report: EndpointReport
    degraded: List[str] = field(default_factory=list)
    accepted_points: int = 0
    total_points: int = 0

    @property
    def references(self) -> List[ReferencePoint]:
        return self.source.references


def single_reference(
    references: Sequence[ReferencePoint], role: ReferenceRole
) -> Optional[ReferencePoint]:
    """Return the only reference with ``role`` or None; duplicates are invalid."""

    matches = [ref for ref in references if ref.role == role]
    if len(matches) > 1:
        raise RouteInputError(
            f"Expected at most one {role.value} reference, found {len(matches)}"
        )
    return matches[0] if matches else None


__all__ = [
    "Connection",
    "ConnectionType",
    "EndpointReport",
    "GeoPoint",
    "GeometryKind",
    "PathFragment",
    "ProjectedPoint",
    "ReferencePoint",
    "ReferenceRole",
    "Route",
    "RouteResult",
    "RouteSource",
    "single_reference",
]

"""Conversion between the source projection and geographic coordinates."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from pyproj import CRS, Transformer

from ..config import (
    BOUNDING_BOX_MAX_LAT,
    BOUNDING_BOX_MAX_LON,
    BOUNDING_BOX_MIN_LAT,
    BOUNDING_BOX_MIN_LON,
    SOURCE_EPSG,
)
from ..models import GeoPoint, Route

LOGGER = logging.getLogger(__name__)

WGS84_EPSG = 4326


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Inclusive longitude/latitude window of the region of interest."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self) -> None:
        if self.min_lon > self.max_lon or self.min_lat > self.max_lat:
            raise ValueError("Bounding box minimum exceeds maximum")

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.min_lon <= point.lon <= self.max_lon
            and self.min_lat <= point.lat <= self.max_lat
        )


DEFAULT_BOUNDING_BOX = BoundingBox(
    min_lon=BOUNDING_BOX_MIN_LON,
    min_lat=BOUNDING_BOX_MIN_LAT,
    max_lon=BOUNDING_BOX_MAX_LON,
    max_lat=BOUNDING_BOX_MAX_LAT,
)


@dataclass(slots=True)
class ProjectionStats:
    """Running count of accepted versus submitted points."""

    accepted: int = 0
    total: int = 0

    @property
    def rejected(self) -> int:
        return self.total - self.accepted


class CoordinateProjector:
    """Inverse-project planar source coordinates to longitude/latitude.

    Points landing outside ``bounds`` are silently dropped by :meth:`project`
    and :meth:`project_fragment`; the order of surviving points is kept.
    :meth:`to_geographic` converts without filtering.
    """

    def __init__(
        self,
        bounds: Optional[BoundingBox] = None,
        *,
        source_epsg: int = SOURCE_EPSG,
    ) -> None:
        self.bounds = bounds or DEFAULT_BOUNDING_BOX
        source_crs = CRS.from_epsg(source_epsg)
        target_crs = CRS.from_epsg(WGS84_EPSG)
        self._inverse = Transformer.from_crs(source_crs, target_crs, always_xy=True)
        self.stats = ProjectionStats()

    def project(self, point: Sequence[float]) -> Optional[GeoPoint]:
        """Return the geographic point, or None when outside the bounds."""

        projected, _ = self.project_fragment([point])
        return projected[0] if projected else None

    def project_fragment(
        self, points: Iterable[Sequence[float]]
    ) -> Tuple[Route, ProjectionStats]:
        """Convert a sequence of planar points, keeping only those in bounds."""

        array = _as_point_array(points)
        stats = ProjectionStats(total=len(array))
        if stats.total == 0:
            return (), stats
        lons, lats = self._inverse.transform(array[:, 0], array[:, 1])
        lons = np.asarray(lons, dtype=float)
        lats = np.asarray(lats, dtype=float)
        mask = (
            np.isfinite(lons)
            & np.isfinite(lats)
            & (lons >= self.bounds.min_lon)
            & (lons <= self.bounds.max_lon)
            & (lats >= self.bounds.min_lat)
            & (lats <= self.bounds.max_lat)
        )
        route = tuple(
            GeoPoint(float(lon), float(lat))
            for lon, lat in zip(lons[mask], lats[mask])
        )
        stats.accepted = len(route)
        self.stats.accepted += stats.accepted
        self.stats.total += stats.total
        LOGGER.debug(
            "Converted %d/%d coordinates inside bounds", stats.accepted, stats.total
        )
        return route, stats

    def to_geographic(self, point: Sequence[float]) -> GeoPoint:
        """Inverse-project a single planar point without bounds filtering."""

        lon, lat = self._inverse.transform(float(point[0]), float(point[1]))
        return GeoPoint(float(lon), float(lat))


def _as_point_array(points: Iterable[Sequence[float]]) -> NDArray[np.float64]:
    """Convert an arbitrary iterable of 2D coordinates into a float64 array."""

    array = np.asarray(list(points), dtype=float)
    if array.size == 0:
        return np.empty((0, 2), dtype=float)
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError("Expected a sequence of 2D coordinates")
    return array

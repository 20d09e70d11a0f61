"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable route geometry factories so
the stage tests do not rebuild the same coordinates over and over.
"""
from __future__ import annotations

import os
import sys
from typing import Iterable, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from route_extractor.geometry.projection import BoundingBox, CoordinateProjector
from route_extractor.models import (
    GeoPoint,
    PathFragment,
    ProjectedPoint,
    ReferencePoint,
    ReferenceRole,
)

# Roughly 47.4N; one projected unit is about 0.68 m on the ground here.
FRANCE_Y = 6_000_000.0

WORLD_BOUNDS = BoundingBox(min_lon=-180.0, min_lat=-85.0, max_lon=180.0, max_lat=85.0)


# --- Factory helpers -------------------------------------------------
def make_line(
    count: int,
    *,
    start_x: float = 0.0,
    y: float = 0.0,
    step: float = 10.0,
) -> PathFragment:
    """Return a straight east-bound fragment of ``count`` points."""
    return tuple(ProjectedPoint(start_x + i * step, y) for i in range(count))


def make_reference(
    role: ReferenceRole,
    location: GeoPoint,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> ReferencePoint:
    return ReferencePoint(
        role=role,
        name=name or role.value.title(),
        location=location,
        description=description,
    )


def to_route(projector: CoordinateProjector, points: Iterable[tuple[float, float]]):
    return tuple(projector.to_geographic(pt) for pt in points)


# --- Fixtures --------------------------------------------------------
@pytest.fixture(scope="session")
def world_projector() -> CoordinateProjector:
    """Projector accepting the whole Web Mercator domain."""
    return CoordinateProjector(WORLD_BOUNDS)


@pytest.fixture(scope="session")
def france_projector() -> CoordinateProjector:
    """Projector using the configured (France) bounding box."""
    return CoordinateProjector()


@pytest.fixture
def france_route(france_projector: CoordinateProjector):
    """Six points 100 projected units apart along y = FRANCE_Y."""
    return to_route(france_projector, make_line(6, y=FRANCE_Y, step=100.0))

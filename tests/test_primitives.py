"""Tests for planar / great-circle distances and point projections."""

from __future__ import annotations

import math

import pytest

from route_extractor.geometry.primitives import (
    great_circle_distance_km,
    planar_distance,
    project_point_onto_polyline,
    project_point_onto_segment,
)
from route_extractor.models import GeoPoint


def test_planar_distance() -> None:
    assert planar_distance((0.0, 0.0), (3.0, 4.0)) == pytest.approx(5.0)
    assert planar_distance((1.0, 1.0), (1.0, 1.0)) == 0.0


def test_great_circle_one_degree_at_equator() -> None:
    d = great_circle_distance_km(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
    assert d == pytest.approx(111.31949, rel=1e-6)


def test_great_circle_is_symmetric_and_zero_on_identity() -> None:
    a = GeoPoint(2.3522, 48.8566)
    b = GeoPoint(5.3698, 43.2965)
    assert great_circle_distance_km(a, a) == 0.0
    assert great_circle_distance_km(a, b) == pytest.approx(
        great_circle_distance_km(b, a)
    )
    # Paris to Marseille is roughly 660 km as the crow flies.
    assert 640 < great_circle_distance_km(a, b) < 680


def test_great_circle_antipodes_do_not_fail() -> None:
    d = great_circle_distance_km(GeoPoint(0.0, 0.0), GeoPoint(180.0, 0.0))
    assert d == pytest.approx(math.pi * 6378.137, rel=1e-9)


@pytest.mark.parametrize(
    "point, expected_t, expected_point, expected_distance",
    [
        ((5.0, 5.0), 0.5, (5.0, 0.0), 5.0),
        ((-3.0, 4.0), 0.0, (0.0, 0.0), 5.0),
        ((13.0, -4.0), 1.0, (10.0, 0.0), 5.0),
    ],
)
def test_project_point_onto_segment(
    point, expected_t, expected_point, expected_distance
) -> None:
    proj = project_point_onto_segment(point, (0.0, 0.0), (10.0, 0.0))
    assert proj.t == pytest.approx(expected_t)
    assert proj.point == pytest.approx(expected_point)
    assert proj.distance == pytest.approx(expected_distance)


def test_degenerate_segment_projects_to_its_point() -> None:
    proj = project_point_onto_segment((3.0, 4.0), (0.0, 0.0), (0.0, 0.0))
    assert proj.t == 0.0
    assert tuple(proj.point) == (0.0, 0.0)
    assert proj.distance == pytest.approx(5.0)


def test_project_point_onto_polyline_picks_closest_segment() -> None:
    line = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (20.0, 10.0)]
    proj = project_point_onto_polyline((12.0, 6.0), line)
    assert proj.segment_index == 1
    assert proj.t == pytest.approx(0.6)
    assert proj.point == pytest.approx((10.0, 6.0))
    assert proj.distance == pytest.approx(2.0)


def test_polyline_ties_keep_earliest_segment() -> None:
    # (10, 0) is shared by segments 0 and 1: both give distance 5.
    line = [(0.0, 0.0), (10.0, 0.0), (20.0, 0.0)]
    proj = project_point_onto_polyline((10.0, 5.0), line)
    assert proj.segment_index == 0
    assert proj.t == pytest.approx(1.0)


def test_single_point_polyline() -> None:
    proj = project_point_onto_polyline((3.0, 4.0), [(0.0, 0.0)])
    assert proj.segment_index == 0
    assert proj.t == 0.0
    assert proj.distance == pytest.approx(5.0)


def test_empty_polyline_raises() -> None:
    with pytest.raises(ValueError):
        project_point_onto_polyline((0.0, 0.0), [])

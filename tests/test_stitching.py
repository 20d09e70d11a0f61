"""Tests for fragment selection, connection detection and joining."""

from __future__ import annotations

import logging

import pytest

from conftest import WORLD_BOUNDS, make_line, make_reference
from route_extractor.errors import RouteInputError
from route_extractor.geometry.projection import CoordinateProjector
from route_extractor.geometry.stitching import (
    find_connectable_pairs,
    find_connection,
    join_fragments,
    select_best_pair,
    significant_fragments,
    stitch_fragments,
    stitch_route,
)
from route_extractor.models import (
    Connection,
    ConnectionType,
    GeoPoint,
    ProjectedPoint,
    ReferenceRole,
)

P = ProjectedPoint


def _fragments():
    a = make_line(150)  # x 0..1490
    b = make_line(120, start_x=1495.0)  # starts 5 units after A ends
    c = make_line(200, y=100_000.0)  # far away, longest
    return a, b, c


def test_significant_fragments_filters_and_sorts() -> None:
    a, b, c = _fragments()
    tiny = make_line(100)
    result = significant_fragments([a, tiny, b, c], min_points=100)
    assert result == [c, a, b]


@pytest.mark.parametrize(
    "first, second, kind",
    [
        ((P(0, 0), P(10, 0)), (P(0, 1), P(-10, 0)), ConnectionType.START_START),
        ((P(0, 0), P(10, 0)), (P(-10, 0), P(0, 2)), ConnectionType.START_END),
        ((P(0, 0), P(10, 0)), (P(11, 0), P(20, 0)), ConnectionType.END_START),
        ((P(0, 0), P(10, 0)), (P(20, 0), P(10, 3)), ConnectionType.END_END),
    ],
)
def test_find_connection_kinds(first, second, kind) -> None:
    connection = find_connection(first, second, 10.0)
    assert connection is not None
    assert connection.kind is kind


def test_find_connection_respects_threshold() -> None:
    first = (P(0, 0), P(10, 0))
    assert find_connection(first, (P(20, 0), P(30, 0)), 10.0) is not None
    assert find_connection(first, (P(20.5, 0), P(30, 0)), 10.0) is None


def test_find_connection_prefers_closest_endpoints() -> None:
    # end-start gap 8, end-end gap 2: the closer one wins.
    first = (P(0, 0), P(100, 0))
    second = (P(108, 0), P(102, 0))
    connection = find_connection(first, second, 10.0)
    assert connection is not None
    assert connection.kind is ConnectionType.END_END
    assert connection.distance == pytest.approx(2.0)


def test_join_fragments_all_kinds() -> None:
    first = (P(0, 0), P(1, 0), P(2, 0))
    second = (P(2, 0), P(3, 0), P(4, 0))
    joined = join_fragments(first, second, Connection(ConnectionType.END_START, 0.0))
    assert joined == (P(0, 0), P(1, 0), P(2, 0), P(3, 0), P(4, 0))

    rev_second = tuple(reversed(second))
    joined = join_fragments(first, rev_second, Connection(ConnectionType.END_END, 0.0))
    assert joined == (P(0, 0), P(1, 0), P(2, 0), P(3, 0), P(4, 0))

    joined = join_fragments(second, first, Connection(ConnectionType.START_END, 0.0))
    assert joined == (P(0, 0), P(1, 0), P(2, 0), P(3, 0), P(4, 0))

    joined = join_fragments(
        second, tuple(reversed(first)), Connection(ConnectionType.START_START, 0.0)
    )
    assert joined == (P(4, 0), P(3, 0), P(2, 0), P(1, 0), P(0, 0))


def test_stitch_joins_connectable_pair() -> None:
    a, b, c = _fragments()
    joined = stitch_fragments([a, b, c], min_points=100, max_distance=10.0)
    assert len(joined) == 269
    assert joined[0] == a[0]
    assert joined[-1] == b[-1]
    assert b[0] not in joined


def test_stitch_prefers_longest_pair() -> None:
    a, b, c = _fragments()
    d = tuple(P(-i * 10.0, 0.0) for i in range(300))  # shares A's start
    pairs = find_connectable_pairs([a, b, c, d], min_points=100, max_distance=10.0)
    assert len(pairs) == 2
    best = select_best_pair(pairs)
    assert best is not None
    assert best.total_length == 450
    joined = stitch_fragments([a, b, c, d], min_points=100, max_distance=10.0)
    assert len(joined) == 449


def test_stitch_falls_back_to_longest(caplog) -> None:
    a, _, c = _fragments()
    short = make_line(50, start_x=1495.0)
    with caplog.at_level(logging.INFO):
        joined = stitch_fragments([a, short, c], min_points=100, max_distance=10.0)
    assert joined == c
    assert "No connectable fragments" in caplog.text


def test_stitch_empty_raises() -> None:
    with pytest.raises(RouteInputError):
        stitch_fragments([])


def test_select_best_pair_empty() -> None:
    assert select_best_pair([]) is None


def test_stitch_route_projects_and_orients() -> None:
    projector = CoordinateProjector(WORLD_BOUNDS)
    first = (P(0, 0), P(1, 0), P(2, 0))
    second = (P(2, 0), P(3, 0), P(4, 0))
    # Finish near the origin, so the joined route is reversed.
    finish = make_reference(ReferenceRole.FINISH, GeoPoint(0.0, 0.0))
    stitched = stitch_route(
        [first, second], finish, projector, min_points=0, max_distance=10.0
    )
    assert len(stitched.route) == 5
    assert stitched.connection is not None
    assert stitched.connection.kind is ConnectionType.END_START
    assert stitched.stats.accepted == 5
    assert stitched.route[-1].lon == pytest.approx(0.0, abs=1e-12)
    assert stitched.route[0].lon > stitched.route[-1].lon


def test_stitch_route_reports_fallback() -> None:
    projector = CoordinateProjector(WORLD_BOUNDS)
    stitched = stitch_route(
        [make_line(3), make_line(5, y=1000.0)],
        None,
        projector,
        min_points=0,
        max_distance=10.0,
    )
    assert stitched.connection is None
    assert len(stitched.route) == 5

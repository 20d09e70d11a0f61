"""Tests for orienting routes towards the official finish."""

from __future__ import annotations

import logging

from conftest import make_reference
from route_extractor.geometry.direction import normalize_direction
from route_extractor.models import GeoPoint, ReferenceRole

ROUTE = (GeoPoint(2.0, 45.0), GeoPoint(2.1, 45.0), GeoPoint(2.2, 45.0))


def test_reverses_when_start_nearer_finish() -> None:
    finish = make_reference(ReferenceRole.FINISH, GeoPoint(1.99, 45.0))
    result = normalize_direction(ROUTE, finish)
    assert result == tuple(reversed(ROUTE))


def test_keeps_route_when_end_nearer_finish() -> None:
    finish = make_reference(ReferenceRole.FINISH, GeoPoint(2.21, 45.0))
    result = normalize_direction(ROUTE, finish)
    assert result is ROUTE


def test_is_idempotent() -> None:
    finish = make_reference(ReferenceRole.FINISH, GeoPoint(1.99, 45.0))
    once = normalize_direction(ROUTE, finish)
    assert normalize_direction(once, finish) == once


def test_missing_finish_keeps_direction(caplog) -> None:
    with caplog.at_level(logging.INFO):
        result = normalize_direction(ROUTE, None)
    assert result is ROUTE
    assert "No finish reference" in caplog.text


def test_short_routes_untouched() -> None:
    finish = make_reference(ReferenceRole.FINISH, GeoPoint(0.0, 0.0))
    single = (GeoPoint(2.0, 45.0),)
    assert normalize_direction(single, finish) is single
    assert normalize_direction((), finish) == ()

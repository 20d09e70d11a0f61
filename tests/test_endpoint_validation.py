"""Tests for the advisory endpoint report."""

from __future__ import annotations

import logging
import math

import pytest

from conftest import make_reference
from route_extractor import config
from route_extractor.geometry.validation import validate_endpoints
from route_extractor.models import EndpointReport, GeoPoint, ReferenceRole

START = GeoPoint(2.0, 45.0)
LAST = GeoPoint(2.01, 45.0)
# 50 m due north of LAST on the configured sphere.
FINISH_50M = GeoPoint(2.01, 45.0 + math.degrees(0.05 / 6378.137))

ROUTE = (START, GeoPoint(2.005, 45.0), LAST)


def test_warning_for_end_only(caplog) -> None:
    start = make_reference(ReferenceRole.START, START, name="Lille")
    finish = make_reference(ReferenceRole.FINISH, FINISH_50M, name="Roubaix")
    with caplog.at_level(logging.INFO):
        report = validate_endpoints(ROUTE, start, finish, route_name="Stage 1")

    assert report.available
    assert report.start_distance_km == pytest.approx(0.0, abs=1e-9)
    assert report.end_distance_km == pytest.approx(0.05, rel=1e-6)
    assert report.end_distance_m == pytest.approx(50.0, rel=1e-6)
    assert len(report.warnings) == 1
    assert "official finish Roubaix" in report.warnings[0]
    assert any(
        rec.levelno == logging.WARNING and "Stage 1" in rec.getMessage()
        for rec in caplog.records
    )


def test_no_warning_within_threshold() -> None:
    start = make_reference(ReferenceRole.START, START)
    finish = make_reference(ReferenceRole.FINISH, LAST)
    report = validate_endpoints(ROUTE, start, finish)
    assert report.warnings == []
    assert report.end_distance_m == pytest.approx(0.0, abs=1e-6)


def test_custom_threshold() -> None:
    start = make_reference(ReferenceRole.START, START)
    finish = make_reference(ReferenceRole.FINISH, FINISH_50M)
    report = validate_endpoints(ROUTE, start, finish, threshold_m=100.0)
    assert report.warnings == []
    assert report.threshold_m == 100.0


def test_route_is_not_modified() -> None:
    start = make_reference(ReferenceRole.START, GeoPoint(3.0, 45.0))
    finish = make_reference(ReferenceRole.FINISH, GeoPoint(3.0, 46.0))
    route = ROUTE
    report = validate_endpoints(route, start, finish)
    assert len(report.warnings) == 2
    assert route == (START, GeoPoint(2.005, 45.0), LAST)


@pytest.mark.parametrize("missing", ["start", "finish", "route"])
def test_unavailable_without_inputs(missing) -> None:
    start = make_reference(ReferenceRole.START, START)
    finish = make_reference(ReferenceRole.FINISH, LAST)
    route = ROUTE
    if missing == "start":
        start = None
    elif missing == "finish":
        finish = None
    else:
        route = ()
    report = validate_endpoints(route, start, finish)
    assert not report.available
    assert report.start_distance_m is None
    assert report.end_distance_m is None
    assert report.warnings == []


def test_default_threshold_comes_from_config() -> None:
    assert EndpointReport().threshold_m == config.ENDPOINT_WARNING_THRESHOLD_M
    start = make_reference(ReferenceRole.START, START)
    report = validate_endpoints(ROUTE, start, None)
    assert report.threshold_m == config.ENDPOINT_WARNING_THRESHOLD_M

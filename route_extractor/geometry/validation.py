"""Sanity check of the final route ends against the official waypoints."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import ENDPOINT_WARNING_THRESHOLD_M
from ..models import EndpointReport, ReferencePoint, Route
from .primitives import great_circle_distance_km

LOGGER = logging.getLogger(__name__)


def validate_endpoints(
    route: Route,
    start: Optional[ReferencePoint],
    finish: Optional[ReferencePoint],
    *,
    threshold_m: float = ENDPOINT_WARNING_THRESHOLD_M,
    route_name: str = "route",
) -> EndpointReport:
    """Measure how far the route ends are from the start and finish references.

    The report is advisory only: distances above ``threshold_m`` are recorded
    as warnings and logged, the route itself is never touched. When either
    reference (or the route) is missing the distances are left unset.
    """

    report = EndpointReport(threshold_m=threshold_m)
    if not route or start is None or finish is None:
        LOGGER.info("No waypoints available to validate %s endpoints", route_name)
        return report

    report.start_distance_km = great_circle_distance_km(route[0], start.location)
    report.end_distance_km = great_circle_distance_km(route[-1], finish.location)
    LOGGER.info(
        "Endpoint check for %s: start %.0fm, end %.0fm",
        route_name,
        report.start_distance_m,
        report.end_distance_m,
    )

    threshold_km = threshold_m / 1000.0
    if report.start_distance_km > threshold_km:
        report.warnings.append(
            f"Route start is {report.start_distance_m:.0f}m from official start "
            f"{start.name} (>{threshold_m:.0f}m)"
        )
    if report.end_distance_km > threshold_km:
        report.warnings.append(
            f"Route end is {report.end_distance_m:.0f}m from official finish "
            f"{finish.name} (>{threshold_m:.0f}m)"
        )
    for message in report.warnings:
        LOGGER.warning("%s: %s", route_name, message)
    return report

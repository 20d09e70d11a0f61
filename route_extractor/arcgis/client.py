"""Stage route and waypoint queries against the race feature service.

Public surface:
- StageRouteClient.fetch_route_features(stage=None)
- StageRouteClient.list_stages()
- StageRouteClient.fetch_waypoints(stage)
- StageRouteClient.source_for_feature(feature)
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional

import requests
from cachetools import TTLCache

from ..config import (
    REQUEST_TIMEOUT,
    ROUTE_LAYER_URL,
    ROUTE_QUERY_PARAMS,
    WAYPOINT_CACHE_SIZE,
    WAYPOINT_CACHE_TTL_SECONDS,
    WAYPOINT_LAYER_URL,
)
from ..errors import RouteNotFoundError, RouteSourceError
from ..models import ReferencePoint, ReferenceRole, RouteSource
from .parsing import feature_to_source, parse_waypoints, stage_number
from .response_handling import decode_payload
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

Feature = Dict[str, Any]


class StageRouteClient:
    """Fetch route geometry and official waypoints for race stages."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        route_url: str = ROUTE_LAYER_URL,
        waypoint_url: str = WAYPOINT_LAYER_URL,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._session = session or get_default_session()
        self.route_url = route_url
        self.waypoint_url = waypoint_url
        self.timeout = timeout
        self._waypoint_cache: TTLCache[int, List[ReferencePoint]] = TTLCache(
            maxsize=max(1, WAYPOINT_CACHE_SIZE), ttl=WAYPOINT_CACHE_TTL_SECONDS
        )
        self._waypoint_cache_lock = RLock()

    def _get(self, url: str, params: Mapping[str, Any], context: str) -> Feature:
        LOGGER.debug("GET %s params=%s", url, params)
        try:
            response = self._session.get(url, params=dict(params), timeout=self.timeout)
        except requests.RequestException as exc:
            raise RouteSourceError(f"{context} network error: {exc}") from exc
        return decode_payload(response, context)

    def fetch_route_features(
        self, stage: Optional[int] = None, *, return_geometry: bool = True
    ) -> List[Feature]:
        """Return route features, optionally restricted to a single stage.

        Raises:
            RouteSourceError: If the service fails or returns no feature list.
            RouteNotFoundError: If ``stage`` is given and no feature matches.
        """

        params = dict(ROUTE_QUERY_PARAMS)
        params["where"] = f"Etape={stage}" if stage else "1=1"
        if not return_geometry:
            params["returnGeometry"] = "false"
        context = f"Route query (stage {stage})" if stage else "Route query"
        data = self._get(self.route_url, params, context)
        features = data.get("features")
        if not isinstance(features, list):
            raise RouteSourceError(f"{context}: no features in response")

        if stage and len(features) > 1:
            features = [f for f in features if stage_number(f) == int(stage)]
        if stage and not features:
            raise RouteNotFoundError(f"No features found for stage {stage}")
        LOGGER.info("Found %d route feature(s)", len(features))
        return features

    def list_stages(self) -> List[Dict[str, Any]]:
        """Return stage properties (no geometry) sorted by stage number."""

        features = self.fetch_route_features(return_geometry=False)
        features.sort(key=lambda f: stage_number(f) or 0)
        return [dict(f.get("properties") or {}) for f in features]

    def fetch_waypoints(self, stage: int) -> List[ReferencePoint]:
        """Return the official waypoints of ``stage``.

        Failures are logged and yield an empty list so the route can still be
        processed without references.
        """

        with self._waypoint_cache_lock:
            cached = self._waypoint_cache.get(stage)
        if cached is not None:
            return list(cached)

        params = {
            "f": "geojson",
            "where": f"Etape='{stage}'",
            "outFields": "*",
            "returnGeometry": "true",
        }
        try:
            data = self._get(self.waypoint_url, params, f"Waypoint query (stage {stage})")
        except RouteSourceError as exc:
            LOGGER.error("Failed to fetch waypoints for stage %s: %s", stage, exc)
            return []

        references = parse_waypoints(data.get("features") or [])
        _log_waypoint_summary(stage, references)
        with self._waypoint_cache_lock:
            self._waypoint_cache[stage] = references
        return list(references)

    def source_for_feature(self, feature: Mapping[str, Any]) -> RouteSource:
        """Build a :class:`RouteSource` for ``feature`` with its waypoints."""

        stage = stage_number(feature)
        references = self.fetch_waypoints(stage) if stage is not None else []
        return feature_to_source(feature, references)


def _log_waypoint_summary(stage: int, references: List[ReferencePoint]) -> None:
    def _name(role: ReferenceRole) -> str:
        match = next((ref for ref in references if ref.role == role), None)
        return match.name if match else "not found"

    LOGGER.info(
        "Stage %s waypoints: %d total, start=%s, finish=%s, climbs=%d, sprints=%d",
        stage,
        len(references),
        _name(ReferenceRole.START),
        _name(ReferenceRole.FINISH),
        sum(1 for ref in references if ref.role == ReferenceRole.CLIMB),
        sum(1 for ref in references if ref.role == ReferenceRole.SPRINT),
    )

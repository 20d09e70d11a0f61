"""Feature service client for stage routes and official waypoints."""

from .client import StageRouteClient
from .parsing import classify_label, feature_to_source, parse_waypoints, stage_number
from .session import create_default_session, get_default_session

__all__ = [
    "StageRouteClient",
    "classify_label",
    "create_default_session",
    "feature_to_source",
    "get_default_session",
    "parse_waypoints",
    "stage_number",
]

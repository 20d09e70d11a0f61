"""Central configuration for the stage route extractor.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Most values can be overridden through environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Data source (ArcGIS feature service)
# ---------------------------------------------------------------------------
_SERVICE_ROOT = os.getenv(
    "ROUTE_SERVICE_ROOT",
    "https://services9.arcgis.com/euYKeqX7FwwgASW5/arcgis/rest/services/TDF25/FeatureServer",
)
# Layer 2 holds the stage polylines, layer 0 the official waypoints.
ROUTE_LAYER_URL = f"{_SERVICE_ROOT}/2/query"
WAYPOINT_LAYER_URL = f"{_SERVICE_ROOT}/0/query"

# Tolerance used by the service when generalising geometry for tiles.
_QUERY_TOLERANCE = 0.07464553541191635

# Base query for the route layer. Coordinates come back in Web Mercator
# (ESRI wkid 102100). The envelope covers the whole race region.
ROUTE_QUERY_PARAMS = {
    "f": "geojson",
    "returnGeometry": "true",
    "spatialRel": "esriSpatialRelIntersects",
    "maxAllowableOffset": str(_QUERY_TOLERANCE),
    "outFields": "*",
    "outSR": "102100",
    "resultType": "tile",
    "geometryType": "esriGeometryEnvelope",
    "inSR": "102100",
    "geometry": (
        '{"xmin":-560000,"ymin":5100000,"xmax":1050000,"ymax":6700000,'
        '"spatialReference":{"wkid":102100}}'
    ),
    "quantizationParameters": (
        '{"mode":"view","originPosition":"upperLeft",'
        f'"tolerance":{_QUERY_TOLERANCE},'
        '"extent":{"xmin":-3.0149499989999526,"ymin":42.74294000000003,'
        '"xmax":6.7878200000000675,"ymax":51.03431000000006,'
        '"spatialReference":{"wkid":4326,"latestWkid":4326,'
        '"vcsWkid":5773,"latestVcsWkid":5773}}}'
    ),
}

# The service rejects requests that do not look like they come from the
# official site.
REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Referer": "https://www.letour.fr/",
    "Origin": "https://www.letour.fr",
}

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)

# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Adapter-level retries for network failures and 5xx responses.
HTTP_MAX_RETRIES = _env_int("HTTP_MAX_RETRIES", 3)

# Waypoints are fetched once per stage and kept for this long.
WAYPOINT_CACHE_SIZE = _env_int("WAYPOINT_CACHE_SIZE", 32)
WAYPOINT_CACHE_TTL_SECONDS = _env_int("WAYPOINT_CACHE_TTL_SECONDS", 3600)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------
# EPSG code of the source coordinates (102100 is ESRI's alias for 3857).
SOURCE_EPSG = _env_int("SOURCE_EPSG", 3857)

# Geographic region of interest. Projected points falling outside are dropped
# (inset maps and legend geometry live far away from the course).
BOUNDING_BOX_MIN_LON = _env_float("BOUNDING_BOX_MIN_LON", -5.0)
BOUNDING_BOX_MAX_LON = _env_float("BOUNDING_BOX_MAX_LON", 10.0)
BOUNDING_BOX_MIN_LAT = _env_float("BOUNDING_BOX_MIN_LAT", 41.0)
BOUNDING_BOX_MAX_LAT = _env_float("BOUNDING_BOX_MAX_LAT", 52.0)

# Fragments with this many points or fewer are treated as annotation noise.
MIN_SIGNIFICANT_FRAGMENT_POINTS = _env_int("MIN_SIGNIFICANT_FRAGMENT_POINTS", 100)

# Maximum endpoint gap (projected units) for two fragments to be joined.
FRAGMENT_JOIN_MAX_DISTANCE = _env_float("FRAGMENT_JOIN_MAX_DISTANCE", 10.0)

# A trackpoint this close (metres) to the official start counts as the start.
ROLLING_START_TOLERANCE_M = _env_float("ROLLING_START_TOLERANCE_M", 3.0)

# Endpoint distances above this (metres) are reported as warnings.
ENDPOINT_WARNING_THRESHOLD_M = _env_float("ENDPOINT_WARNING_THRESHOLD_M", 10.0)

# Keep the neutralised rollout before the official start when True.
KEEP_ROLLING_START = _env_bool("KEEP_ROLLING_START", False)

# WGS84 equatorial radius used for great-circle distances.
EARTH_RADIUS_M = 6378137.0


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
# Directory (absolute or relative) for GPX files. Empty means the current one.
OUTPUT_DIR = os.getenv("ROUTE_OUTPUT_DIR", "")

GPX_FILE_PREFIX = os.getenv("GPX_FILE_PREFIX", "TDF2025")
GPX_CREATOR = "route_extractor"
GPX_TITLE_PREFIX = os.getenv("GPX_TITLE_PREFIX", "Tour de France 2025")

# Six decimals is roughly 0.1 m, enough to avoid visible steps on a map.
GPX_COORDINATE_DECIMALS = 6


# ---------------------------------------------------------------------------
# CLI / batch
# ---------------------------------------------------------------------------
# Routes processed in parallel when extracting every stage.
MAX_WORKERS = _env_int("MAX_WORKERS", 4)

STAGE_MIN = 1
STAGE_MAX = 21

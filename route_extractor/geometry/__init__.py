"""Route geometry processing: projection, stitching, orientation and trimming."""

from .direction import normalize_direction
from .primitives import (
    PolylineProjection,
    SegmentProjection,
    great_circle_distance_km,
    planar_distance,
    project_point_onto_polyline,
    project_point_onto_segment,
)
from .projection import BoundingBox, CoordinateProjector, ProjectionStats
from .rolling_start import insertion_index, trim_rolling_start
from .stitching import (
    FragmentPair,
    StitchedRoute,
    find_connectable_pairs,
    find_connection,
    join_fragments,
    select_best_pair,
    significant_fragments,
    stitch_fragments,
    stitch_route,
)
from .validation import validate_endpoints

__all__ = [
    "BoundingBox",
    "CoordinateProjector",
    "FragmentPair",
    "PolylineProjection",
    "ProjectionStats",
    "SegmentProjection",
    "StitchedRoute",
    "find_connectable_pairs",
    "find_connection",
    "great_circle_distance_km",
    "insertion_index",
    "join_fragments",
    "normalize_direction",
    "planar_distance",
    "project_point_onto_polyline",
    "project_point_onto_segment",
    "select_best_pair",
    "significant_fragments",
    "stitch_fragments",
    "stitch_route",
    "trim_rolling_start",
    "validate_endpoints",
]

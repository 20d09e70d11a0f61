"""Stage route extractor package."""

from .errors import RouteExtractorError, RouteInputError, RouteSourceError
from .models import GeoPoint, ProjectedPoint, ReferencePoint, ReferenceRole, RouteSource
from .pipeline import PipelineOptions, build_route

__all__ = [
    "build_route",
    "GeoPoint",
    "PipelineOptions",
    "ProjectedPoint",
    "ReferencePoint",
    "ReferenceRole",
    "RouteExtractorError",
    "RouteInputError",
    "RouteSource",
    "RouteSourceError",
]

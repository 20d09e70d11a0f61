"""Convert GeoJSON features from the feature service into route models."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..errors import RouteInputError
from ..models import (
    GeoPoint,
    GeometryKind,
    PathFragment,
    ProjectedPoint,
    ReferencePoint,
    ReferenceRole,
    RouteSource,
)

LOGGER = logging.getLogger(__name__)

START_LABEL = "Départ réel"
FINISH_LABEL = "Arrivée"
CLIMB_MARKER = "Catégorie"
SPRINT_LABEL = "Sprint"


def classify_label(label: Optional[str]) -> ReferenceRole:
    """Map a waypoint ``Snippet`` label to its reference role."""

    if not label:
        return ReferenceRole.OTHER
    if label == START_LABEL:
        return ReferenceRole.START
    if label == FINISH_LABEL or label.startswith(f"{FINISH_LABEL}/"):
        return ReferenceRole.FINISH
    if CLIMB_MARKER in label:
        return ReferenceRole.CLIMB
    if label == SPRINT_LABEL:
        return ReferenceRole.SPRINT
    return ReferenceRole.OTHER


def parse_waypoints(features: Iterable[Mapping[str, Any]]) -> List[ReferencePoint]:
    """Build reference points from waypoint features.

    A later start or finish replaces an earlier one so that at most one of
    each is returned. Features without point geometry are skipped.
    """

    references: List[ReferencePoint] = []
    for feature in features:
        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates")
        if not isinstance(coords, Sequence) or len(coords) < 2:
            LOGGER.debug("Skipping waypoint without coordinates: %s", props.get("Name"))
            continue
        label = props.get("Snippet")
        role = classify_label(label)
        reference = ReferencePoint(
            role=role,
            name=str(props.get("Name") or label or role.value),
            location=GeoPoint(float(coords[0]), float(coords[1])),
            description=props.get("Texte") or None,
            label=label,
            distance_km=_as_float(props.get("Distance")),
        )
        if role in (ReferenceRole.START, ReferenceRole.FINISH):
            replaced = [ref for ref in references if ref.role == role]
            if replaced:
                LOGGER.debug(
                    "Replacing %s waypoint %s with %s",
                    role.value,
                    replaced[0].name,
                    reference.name,
                )
                references = [ref for ref in references if ref.role != role]
        references.append(reference)
    return references


def feature_to_source(
    feature: Mapping[str, Any],
    references: Optional[List[ReferencePoint]] = None,
) -> RouteSource:
    """Build a :class:`RouteSource` from a route feature.

    Raises:
        RouteInputError: If the feature has no geometry or an unsupported
            geometry type.
    """

    props: Dict[str, Any] = dict(feature.get("properties") or {})
    stage = props.get("Etape")
    name = str(props.get("Name") or f"Stage {stage if stage is not None else 'Unknown'}")
    geometry = feature.get("geometry") or {}
    coordinates = geometry.get("coordinates")
    if not coordinates:
        raise RouteInputError(f"No geometry data found for {name}")

    kind = GeometryKind.from_geojson_type(geometry.get("type"))
    if kind == GeometryKind.SINGLE:
        fragments = [_to_fragment(coordinates)]
        LOGGER.info("%s: LineString with %d coordinates", name, len(fragments[0]))
    else:
        fragments = [_to_fragment(part) for part in coordinates if part]
        LOGGER.info("%s: MultiLineString with %d parts", name, len(fragments))

    return RouteSource(
        route_id=str(stage if stage is not None else name),
        name=name,
        geometry_kind=kind,
        fragments=fragments,
        references=list(references or []),
        properties=props,
    )


def stage_number(feature: Mapping[str, Any]) -> Optional[int]:
    """Return the ``Etape`` property as an int, or None when absent."""

    value = (feature.get("properties") or {}).get("Etape")
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_fragment(points: Sequence[Sequence[float]]) -> PathFragment:
    try:
        return tuple(ProjectedPoint(float(pt[0]), float(pt[1])) for pt in points)
    except (TypeError, ValueError, IndexError) as exc:
        raise RouteInputError(f"Malformed coordinate sequence: {exc}") from exc


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", "."))
    except ValueError:
        return None

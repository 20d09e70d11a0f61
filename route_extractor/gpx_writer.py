"""GPX export for processed stage routes.

Writes a GPX 1.1 document holding the route as a single track segment plus
the official waypoints (start, climbs, sprints, finish), which can be
imported into GPS devices or mapping apps.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
import re
from typing import Any, List, Mapping, Optional, Sequence, Union

from .config import (
    GPX_COORDINATE_DECIMALS,
    GPX_CREATOR,
    GPX_FILE_PREFIX,
    GPX_TITLE_PREFIX,
    OUTPUT_DIR,
)
from .models import GeoPoint, ReferencePoint, ReferenceRole, Route, RouteResult

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Written in this order; "other" waypoints are not exported.
_WAYPOINT_ORDER = (
    ReferenceRole.START,
    ReferenceRole.CLIMB,
    ReferenceRole.SPRINT,
    ReferenceRole.FINISH,
)


def route_to_gpx(
    route: Route,
    name: str,
    properties: Optional[Mapping[str, Any]] = None,
    references: Sequence[ReferencePoint] = (),
) -> str:
    """Convert a route and its reference points to a GPX document.

    Args:
        route: Final ordered route points.
        name: Route name used for metadata and track.
        properties: Route feature properties (``Distance``, ``Type``,
            ``Date``, ``Heure``, ``Cols``) used for descriptions.
        references: Official waypoints. When empty, climbs listed in the
            ``Cols`` property are spread along the route instead.

    Returns:
        GPX XML string.
    """

    props = dict(properties or {})
    distance = props.get("Distance")

    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<gpx version="1.1" creator="{GPX_CREATOR}"',
        '     xmlns="http://www.topografix.com/GPX/1/1">',
        "  <metadata>",
        f"    <name>{_escape_xml(name)}</name>",
        f"    <desc>{_escape_xml(f'{GPX_TITLE_PREFIX} - {name}')}</desc>",
    ]
    if distance:
        keywords = f"{GPX_TITLE_PREFIX}, {name}, {distance}km"
        gpx_lines.append(f"    <keywords>{_escape_xml(keywords)}</keywords>")
    gpx_lines.extend(
        [
            "  </metadata>",
            "  <trk>",
            f"    <name>{_escape_xml(name)}</name>",
        ]
    )

    track_desc = _track_description(props)
    if track_desc:
        gpx_lines.append(f"    <desc>{_escape_xml(track_desc)}</desc>")

    gpx_lines.append("    <trkseg>")
    for point in route:
        gpx_lines.append(f'      <trkpt {_lat_lon_attrs(point)}></trkpt>')
    gpx_lines.extend(["    </trkseg>", "  </trk>"])

    if references:
        for role in _WAYPOINT_ORDER:
            for ref in references:
                if ref.role == role:
                    gpx_lines.extend(_waypoint_lines(ref))
    else:
        for ref in fallback_climb_waypoints(route, props.get("Cols")):
            gpx_lines.extend(_waypoint_lines(ref))

    gpx_lines.append("</gpx>")
    return "\n".join(gpx_lines)


def fallback_climb_waypoints(
    route: Route, climbs_text: Optional[str]
) -> List[ReferencePoint]:
    """Spread the climbs from a newline-separated list evenly along the route."""

    if not climbs_text or not route:
        return []
    climbs = [line.strip() for line in str(climbs_text).splitlines() if line.strip()]
    waypoints: List[ReferencePoint] = []
    for index, climb in enumerate(climbs):
        point_index = math.floor((index + 1) * len(route) / (len(climbs) + 1))
        if point_index >= len(route):
            continue
        climb_name = climb.split(" - ")[0] or f"Climb {index + 1}"
        waypoints.append(
            ReferencePoint(
                role=ReferenceRole.CLIMB,
                name=climb_name,
                location=route[point_index],
                description=climb,
            )
        )
    return waypoints


def build_filename(
    name: str, stage: Any, output_dir: Optional[PathLike] = None
) -> Path:
    """Return ``<prefix>_Stage<NN>_<SafeName>.gpx`` inside ``output_dir``."""

    safe_name = re.sub(r"[^a-zA-Z0-9\s]", "", name)
    safe_name = re.sub(r"\s+", "_", safe_name)
    filename = f"{GPX_FILE_PREFIX}_Stage{str(stage).zfill(2)}_{safe_name}.gpx"
    if output_dir:
        return Path(output_dir) / filename
    return Path(filename)


def save_gpx(content: str, path: PathLike) -> Path:
    """Write ``content`` to ``path`` (creating parent folders) and return it resolved."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(content)
    LOGGER.info("Saved %s", output_path)
    return output_path.resolve()


def write_route_gpx(result: RouteResult, output_dir: Optional[PathLike] = None) -> Path:
    """Serialise a processed route to GPX and save it under ``output_dir``."""

    source = result.source
    content = route_to_gpx(
        result.route, source.name, source.properties, result.references
    )
    stage = source.properties.get("Etape", source.route_id)
    path = build_filename(source.name, stage, output_dir or OUTPUT_DIR or None)
    return save_gpx(content, path)


def _track_description(props: Mapping[str, Any]) -> str:
    parts = []
    if props.get("Distance"):
        parts.append(f"Distance: {props['Distance']}km")
    if props.get("Type"):
        parts.append(f"Type: {props['Type']}")
    if props.get("Date"):
        parts.append(f"Date: {props['Date']}")
    if props.get("Heure"):
        parts.append(f"Start: {props['Heure']}")
    return " ".join(parts)


def _waypoint_lines(ref: ReferencePoint) -> List[str]:
    if ref.role == ReferenceRole.START:
        desc = f"Départ: {ref.description or ref.name}"
    elif ref.role == ReferenceRole.FINISH:
        desc = f"Arrivée: {ref.description or ref.name}"
    elif ref.role == ReferenceRole.SPRINT:
        desc = ref.description or "Sprint"
    else:
        desc = ref.description or ref.label or ref.name
    if ref.distance_km is not None and ref.role in (
        ReferenceRole.CLIMB,
        ReferenceRole.SPRINT,
    ):
        desc = f"{desc} (km {ref.distance_km:g})"
    return [
        f"  <wpt {_lat_lon_attrs(ref.location)}>",
        f"    <name>{_escape_xml(ref.name)}</name>",
        f"    <desc>{_escape_xml(desc)}</desc>",
        f"    <type>{ref.role.value}</type>",
        "  </wpt>",
    ]


def _lat_lon_attrs(point: GeoPoint) -> str:
    decimals = GPX_COORDINATE_DECIMALS
    return f'lat="{point.lat:.{decimals}f}" lon="{point.lon:.{decimals}f}"'


def _escape_xml(text: str) -> str:
    """Escape special XML characters."""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )

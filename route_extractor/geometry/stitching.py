"""Join disjoint path fragments into a single connected route.

Only the best pair of fragments is joined: the two longest pieces whose
endpoints meet within a small planar gap. When nothing connects, the longest
fragment is used on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence, Tuple

from ..config import FRAGMENT_JOIN_MAX_DISTANCE, MIN_SIGNIFICANT_FRAGMENT_POINTS
from ..errors import RouteInputError
from ..models import (
    Connection,
    ConnectionType,
    PathFragment,
    ReferencePoint,
    Route,
)
from .direction import normalize_direction
from .primitives import planar_distance
from .projection import CoordinateProjector, ProjectionStats

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FragmentPair:
    """Two fragments and the endpoint connection between them."""

    first: PathFragment
    second: PathFragment
    connection: Connection

    @property
    def total_length(self) -> int:
        return len(self.first) + len(self.second)


@dataclass(frozen=True, slots=True)
class StitchedRoute:
    """Geographic route built from fragments; ``connection`` is None on fallback."""

    route: Route
    stats: ProjectionStats
    connection: Optional[Connection]


def significant_fragments(
    fragments: Sequence[PathFragment],
    min_points: int = MIN_SIGNIFICANT_FRAGMENT_POINTS,
) -> List[PathFragment]:
    """Return fragments longer than ``min_points``, longest first."""

    significant = [fragment for fragment in fragments if len(fragment) > min_points]
    significant.sort(key=len, reverse=True)
    return significant


def find_connection(
    first: PathFragment,
    second: PathFragment,
    max_distance: float = FRAGMENT_JOIN_MAX_DISTANCE,
) -> Optional[Connection]:
    """Return the closest endpoint combination if it is within ``max_distance``."""

    if not first or not second:
        return None
    candidates = [
        Connection(ConnectionType.START_START, planar_distance(first[0], second[0])),
        Connection(ConnectionType.START_END, planar_distance(first[0], second[-1])),
        Connection(ConnectionType.END_START, planar_distance(first[-1], second[0])),
        Connection(ConnectionType.END_END, planar_distance(first[-1], second[-1])),
    ]
    best = min(candidates, key=lambda candidate: candidate.distance)
    if best.distance <= max_distance:
        return best
    return None


def find_connectable_pairs(
    fragments: Sequence[PathFragment],
    *,
    min_points: int = MIN_SIGNIFICANT_FRAGMENT_POINTS,
    max_distance: float = FRAGMENT_JOIN_MAX_DISTANCE,
) -> List[FragmentPair]:
    """Return every pair of significant fragments whose endpoints meet."""

    significant = significant_fragments(fragments, min_points)
    LOGGER.debug(
        "Analysing %d significant fragments (of %d) for connections",
        len(significant),
        len(fragments),
    )
    pairs: List[FragmentPair] = []
    for i, first in enumerate(significant):
        for second in significant[i + 1 :]:
            connection = find_connection(first, second, max_distance)
            if connection is not None:
                pairs.append(FragmentPair(first, second, connection))
    return pairs


def select_best_pair(pairs: Sequence[FragmentPair]) -> Optional[FragmentPair]:
    """Pick the pair covering the most points; the earliest pair wins ties."""

    best: Optional[FragmentPair] = None
    for pair in pairs:
        if best is None or pair.total_length > best.total_length:
            best = pair
    return best


def join_fragments(
    first: PathFragment, second: PathFragment, connection: Connection
) -> PathFragment:
    """Concatenate two fragments at their shared endpoint.

    The shared endpoint appears once; it is dropped from the piece appended
    second.
    """

    first = tuple(first)
    second = tuple(second)
    kind = connection.kind
    if kind is ConnectionType.START_START:
        return tuple(reversed(first)) + second[1:]
    if kind is ConnectionType.START_END:
        return second + first[1:]
    if kind is ConnectionType.END_START:
        return first + second[1:]
    if kind is ConnectionType.END_END:
        return first + tuple(reversed(second))[1:]
    raise ValueError(f"Unknown connection type: {kind}")


def stitch_fragments(
    fragments: Sequence[PathFragment],
    *,
    min_points: int = MIN_SIGNIFICANT_FRAGMENT_POINTS,
    max_distance: float = FRAGMENT_JOIN_MAX_DISTANCE,
) -> PathFragment:
    """Assemble the longest connected path from ``fragments`` in planar space.

    Raises:
        RouteInputError: If no fragments are supplied.
    """

    path, _ = _stitch(fragments, min_points=min_points, max_distance=max_distance)
    return path


def _stitch(
    fragments: Sequence[PathFragment],
    *,
    min_points: int,
    max_distance: float,
) -> Tuple[PathFragment, Optional[FragmentPair]]:
    if not fragments:
        raise RouteInputError("No path fragments to stitch")

    pair = select_best_pair(
        find_connectable_pairs(
            fragments, min_points=min_points, max_distance=max_distance
        )
    )
    if pair is None:
        longest = max(fragments, key=len)
        LOGGER.info(
            "No connectable fragments among %d; using longest (%d points)",
            len(fragments),
            len(longest),
        )
        return tuple(longest), None

    LOGGER.info(
        "Joining fragments of %d + %d points (%s, gap %.2f)",
        len(pair.first),
        len(pair.second),
        pair.connection.kind.value,
        pair.connection.distance,
    )
    joined = join_fragments(pair.first, pair.second, pair.connection)
    LOGGER.debug("Joined path has %d points", len(joined))
    return joined, pair


def stitch_route(
    fragments: Sequence[PathFragment],
    finish: Optional[ReferencePoint],
    projector: CoordinateProjector,
    *,
    min_points: int = MIN_SIGNIFICANT_FRAGMENT_POINTS,
    max_distance: float = FRAGMENT_JOIN_MAX_DISTANCE,
) -> StitchedRoute:
    """Stitch fragments, convert to geographic coordinates and orient to finish."""

    joined, pair = _stitch(fragments, min_points=min_points, max_distance=max_distance)
    route, stats = projector.project_fragment(joined)
    return StitchedRoute(
        route=normalize_direction(route, finish),
        stats=stats,
        connection=pair.connection if pair is not None else None,
    )

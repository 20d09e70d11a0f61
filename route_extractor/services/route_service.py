"""Route extraction service.

Runs the route pipeline for a batch of route features. Each route is
processed independently on a worker thread; a failure for one route is
logged and recorded on its outcome without affecting the others. Outcomes
are returned in input order.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..config import MAX_WORKERS
from ..errors import RouteExtractorError
from ..models import RouteResult, RouteSource
from ..pipeline import PipelineOptions, build_route

Feature = Mapping[str, Any]
SourceLoader = Callable[[Feature], RouteSource]
RouteBuilder = Callable[[RouteSource, Optional[PipelineOptions]], RouteResult]
RouteWriter = Callable[[RouteResult], Path]


@dataclass(slots=True)
class RouteOutcome:
    """Result (or failure) of processing one route feature."""

    route_id: str
    name: str
    result: Optional[RouteResult] = None
    output_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


@dataclass(slots=True)
class RouteServiceConfig:
    source_loader: SourceLoader
    builder: RouteBuilder = build_route
    writer: Optional[RouteWriter] = None
    options: PipelineOptions = field(default_factory=PipelineOptions)
    max_workers: int = MAX_WORKERS
    logger: logging.Logger | None = None


class RouteService:
    def __init__(self, config: RouteServiceConfig):
        if config.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.config = config
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def process(self, features: Sequence[Feature]) -> List[RouteOutcome]:
        if not features:
            return []

        outcomes: Dict[int, RouteOutcome] = {}
        workers = min(self.config.max_workers, len(features))
        self._log.info(
            "Processing %d route(s) with %d worker(s)", len(features), workers
        )
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_map = {
                executor.submit(self._process_one, feature): index
                for index, feature in enumerate(features)
            }
            for future in as_completed(future_map):
                index = future_map[future]
                try:
                    outcomes[index] = future.result()
                except Exception as exc:  # pragma: no cover
                    label = _feature_label(features[index])
                    self._log.error(
                        "Route %s failed: %s", label, exc, exc_info=True
                    )
                    outcomes[index] = RouteOutcome(label, label, error=str(exc))

        ordered = [outcomes[index] for index in range(len(features))]
        failed = [o for o in ordered if not o.ok]
        if failed:
            self._log.warning(
                "%d of %d route(s) failed: %s",
                len(failed),
                len(ordered),
                ", ".join(o.name for o in failed),
            )
        return ordered

    def _process_one(self, feature: Feature) -> RouteOutcome:
        label = _feature_label(feature)
        try:
            source = self.config.source_loader(feature)
            result = self.config.builder(source, self.config.options)
            output_path = (
                self.config.writer(result) if self.config.writer is not None else None
            )
        except RouteExtractorError as exc:
            self._log.error("Skipping route %s: %s", label, exc)
            return RouteOutcome(label, label, error=str(exc))
        except Exception as exc:
            self._log.error(
                "Route %s failed due to unexpected error: %s",
                label,
                exc,
                exc_info=True,
            )
            return RouteOutcome(label, label, error=str(exc))
        return RouteOutcome(
            route_id=source.route_id,
            name=source.name,
            result=result,
            output_path=output_path,
        )


def _feature_label(feature: Feature) -> str:
    props = feature.get("properties") or {}
    return str(props.get("Name") or props.get("Etape") or "unknown route")


__all__ = ["RouteOutcome", "RouteService", "RouteServiceConfig"]

"""Command line entry point: extract stage routes and export them as GPX.

Usage examples:

    # Extract stage 6 into the current directory
    python -m route_extractor 6

    # Extract stage 4 into ./gpx, keeping the neutralised rollout
    python -m route_extractor 4 --output ./gpx --keep-rolling-start

    # Extract every stage / list the available stages
    python -m route_extractor --all -o ./routes
    python -m route_extractor --list
"""

from __future__ import annotations

import argparse
from functools import partial
import logging
from typing import List, Optional, Sequence

from .arcgis import StageRouteClient
from .config import KEEP_ROLLING_START, MAX_WORKERS, OUTPUT_DIR, STAGE_MAX, STAGE_MIN
from .errors import RouteSourceError
from .gpx_writer import write_route_gpx
from .pipeline import PipelineOptions
from .services import RouteOutcome, RouteService, RouteServiceConfig

LOGGER = logging.getLogger("route_extractor")


def _setup_logging(level: str = "INFO") -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().setLevel(getattr(logging, level))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="route_extractor",
        description="Extract official stage routes and export them as GPX",
    )
    parser.add_argument(
        "stage",
        nargs="?",
        type=int,
        help=f"Stage number to extract ({STAGE_MIN}-{STAGE_MAX})",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Extract every stage",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available stages without extracting geometry",
    )
    parser.add_argument(
        "--output",
        "-o",
        default=OUTPUT_DIR or None,
        help="Output directory (default: current directory)",
    )
    parser.add_argument(
        "--keep-rolling-start",
        action="store_true",
        default=KEEP_ROLLING_START,
        help="Keep the neutralised section before the official start",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=MAX_WORKERS,
        help="Routes processed in parallel with --all",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def _list_stages(client: StageRouteClient) -> None:
    for props in client.list_stages():
        print(
            f"Stage {props.get('Etape')}: {props.get('Name')} "
            f"({props.get('Distance')}km, {props.get('Type')}) - {props.get('Date')}"
        )


def _log_outcomes(outcomes: Sequence[RouteOutcome]) -> None:
    for outcome in outcomes:
        if not outcome.ok or outcome.result is None:
            LOGGER.error("Route %s failed: %s", outcome.name, outcome.error)
            continue
        result = outcome.result
        report = result.report
        if report.available:
            distances = (
                f"start {report.start_distance_m:.0f}m, end {report.end_distance_m:.0f}m"
            )
        else:
            distances = "endpoints not validated"
        LOGGER.info(
            "Stage %s: %s (%d points, %s geometry, %s) -> %s",
            outcome.route_id,
            outcome.name,
            len(result.route),
            result.source.geometry_kind.value,
            distances,
            outcome.output_path,
        )


def run(args: argparse.Namespace, client: Optional[StageRouteClient] = None) -> int:
    """Execute the parsed command and return the process exit status."""

    client = client or StageRouteClient()

    if args.list:
        try:
            _list_stages(client)
        except RouteSourceError as exc:
            LOGGER.error("Failed to list stages: %s", exc)
            return 1
        return 0

    if not args.all:
        if args.stage is None or not STAGE_MIN <= args.stage <= STAGE_MAX:
            LOGGER.error(
                "Please provide a valid stage number (%d-%d)", STAGE_MIN, STAGE_MAX
            )
            return 1

    try:
        features = client.fetch_route_features(None if args.all else args.stage)
    except RouteSourceError as exc:
        LOGGER.error("Failed to fetch route data: %s", exc)
        return 1

    service = RouteService(
        RouteServiceConfig(
            source_loader=client.source_for_feature,
            writer=partial(write_route_gpx, output_dir=args.output),
            options=PipelineOptions(keep_rolling_start=args.keep_rolling_start),
            max_workers=max(1, args.workers),
        )
    )
    outcomes = service.process(features)
    _log_outcomes(outcomes)
    succeeded = [o for o in outcomes if o.ok]
    LOGGER.info("Extracted %d of %d route(s)", len(succeeded), len(outcomes))
    if args.all:
        return 0 if succeeded else 1
    return 0 if succeeded and len(succeeded) == len(outcomes) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the route extractor CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    return run(args)

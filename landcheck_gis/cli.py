"""Command-line entry point (``landcheck-gis``).

Subcommands:
    load LAYER      Load every chunk of a layer and write the FeatureCollection.
    classify X Y    Classify a raw coordinate pair and print the result.
    query LAT LNG   Print GovMap point-radius query parameters.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from landcheck_gis.core.config import ConfigValidationError, IngestConfig, validate_config
from landcheck_gis.geodesy.bounds import get_profile, list_profiles
from landcheck_gis.geodesy.classify import ClassificationRejected, classify_point
from landcheck_gis.ingest.accumulator import LayerStatus
from landcheck_gis.ingest.loader import ChunkedFeatureLoader
from landcheck_gis.models.geometry import ModelValidationError, Point2D, ViewportBounds
from landcheck_gis.sources.factory import (
    UnknownLayerError,
    get_layer_spec,
    get_page_source,
    list_layers,
)
from landcheck_gis.utils.govmap_query import (
    DEFAULT_RADIUS_M,
    QueryValidationError,
    build_point_radius_query,
    build_query_url,
)

if TYPE_CHECKING:
    from landcheck_gis.ingest.accumulator import LayerSnapshot

logger = logging.getLogger("landcheck_gis.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="landcheck-gis",
        description="Geospatial ingestion tools for the land-check dashboard.",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: LANDCHECK_LOG_LEVEL or INFO)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    ld = sub.add_parser("load", help="Load a layer and write its FeatureCollection")
    ld.add_argument("layer", help=f"Layer name ({', '.join(list_layers())})")
    ld.add_argument("--api-url", default=None, help="Backend base URL (LANDCHECK_API_URL)")
    ld.add_argument("--page-size", type=int, default=None, help="Rows per chunk")
    ld.add_argument("--max-pages", type=int, default=None, help="Stop after N pages (0 = unlimited)")
    ld.add_argument(
        "--bbox",
        type=float,
        nargs=4,
        metavar=("MIN_LAT", "MAX_LAT", "MIN_LNG", "MAX_LNG"),
        default=None,
        help="Only keep features inside this window",
    )
    ld.add_argument("--output", "-o", type=Path, default=None, help="Write GeoJSON here (default: stdout)")

    cl = sub.add_parser("classify", help="Classify a raw coordinate pair")
    cl.add_argument("x", type=float)
    cl.add_argument("y", type=float)
    cl.add_argument("--profile", choices=list_profiles(), default="strict")

    q = sub.add_parser("query", help="Build GovMap point-radius query parameters")
    q.add_argument("lat", type=float)
    q.add_argument("lng", type=float)
    q.add_argument("--radius", type=float, default=DEFAULT_RADIUS_M, help="Search radius in metres")
    q.add_argument("--service", default=None, help="MapServer service name, to include the URL")
    q.add_argument("--layer-id", type=int, default=0, help="MapServer layer id (with --service)")

    return p


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


async def _run_load(layer: str, config: IngestConfig, viewport: ViewportBounds | None) -> LayerSnapshot:
    spec = get_layer_spec(layer)
    source = get_page_source(layer, config, viewport=viewport)
    loader = ChunkedFeatureLoader(
        layer,
        source,
        profile=spec.profile,
        page_size=config.page_size,
        max_pages=config.page_limit,
        viewport=viewport,
    )
    try:
        return await loader.run()
    finally:
        await source.aclose()


def _cmd_load(args: argparse.Namespace, config: IngestConfig) -> int:
    overrides: dict[str, object] = {}
    if args.api_url is not None:
        overrides["api_base_url"] = args.api_url
    if args.page_size is not None:
        overrides["page_size"] = args.page_size
    if args.max_pages is not None:
        overrides["max_pages"] = args.max_pages
    config = dataclasses.replace(config, **overrides)
    validate_config(config)

    viewport = None
    if args.bbox is not None:
        min_lat, max_lat, min_lng, max_lng = args.bbox
        viewport = ViewportBounds(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)

    snapshot = asyncio.run(_run_load(args.layer, config, viewport))

    text = json.dumps(snapshot.to_feature_collection(), ensure_ascii=False)
    if args.output is not None:
        args.output.write_text(text, encoding="utf-8")
        logger.info("feature collection written | path=%s | features=%d", args.output, len(snapshot))
    else:
        print(text)

    summary = snapshot.to_dict()
    print(json.dumps(summary, ensure_ascii=False), file=sys.stderr)
    return EXIT_FAILED if snapshot.status is LayerStatus.FAILED else EXIT_OK


def _cmd_classify(args: argparse.Namespace) -> int:
    profile = get_profile(args.profile)
    try:
        point = classify_point(Point2D(args.x, args.y), profile)
    except ClassificationRejected as exc:
        _print_json({"accepted": False, **exc.to_error_dict()})
        return EXIT_FAILED
    _print_json({"accepted": True, "profile": profile.name, **point.to_dict()})
    return EXIT_OK


def _cmd_query(args: argparse.Namespace) -> int:
    params = build_point_radius_query(args.lat, args.lng, radius_m=args.radius)
    payload: dict[str, object] = {"params": params}
    if args.service:
        payload["url"] = build_query_url(args.service, args.layer_id)
    _print_json(payload)
    return EXIT_OK


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit code."""
    args = _build_parser().parse_args(argv)

    try:
        config = IngestConfig.from_env()
        if args.log_level:
            config = dataclasses.replace(config, log_level=args.log_level.upper())
            validate_config(config)
    except (ConfigValidationError, ValueError) as exc:
        print(f"landcheck-gis: {exc}", file=sys.stderr)
        return EXIT_USAGE

    _configure_logging(config.log_level)

    try:
        if args.cmd == "load":
            return _cmd_load(args, config)
        if args.cmd == "classify":
            return _cmd_classify(args)
        if args.cmd == "query":
            return _cmd_query(args)
    except (ConfigValidationError, ModelValidationError, QueryValidationError, UnknownLayerError) as exc:
        print(f"landcheck-gis: {exc}", file=sys.stderr)
        return EXIT_USAGE

    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())

"""
GreenCrowd CLI entrypoint.

This CLI is intended for quick local checks of the geofence against the catalog
without running the API. It delegates all geometry to `greencrowd.geo`.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from greencrowd.catalog.loader import find_campaign, load_catalog
from greencrowd.config.settings import get_settings
from greencrowd.core.exceptions import GreenCrowdError
from greencrowd.core.geo import haversine_distance
from greencrowd.core.logging import configure_logging
from greencrowd.domain.models import Campaign, Position
from greencrowd.geo.geofence import evaluate_campaign, evaluate_position, find_containing_area
from greencrowd.geo.kml import export_areas_kml, import_areas_kml
from greencrowd.quality.report import build_quality_report


def _campaigns() -> list[Campaign]:
    return load_catalog(get_settings().catalog.path)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _cmd_evaluate(args: argparse.Namespace) -> int:
    """Handle the `evaluate` subcommand (one campaign, or every campaign's areas in catalog order)."""
    position = Position(lat=args.lat, lng=args.lng)
    campaigns = _campaigns()

    if args.campaign:
        result = evaluate_campaign(find_campaign(campaigns, args.campaign), position)
    else:
        polygons = [a.polygon for c in campaigns for a in c.areas]
        result = evaluate_position(position, polygons)

    if args.json:
        _print_json(result.model_dump(mode="json", by_alias=True))
        return 0

    if result.is_inside_any_polygon:
        print(f"inside: yes (polygon #{result.closest_polygon_index})")
    elif result.closest_polygon_index is None:
        print("inside: no (no usable polygons)")
    else:
        print(
            f"inside: no; closest polygon #{result.closest_polygon_index} "
            f"at {result.distance_to_closest_polygon:.1f} m"
        )
    return 0


def _cmd_locate(args: argparse.Namespace) -> int:
    campaign = find_campaign(_campaigns(), args.campaign)
    area = find_containing_area(campaign.areas, Position(lat=args.lat, lng=args.lng))
    if area is None:
        print("No containing area.")
        return 1
    print(f"{area.id}\t{area.name}")
    return 0


def _cmd_distance(args: argparse.Namespace) -> int:
    meters = haversine_distance(args.lat1, args.lng1, args.lat2, args.lng2)
    print(f"{meters:.1f}")
    return 0


def _cmd_export_kml(args: argparse.Namespace) -> int:
    settings = get_settings()
    campaign = find_campaign(_campaigns(), args.campaign)
    areas = [a for a in campaign.areas if not args.area or a.id in set(args.area)]
    if not areas:
        print("No areas selected.", file=sys.stderr)
        return 1

    content = export_areas_kml(areas, document_name=settings.kml.document_name)
    if args.output:
        Path(args.output).write_bytes(content)
        print(f"Wrote {len(areas)} area(s) to {args.output}")
    else:
        sys.stdout.write(content.decode("utf-8"))
    return 0


def _cmd_import_kml(args: argparse.Namespace) -> int:
    result = import_areas_kml(Path(args.path).read_bytes(), campaign_id=args.campaign)
    _print_json(
        {
            "areas": [a.model_dump(mode="json", by_alias=True) for a in result.areas],
            "skipped": result.skipped,
        }
    )
    return 0


def _cmd_quality_report(_: argparse.Namespace) -> int:
    _print_json(build_quality_report(get_settings()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the GreenCrowd CLI."""
    parser = argparse.ArgumentParser(prog="greencrowd")
    sub = parser.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", help="Is a position inside any area? Otherwise: closest area and distance.")
    ev.add_argument("--lat", required=True, type=float)
    ev.add_argument("--lng", required=True, type=float)
    ev.add_argument("--campaign", type=str, default=None, help="Campaign id (default: all catalog areas)")
    ev.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    ev.set_defaults(func=_cmd_evaluate)

    loc = sub.add_parser("locate", help="First campaign area containing a position.")
    loc.add_argument("--lat", required=True, type=float)
    loc.add_argument("--lng", required=True, type=float)
    loc.add_argument("--campaign", required=True, type=str)
    loc.set_defaults(func=_cmd_locate)

    dist = sub.add_parser("distance", help="Great-circle distance in meters.")
    dist.add_argument("lat1", type=float)
    dist.add_argument("lng1", type=float)
    dist.add_argument("lat2", type=float)
    dist.add_argument("lng2", type=float)
    dist.set_defaults(func=_cmd_distance)

    exp = sub.add_parser("export-kml", help="Export campaign areas as KML.")
    exp.add_argument("--campaign", required=True, type=str)
    exp.add_argument("--area", action="append", default=[], help="Repeatable. Omit to export all areas.")
    exp.add_argument("--output", type=str, default=None, help="File path (default: stdout)")
    exp.set_defaults(func=_cmd_export_kml)

    imp = sub.add_parser("import-kml", help="Decode area drafts from a KML file.")
    imp.add_argument("path", type=str)
    imp.add_argument("--campaign", type=str, default=None, help="Campaign id for placemarks without one")
    imp.set_defaults(func=_cmd_import_kml)

    q = sub.add_parser("quality-report", help="Offline catalog quality report.")
    q.set_defaults(func=_cmd_quality_report)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m greencrowd.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except GreenCrowdError as e:
        print(f"error [{e.code}]: {e.message}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

"""
Command-line interface for geodecode.

Provides commands for looking up the nearest city to coordinates and
for inspecting the loaded dataset.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .geocoder import GeocoderConfig, ReverseGeocoder
from .log import setup_logging
from .models import Location


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="geodecode",
        description="Offline reverse geocoding to the nearest known city",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Lookup command
    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Find the nearest city to one or more coordinates",
    )
    lookup_parser.add_argument(
        "-c", "--coord",
        type=float,
        nargs=2,
        action="append",
        required=True,
        metavar=("LAT", "LON"),
        help="Coordinate to look up (repeatable)",
    )
    _add_common_arguments(lookup_parser)

    # Stats command
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show dataset and index statistics",
    )
    _add_common_arguments(stats_parser)

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--data",
        type=Path,
        default=None,
        help="Cities CSV file (default: $GEODECODE_DATA or data/rg_cities1000.csv)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log loading progress",
    )


def _make_geocoder(args: argparse.Namespace) -> ReverseGeocoder:
    env_config = GeocoderConfig.from_env()
    config = GeocoderConfig(
        data_path=args.data or env_config.data_path,
        verbose=args.verbose or env_config.verbose,
    )
    setup_logging(config.verbose)
    return ReverseGeocoder.from_config(config)


def format_location(location: Location) -> str:
    """Render a location as a single line."""
    parts = [p for p in (location.city, location.admin1, location.admin2, location.cc) if p]
    text = ", ".join(parts)
    if location.country:
        text += f" ({location.country})"
    return text


def cmd_lookup(args: argparse.Namespace) -> int:
    """Handle the lookup command."""
    geocoder = _make_geocoder(args)
    coords = [(lat, lon) for lat, lon in args.coord]

    results = geocoder.query(coords)
    if results is None:
        print("Error: coordinates must have lat in [-90, 90] and lon in [-180, 180]")
        return 1

    if not results:
        for lat, lon in coords:
            print(f"{lat},{lon}: Not found")
        return 1

    for (lat, lon), location in zip(coords, results):
        print(f"{lat},{lon}: {format_location(location)}")

    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Handle the stats command."""
    geocoder = _make_geocoder(args)
    geocoder.ensure_loaded()
    stats = geocoder.index_stats

    print("Dataset statistics:")
    print(f"  State: {geocoder.state.value}")
    print(f"  Locations: {len(geocoder)}")
    print(f"  Indexed keys: {stats['size']}")
    print(f"  Tree nodes: {stats['nodes']}")
    print(f"  Tree depth: {stats['depth']}")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "lookup":
        return cmd_lookup(args)
    elif args.command == "stats":
        return cmd_stats(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())

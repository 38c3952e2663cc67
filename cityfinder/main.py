"""Command-line entrypoints for the city location engine."""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import uuid
from pathlib import Path
from typing import Dict, List, Optional

import tomllib
from dotenv import load_dotenv

try:
    import uvloop
except ImportError:  # pragma: no cover - uvloop optional on some platforms
    uvloop = None

from cityfinder.errors import GeolocationError
from cityfinder.geocode.session import DEFAULT_ENDPOINT, create_geocode_session
from cityfinder.locator import Locator, build_locator
from cityfinder.normalize.geo import Coordinate, haversine_km
from cityfinder.observability.log import configure_logging, get_logger
from cityfinder.observability.metrics import record_duration
from cityfinder.observability.tracing import clear_context, set_context
from cityfinder.registry.cities import CityConfig, city_for_slug, load_cities, validate_cities

LOGGER = get_logger(__name__)

DEFAULT_SETTINGS = Path("config/settings.toml")
DEFAULT_CITIES_CSV = Path("config/cities.csv")


def load_settings(path: Path) -> Dict[str, Dict[str, object]]:
    """Read the TOML configuration file, returning empty sections when absent."""
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _apply_env(settings: Dict[str, Dict[str, object]]) -> Dict[str, Dict[str, object]]:
    position = dict(settings.get("position", {}))
    for key, env_name in (("latitude", "CITYFINDER_LATITUDE"), ("longitude", "CITYFINDER_LONGITUDE")):
        if os.environ.get(env_name):
            position[key] = os.environ[env_name]
    merged = dict(settings)
    merged["position"] = position
    return merged


def _coordinate(args: argparse.Namespace) -> Coordinate:
    coord = Coordinate(args.lat, args.lng)
    if not coord.in_range():
        raise SystemExit(f"Coordinate out of range: {coord.as_latlng()}")
    return coord


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="cityfinder", description="Resolve coordinates to supported cities")
    parser.add_argument("--settings", default=str(DEFAULT_SETTINGS), help="Path to settings.toml")
    sub = parser.add_subparsers(dest="command", required=True)

    geocode = sub.add_parser("geocode", help="Resolve a free-text address to coordinates")
    geocode.add_argument("address")

    reverse = sub.add_parser("reverse", help="Formatted address for a coordinate")
    reverse.add_argument("--lat", type=float, required=True)
    reverse.add_argument("--lng", type=float, required=True)

    city = sub.add_parser("city", help="Supported city for a coordinate")
    city.add_argument("--lat", type=float, required=True)
    city.add_argument("--lng", type=float, required=True)
    city.add_argument("--allowed", nargs="+", help="Override the allowed city names")

    locate = sub.add_parser("locate", help="Supported city for the current device position")
    locate.add_argument("--allowed", nargs="+", help="Override the allowed city names")

    distance = sub.add_parser("distance", help="Great-circle distance in km between two points")
    distance.add_argument("coords", type=float, nargs=4, metavar=("LAT1", "LNG1", "LAT2", "LNG2"))

    cities = sub.add_parser("cities", help="List supported cities")
    cities.add_argument("--registry", default=str(DEFAULT_CITIES_CSV))
    cities.add_argument("--slug", help="Show one city by URL slug")

    validate = sub.add_parser("validate-cities", help="Validate the city registry CSV")
    validate.add_argument("--registry", default=str(DEFAULT_CITIES_CSV))

    return parser


async def run_geocode(args: argparse.Namespace, locator: Locator) -> None:
    coord = await locator.geocode_address(args.address)
    _emit({
        "address": args.address,
        "latitude": coord.latitude if coord else None,
        "longitude": coord.longitude if coord else None,
    })


async def run_reverse(args: argparse.Namespace, locator: Locator) -> None:
    coord = _coordinate(args)
    _emit({"coordinate": coord.as_latlng(), "address": await locator.reverse_geocode(coord)})


async def run_city(args: argparse.Namespace, locator: Locator) -> None:
    coord = _coordinate(args)
    city = await locator.reverse_geocode_city(coord, args.allowed)
    _emit({"coordinate": coord.as_latlng(), "city": city})


async def run_locate(args: argparse.Namespace, locator: Locator) -> None:
    try:
        coord = await locator.get_current_position()
    except GeolocationError as exc:
        raise SystemExit(f"Unable to determine position: {exc}")
    city = await locator.reverse_geocode_city(coord, args.allowed)
    _emit({"coordinate": coord.as_latlng(), "city": city})


ASYNC_COMMANDS = {
    "geocode": run_geocode,
    "reverse": run_reverse,
    "city": run_city,
    "locate": run_locate,
}


async def run_async_command(args: argparse.Namespace, settings: Dict[str, Dict[str, object]]) -> None:
    """Open a provider session, compose the locator and run one command."""
    geocoding = settings.get("geocoding", {})
    api_key = os.environ.get(str(geocoding.get("api_key_env", "GOOGLE_MAPS_API_KEY")), "")
    set_context(command=args.command, invocation_id=uuid.uuid4().hex)
    try:
        async with create_geocode_session(
            endpoint=str(geocoding.get("endpoint", DEFAULT_ENDPOINT)),
            api_key=api_key,
            timeout=float(geocoding.get("timeout_seconds", 10)),
            user_agent=str(geocoding.get("user_agent", "cityfinder/0.1")),
            language=geocoding.get("language"),
            region=geocoding.get("region"),
        ) as session:
            try:
                locator = build_locator(settings, session)
            except ValueError as exc:
                raise SystemExit(f"Failed to load cities: {exc}")
            with record_duration(locator.metrics, "command_duration_ms"):
                await ASYNC_COMMANDS[args.command](args, locator)
            LOGGER.debug(
                "command_metrics",
                cache_hit_ratio=locator.metrics.cache_hit_ratio(),
                **locator.metrics.snapshot(),
            )
    finally:
        clear_context()


def cmd_distance(args: argparse.Namespace) -> None:
    lat1, lng1, lat2, lng2 = args.coords
    a = Coordinate(lat1, lng1)
    b = Coordinate(lat2, lng2)
    if not (a.in_range() and b.in_range()):
        raise SystemExit("Coordinate out of range")
    _emit({"from": a.as_latlng(), "to": b.as_latlng(), "km": round(haversine_km(a, b), 3)})


def _city_row(city: CityConfig) -> Dict[str, object]:
    return {
        "slug": city.slug,
        "name": city.name,
        "region": city.region_sv,
        "search_terms": city.search_terms(),
    }


def cmd_cities(args: argparse.Namespace) -> None:
    try:
        cities = load_cities(Path(args.registry))
        if args.slug is not None:
            # unknown slugs land on the first city, as city pages do
            _emit(_city_row(city_for_slug(cities, args.slug)))
            return
    except ValueError as exc:
        raise SystemExit(f"Failed to load cities: {exc}")
    _emit([_city_row(city) for city in cities])


def cmd_validate_cities(args: argparse.Namespace) -> None:
    report = []
    success = True
    for slug, ok, detail in validate_cities(Path(args.registry)):
        status = "OK"
        if detail == "disabled":
            status = "DISABLED"
        elif not ok:
            status = "FAIL"
            success = False
        report.append({"slug": slug, "status": status, "detail": detail if status != "OK" else ""})
    _emit(report)
    if not success:
        raise SystemExit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    settings = _apply_env(load_settings(Path(args.settings)))
    configure_logging(Path("config/logging.yaml"))

    if args.command == "distance":
        cmd_distance(args)
        return

    if args.command == "cities":
        cmd_cities(args)
        return

    if args.command == "validate-cities":
        cmd_validate_cities(args)
        return

    if uvloop is not None:
        uvloop.install()
    asyncio.run(run_async_command(args, settings))


if __name__ == "__main__":
    main()

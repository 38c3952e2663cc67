"""Caller-facing location API composed from the geocoding and resolution parts."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from cityfinder.geocode.cache import ForwardGeocodeCache
from cityfinder.geocode.client import GeocodingClient
from cityfinder.geocode.position import (
    POSITION_TIMEOUT_SECONDS,
    FixedPositionSource,
    PositionSource,
    get_current_position,
)
from cityfinder.geocode.session import GeocodeSession
from cityfinder.normalize.cities import CityTables
from cityfinder.normalize.geo import Coordinate, haversine_km
from cityfinder.observability.metrics import MetricsRegistry
from cityfinder.registry.cities import CityConfig, allowed_city_names, load_cities
from cityfinder.resolve.city import CityResolver


class Locator:
    """Owns the forward geocode cache and wires client, resolver and position source."""

    def __init__(
        self,
        session: GeocodeSession,
        *,
        cities: Sequence[CityConfig] = (),
        tables: Optional[CityTables] = None,
        position_source: Optional[PositionSource] = None,
        position_timeout: float = POSITION_TIMEOUT_SECONDS,
        high_accuracy: bool = True,
        cache: Optional[ForwardGeocodeCache] = None,
        metrics: Optional[MetricsRegistry] = None,
    ) -> None:
        self.metrics = metrics or MetricsRegistry()
        self.cache = cache if cache is not None else ForwardGeocodeCache()
        self.cities = list(cities)
        self.client = GeocodingClient(session, cache=self.cache, metrics=self.metrics)
        self.resolver = CityResolver(self.client, tables=tables, metrics=self.metrics)
        self._position_source = position_source
        self._position_timeout = position_timeout
        self._high_accuracy = high_accuracy

    def allowed_cities(self, override: Optional[Sequence[str]] = None) -> List[str]:
        if override is not None:
            return list(override)
        return allowed_city_names(self.cities)

    async def get_current_position(self) -> Coordinate:
        return await get_current_position(
            self._position_source,
            timeout=self._position_timeout,
            high_accuracy=self._high_accuracy,
        )

    async def geocode_address(self, address: str) -> Optional[Coordinate]:
        return await self.client.geocode_address(address)

    async def reverse_geocode(self, coord: Coordinate) -> Optional[str]:
        return await self.client.reverse_geocode(coord)

    async def reverse_geocode_city(
        self, coord: Coordinate, allowed_cities: Optional[Sequence[str]] = None
    ) -> Optional[str]:
        return await self.resolver.reverse_geocode_city(coord, self.allowed_cities(allowed_cities))

    async def locate_city(self, allowed_cities: Optional[Sequence[str]] = None) -> Optional[str]:
        """Resolve the device's current position to a supported city.

        Geolocation errors propagate; provider trouble yields None.
        """
        coord = await self.get_current_position()
        return await self.reverse_geocode_city(coord, allowed_cities)

    @staticmethod
    def haversine_km(a: Coordinate, b: Coordinate) -> float:
        return haversine_km(a, b)


def position_source_from_settings(section: Dict[str, object]) -> Optional[PositionSource]:
    """Build a fixed position source when the settings carry a coordinate."""
    latitude = section.get("latitude")
    longitude = section.get("longitude")
    if latitude in (None, "") or longitude in (None, ""):
        return None
    return FixedPositionSource(Coordinate(float(latitude), float(longitude)))


def build_locator(settings: Dict[str, Dict[str, object]], session: GeocodeSession) -> Locator:
    """Compose a `Locator` from the parsed settings file."""
    cities_cfg = settings.get("cities", {})
    position_cfg = settings.get("position", {})
    registry_path = Path(str(cities_cfg.get("registry", "config/cities.csv")))
    cities = load_cities(registry_path) if registry_path.exists() else []
    tables = CityTables.build(
        aliases=cities_cfg.get("aliases") or None,
        spellings=cities_cfg.get("spellings") or None,
    )
    return Locator(
        session,
        cities=cities,
        tables=tables,
        position_source=position_source_from_settings(position_cfg),
        position_timeout=float(position_cfg.get("timeout_seconds", POSITION_TIMEOUT_SECONDS)),
        high_accuracy=bool(position_cfg.get("high_accuracy", True)),
    )

import asyncio
from pathlib import Path

import httpx
import pytest

from cityfinder.errors import GeolocationUnsupportedError
from cityfinder.geocode.session import GeocodeSession
from cityfinder.locator import Locator, build_locator, position_source_from_settings
from cityfinder.normalize.geo import Coordinate

ENDPOINT = "https://geo.test/json"
REGISTRY = Path(__file__).resolve().parents[1] / "config" / "cities.csv"


class RecordingSession(GeocodeSession):
    def __init__(self, responses):
        super().__init__(None, endpoint=ENDPOINT, api_key="test")
        self._responses = list(responses)
        self.calls = []

    async def lookup(self, params):  # type: ignore[override]
        self.calls.append(dict(params))
        return self._responses.pop(0)


def _locality_response(name):
    payload = {
        "status": "OK",
        "results": [
            {
                "formatted_address": f"{name}, Sverige",
                "address_components": [{"long_name": name, "short_name": name, "types": ["locality"]}],
                "geometry": {"location": {"lat": 59.0, "lng": 18.0}},
            }
        ],
    }
    return httpx.Response(200, json=payload, request=httpx.Request("GET", ENDPOINT))


def _settings(**position):
    return {
        "cities": {"registry": str(REGISTRY), "aliases": {"Järfälla": "Stockholm"}},
        "position": position,
    }


def test_build_locator_uses_registry_as_default_allow_list():
    session = RecordingSession([_locality_response("Linköping")])
    locator = build_locator(_settings(), session)
    assert "Umeå" in locator.allowed_cities()
    assert locator.allowed_cities(["Malmö"]) == ["Malmö"]
    assert asyncio.run(locator.reverse_geocode_city(Coordinate(58.41, 15.62))) == "Linköping"


def test_build_locator_merges_configured_aliases():
    session = RecordingSession([_locality_response("Jarfalla")])
    locator = build_locator(_settings(), session)
    assert asyncio.run(locator.reverse_geocode_city(Coordinate(59.41, 17.83))) == "Stockholm"


def test_locate_city_with_configured_position():
    session = RecordingSession([_locality_response("Solna")])
    locator = build_locator(_settings(latitude=59.36, longitude="18.00"), session)
    assert asyncio.run(locator.locate_city()) == "Stockholm"
    assert session.calls == [{"latlng": "59.36,18.0"}]


def test_locate_city_without_position_source():
    locator = build_locator(_settings(), RecordingSession([]))
    with pytest.raises(GeolocationUnsupportedError):
        asyncio.run(locator.locate_city())


def test_each_locator_owns_its_cache():
    first = Locator(RecordingSession([_locality_response("Lund")]))
    second = Locator(RecordingSession([_locality_response("Lund")]))

    asyncio.run(first.geocode_address("Lund"))
    assert "Lund" in first.cache
    assert "Lund" not in second.cache


def test_position_source_from_settings():
    assert position_source_from_settings({}) is None
    assert position_source_from_settings({"latitude": 1.0}) is None
    assert position_source_from_settings({"latitude": "1.5", "longitude": 2}) is not None


def test_haversine_exposed_on_locator():
    a = Coordinate(59.3293, 18.0686)
    assert Locator.haversine_km(a, a) == 0


def test_empty_allow_list_matches_nothing():
    session = RecordingSession([_locality_response("Solna")])
    locator = build_locator(_settings(), session)
    assert locator.allowed_cities([]) == []
    assert asyncio.run(locator.reverse_geocode_city(Coordinate(59.36, 18.0), [])) is None

"""Map a coordinate onto one of a caller-supplied set of supported cities."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from cityfinder.geocode.client import GeocodingClient
from cityfinder.geocode.models import GeocodeCandidate
from cityfinder.normalize.cities import CityTables
from cityfinder.normalize.geo import Coordinate
from cityfinder.normalize.text import normalize
from cityfinder.observability.log import get_logger
from cityfinder.observability.metrics import MetricsRegistry
from cityfinder.resolve.locality import extract_locality

LOGGER = get_logger(__name__)


def candidate_names(candidates: Iterable[GeocodeCandidate]) -> List[str]:
    """Localities of all candidates in rank order, without repeats."""
    names: List[str] = []
    for candidate in candidates:
        locality = extract_locality(candidate)
        if locality and locality not in names:
            names.append(locality)
    return names


class CityResolver:
    """Resolve coordinates to canonical city names.

    Each candidate locality is tried against the allow-list in two passes.
    The first pass accepts an alias hit (suburb to parent city) or a
    normalized equality with either the raw name or its canonical spelling.
    The second pass accepts substring containment in either direction, which
    can over-match short city names. The first candidate to match wins.
    """

    def __init__(
        self,
        client: GeocodingClient,
        *,
        tables: Optional[CityTables] = None,
        metrics: Optional[MetricsRegistry] = None,
    ) -> None:
        self._client = client
        self._tables = tables or CityTables()
        self._metrics = metrics or MetricsRegistry()

    def _alias_match(self, name: str, allowed_cities: Sequence[str]) -> Optional[str]:
        parent = self._tables.alias_for(name)
        if parent is not None and parent in allowed_cities:
            return parent
        return None

    def _exact_match(self, name: str, allowed: Sequence[Tuple[str, str]]) -> Optional[str]:
        key = normalize(name)
        canonical_key = normalize(self._tables.canonical_spelling(name))
        for city, city_key in allowed:
            if city_key == key or city_key == canonical_key:
                return city
        return None

    def _containment_match(self, name: str, allowed: Sequence[Tuple[str, str]]) -> Optional[str]:
        key = normalize(name)
        for city, city_key in allowed:
            if city_key in key or key in city_key:
                return city
        return None

    def match(self, names: Sequence[str], allowed_cities: Sequence[str]) -> Optional[str]:
        """Apply the matching passes to already-extracted locality names."""
        # an empty allowed name would be contained in every candidate
        allowed = [(city, normalize(city)) for city in allowed_cities if normalize(city)]
        for name in names:
            matched = self._alias_match(name, allowed_cities) or self._exact_match(name, allowed)
            if matched is not None:
                return matched
        for name in names:
            matched = self._alias_match(name, allowed_cities) or self._containment_match(name, allowed)
            if matched is not None:
                return matched
        return None

    async def reverse_geocode_city(self, coord: Coordinate, allowed_cities: Sequence[str]) -> Optional[str]:
        """Return the allowed city ``coord`` belongs to, or None when nothing matches."""
        candidates = await self._client.reverse_lookup(coord)
        if not candidates:
            return None
        names = candidate_names(candidates)
        city = self.match(names, allowed_cities)
        if city is None:
            self._metrics.incr("cities_unmatched")
            LOGGER.info("city_no_match", coordinate=coord.as_latlng(), candidates=names)
            return None
        self._metrics.incr("cities_resolved")
        LOGGER.debug("city_resolved", coordinate=coord.as_latlng(), city=city, candidates=names)
        return city

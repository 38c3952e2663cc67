"""Forward and reverse geocoding against the configured provider."""
from __future__ import annotations

import time
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from cityfinder.errors import ProviderError
from cityfinder.geocode.cache import ForwardGeocodeCache
from cityfinder.geocode.models import GeocodeCandidate, GeocodeResponse
from cityfinder.geocode.session import GeocodeSession
from cityfinder.normalize.geo import Coordinate
from cityfinder.observability.log import get_logger
from cityfinder.observability.metrics import MetricsRegistry
from cityfinder.observability.tracing import log_lookup_result, span

LOGGER = get_logger(__name__)


class GeocodingClient:
    """Best-effort geocoding: provider failures are logged and reported as None.

    Every public coroutine issues at most one request and never retries.
    """

    def __init__(
        self,
        session: GeocodeSession,
        *,
        cache: ForwardGeocodeCache,
        metrics: Optional[MetricsRegistry] = None,
    ) -> None:
        self._session = session
        self._cache = cache
        self._metrics = metrics or MetricsRegistry()

    async def _request(self, kind: str, params: Dict[str, str], *, subject: str) -> Optional[List[GeocodeCandidate]]:
        self._metrics.incr("provider_requests")
        try:
            with span(name=f"geocode.{kind}", subject=subject):
                start = time.perf_counter()
                response = await self._session.lookup(params)
                response.raise_for_status()
                payload = GeocodeResponse.model_validate(response.json())
                if not payload.ok():
                    raise ProviderError(f"{payload.status}: {payload.error_message or 'no detail'}")
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, ValidationError, ProviderError) as exc:
            self._metrics.incr("provider_failures")
            LOGGER.warning("geocode_failed", kind=kind, subject=subject, error=str(exc))
            return None
        log_lookup_result(
            kind=kind,
            subject=subject,
            status=response.status_code,
            candidates=len(payload.results),
            elapsed_ms=int((time.perf_counter() - start) * 1000),
        )
        if not payload.results:
            self._metrics.incr("provider_empty")
        return payload.results

    async def geocode_address(self, address: str) -> Optional[Coordinate]:
        """Resolve a free-text address, consulting the cache before the network."""
        if not address:
            return None
        cached = self._cache.get(address)
        if cached is not None:
            self._metrics.incr("forward_cache_hits")
            LOGGER.debug("geocode_cache_hit", address=address)
            return cached
        self._metrics.incr("forward_cache_misses")
        candidates = await self._request("forward", {"address": address}, subject=address)
        if not candidates:
            if candidates is not None:
                LOGGER.info("geocode_no_match", address=address)
            return None
        geometry = candidates[0].geometry
        if geometry is None:
            self._metrics.incr("provider_failures")
            LOGGER.warning("geocode_failed", kind="forward", subject=address, error="top candidate has no geometry")
            return None
        coordinate = Coordinate(geometry.location.lat, geometry.location.lng)
        self._cache.put(address, coordinate)
        return coordinate

    async def reverse_lookup(self, coord: Coordinate) -> Optional[List[GeocodeCandidate]]:
        """Return the ranked candidates for ``coord``; None on provider failure."""
        return await self._request("reverse", {"latlng": coord.as_latlng()}, subject=coord.as_latlng())

    async def reverse_geocode(self, coord: Coordinate) -> Optional[str]:
        """Return the provider's best formatted address for ``coord``."""
        candidates = await self.reverse_lookup(coord)
        if not candidates:
            return None
        return candidates[0].formatted_address or None

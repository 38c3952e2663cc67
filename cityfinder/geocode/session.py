"""Factories for geocoding provider HTTP sessions."""
from __future__ import annotations

import contextlib
from typing import AsyncIterator, Dict, Optional

import httpx

from cityfinder.errors import ProviderError

DEFAULT_ENDPOINT = "https://maps.googleapis.com/maps/api/geocode/json"


class GeocodeSession:
    """Thin wrapper issuing provider queries over a shared httpx client."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient],
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        api_key: str = "",
        language: Optional[str] = None,
        region: Optional[str] = None,
    ) -> None:
        self._client = client
        self._endpoint = endpoint
        self._api_key = api_key
        self._language = language
        self._region = region

    def _query(self, params: Dict[str, str]) -> Dict[str, str]:
        query = dict(params)
        if self._api_key:
            query["key"] = self._api_key
        if self._language:
            query.setdefault("language", self._language)
        if self._region:
            query.setdefault("region", self._region)
        return query

    async def lookup(self, params: Dict[str, str]) -> httpx.Response:
        """Send one geocoding request with the supplied query parameters."""
        if self._client is None:
            raise ProviderError("No geocoding session available")
        return await self._client.get(self._endpoint, params=self._query(params))


@contextlib.asynccontextmanager
async def create_geocode_session(
    *,
    endpoint: str,
    api_key: str,
    timeout: float,
    user_agent: str,
    language: Optional[str] = None,
    region: Optional[str] = None,
) -> AsyncIterator[GeocodeSession]:
    """Yield a configured `GeocodeSession` for the duration of the context."""
    headers = {"User-Agent": user_agent}
    async with httpx.AsyncClient(headers=headers, timeout=timeout) as client:
        yield GeocodeSession(
            client,
            endpoint=endpoint,
            api_key=api_key,
            language=language,
            region=region,
        )

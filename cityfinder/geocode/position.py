"""Device position lookup through a pluggable platform source."""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol

from cityfinder.errors import GeolocationTimeoutError, GeolocationUnsupportedError
from cityfinder.normalize.geo import Coordinate
from cityfinder.observability.log import get_logger

LOGGER = get_logger(__name__)

POSITION_TIMEOUT_SECONDS = 10.0


class PositionSource(Protocol):
    """Platform geolocation API.

    Implementations raise ``GeolocationPermissionError`` when the device
    declines to share its position.
    """

    async def current_fix(self, *, high_accuracy: bool) -> Coordinate:
        ...


class FixedPositionSource:
    """Reports a configured coordinate, for hosts without a location sensor."""

    def __init__(self, coordinate: Coordinate) -> None:
        self._coordinate = coordinate

    async def current_fix(self, *, high_accuracy: bool) -> Coordinate:
        return self._coordinate


async def get_current_position(
    source: Optional[PositionSource],
    *,
    timeout: float = POSITION_TIMEOUT_SECONDS,
    high_accuracy: bool = True,
) -> Coordinate:
    """Ask ``source`` for a fix, failing when none arrives within ``timeout``."""
    if source is None:
        raise GeolocationUnsupportedError("Geolocation not supported")
    try:
        return await asyncio.wait_for(source.current_fix(high_accuracy=high_accuracy), timeout=timeout)
    except asyncio.TimeoutError as exc:
        LOGGER.warning("position_timeout", timeout_seconds=timeout)
        raise GeolocationTimeoutError(f"No position fix within {timeout:g}s") from exc

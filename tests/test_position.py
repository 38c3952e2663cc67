import asyncio

import pytest

from cityfinder.errors import (
    GeolocationPermissionError,
    GeolocationTimeoutError,
    GeolocationUnsupportedError,
)
from cityfinder.geocode.position import FixedPositionSource, get_current_position
from cityfinder.normalize.geo import Coordinate


class RecordingSource:
    def __init__(self, coordinate=None, *, delay=0.0, error=None):
        self._coordinate = coordinate
        self._delay = delay
        self._error = error
        self.requests = []

    async def current_fix(self, *, high_accuracy):
        self.requests.append(high_accuracy)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._coordinate


def test_missing_source_is_unsupported():
    with pytest.raises(GeolocationUnsupportedError):
        asyncio.run(get_current_position(None))


def test_fixed_source_reports_coordinate():
    coord = Coordinate(55.605, 13.0038)
    assert asyncio.run(get_current_position(FixedPositionSource(coord))) == coord


def test_high_accuracy_requested_by_default():
    source = RecordingSource(Coordinate(1.0, 2.0))
    asyncio.run(get_current_position(source))
    assert source.requests == [True]


def test_slow_fix_times_out():
    source = RecordingSource(Coordinate(1.0, 2.0), delay=1.0)
    with pytest.raises(GeolocationTimeoutError):
        asyncio.run(get_current_position(source, timeout=0.01))


def test_permission_denied_propagates():
    source = RecordingSource(error=GeolocationPermissionError("User denied Geolocation"))
    with pytest.raises(GeolocationPermissionError):
        asyncio.run(get_current_position(source))

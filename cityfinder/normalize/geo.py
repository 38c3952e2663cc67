"""Coordinate value type and great-circle distance."""
from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Represents a resolved coordinate pair."""

    latitude: float
    longitude: float

    def in_range(self) -> bool:
        """Return True when both components lie within WGS84 bounds."""
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0

    def as_latlng(self) -> str:
        """Format as the ``lat,lng`` pair geocoding providers expect."""
        return f"{self.latitude},{self.longitude}"


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Return the great-circle distance between two coordinates in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)
    sin_d_lat = math.sin(d_lat / 2)
    sin_d_lng = math.sin(d_lng / 2)
    h = sin_d_lat * sin_d_lat + math.cos(lat1) * math.cos(lat2) * sin_d_lng * sin_d_lng
    # rounding can push h fractionally above 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))

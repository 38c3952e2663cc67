"""Pydantic models for geocoding provider responses."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class AddressComponent(BaseModel):
    """A typed piece of a formatted address (locality, postal_town, ...)."""

    long_name: str = ""
    short_name: str = ""
    types: List[str] = Field(default_factory=list)


class LatLng(BaseModel):
    lat: float
    lng: float


class Geometry(BaseModel):
    location: LatLng


class GeocodeCandidate(BaseModel):
    """One ranked match returned by a geocoding query."""

    formatted_address: str = ""
    address_components: List[AddressComponent] = Field(default_factory=list)
    geometry: Optional[Geometry] = None


class GeocodeResponse(BaseModel):
    """Top-level provider payload; ``status`` is absent for some providers."""

    status: Optional[str] = None
    error_message: Optional[str] = None
    results: List[GeocodeCandidate] = Field(default_factory=list)

    def ok(self) -> bool:
        return self.status in (None, "OK", "ZERO_RESULTS")

"""In-memory forward geocode cache."""
from __future__ import annotations

from typing import Dict, Optional

from cityfinder.normalize.geo import Coordinate


class ForwardGeocodeCache:
    """Remember resolved coordinates per exact address string.

    Entries live as long as the owning object; there is no eviction and no
    locking, so concurrent misses for one address may both write it.
    """

    def __init__(self) -> None:
        self._index: Dict[str, Coordinate] = {}

    def get(self, address: str) -> Optional[Coordinate]:
        return self._index.get(address)

    def put(self, address: str, coordinate: Coordinate) -> None:
        self._index[address] = coordinate

    def __contains__(self, address: object) -> bool:
        return address in self._index

    def __len__(self) -> int:
        return len(self._index)

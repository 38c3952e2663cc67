"""Pick the most specific locality label out of a geocode candidate."""
from __future__ import annotations

from typing import Optional

from cityfinder.geocode.models import GeocodeCandidate

# Municipality first; a postal town stands in where the provider has no locality tag.
LOCALITY_TYPES = (
    "locality",
    "postal_town",
    "administrative_area_level_3",
    "administrative_area_level_2",
)
FALLBACK_TYPE = "sublocality"


def extract_locality(candidate: Optional[GeocodeCandidate]) -> Optional[str]:
    """Return the long name of the highest-priority locality component, if any."""
    if candidate is None:
        return None
    components = candidate.address_components
    for type_name in LOCALITY_TYPES:
        component = next((c for c in components if type_name in c.types), None)
        if component is not None and component.long_name:
            return component.long_name
    fallback = next((c for c in components if FALLBACK_TYPE in c.types), None)
    if fallback is not None and fallback.long_name:
        return fallback.long_name
    return None

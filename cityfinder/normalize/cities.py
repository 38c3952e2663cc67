"""Static lookup tables mapping place-name variants onto supported cities."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from cityfinder.normalize.text import normalize

# ASCII and English variants the provider returns instead of the display spelling.
CITY_SPELLINGS: Dict[str, str] = {
    "stockholm": "Stockholm",
    "goteborg": "Göteborg",
    "gothenburg": "Göteborg",
    "malmo": "Malmö",
    "umea": "Umeå",
    "vasteras": "Västerås",
    "uppsala": "Uppsala",
    "lund": "Lund",
    "linkoping": "Linköping",
}

# Municipalities and neighbourhoods that belong to a supported parent city.
CITY_ALIASES: Dict[str, str] = {
    "solna": "Stockholm",
    "sundbyberg": "Stockholm",
    "nacka": "Stockholm",
    "täby": "Stockholm",
    "tyresö": "Stockholm",
    "huddinge": "Stockholm",
    "bromma": "Stockholm",
    "vasastan": "Stockholm",
    "södermalm": "Stockholm",
    "östermalm": "Stockholm",
    "mölndal": "Göteborg",
    "partille": "Göteborg",
    "kungsbacka": "Göteborg",
    "hisings backa": "Göteborg",
    "hisings kärra": "Göteborg",
    "hisingen": "Göteborg",
    "lund": "Malmö",
    "vellinge": "Malmö",
    "limhamn": "Malmö",
    "knivsta": "Uppsala",
}


def _normalized_keys(raw: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType({normalize(key): value for key, value in raw.items()})


CANONICAL_SPELLINGS = _normalized_keys(CITY_SPELLINGS)
ALIASES = _normalized_keys(CITY_ALIASES)


def canonical_spelling(name: str, table: Mapping[str, str] = CANONICAL_SPELLINGS) -> str:
    """Return the display spelling for a known variant, else ``name`` unchanged."""
    return table.get(normalize(name), name)


@dataclass(frozen=True)
class CityTables:
    """Read-only alias and spelling tables keyed by normalized names."""

    aliases: Mapping[str, str] = field(default_factory=lambda: ALIASES)
    spellings: Mapping[str, str] = field(default_factory=lambda: CANONICAL_SPELLINGS)

    @classmethod
    def build(
        cls,
        *,
        aliases: Optional[Mapping[str, str]] = None,
        spellings: Optional[Mapping[str, str]] = None,
    ) -> "CityTables":
        """Merge extra entries over the built-in tables, normalizing every key."""
        merged_aliases = dict(CITY_ALIASES)
        merged_aliases.update(aliases or {})
        merged_spellings = dict(CITY_SPELLINGS)
        merged_spellings.update(spellings or {})
        return cls(
            aliases=_normalized_keys(merged_aliases),
            spellings=_normalized_keys(merged_spellings),
        )

    def alias_for(self, name: str) -> Optional[str]:
        return self.aliases.get(normalize(name))

    def canonical_spelling(self, name: str) -> str:
        return canonical_spelling(name, self.spellings)

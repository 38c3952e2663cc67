"""Utilities for loading supported cities from the registry CSV."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import List, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

from cityfinder.normalize.text import normalize


class CityConfig(BaseModel):
    """Validated configuration for a single supported city."""

    slug: str = Field(pattern=r"^[a-z][a-z-]*$")
    name: str = Field(min_length=1)
    name_en: str = ""
    region: str = ""
    region_sv: str = ""
    enabled: bool = True

    @model_validator(mode="after")
    def _default_english_name(self) -> "CityConfig":
        if not self.name_en:
            self.name_en = self.name
        return self

    def search_terms(self) -> List[str]:
        """Names events may be filed under: Swedish first, English when different."""
        terms = [self.name]
        if normalize(self.name_en) != normalize(self.name):
            terms.append(self.name_en)
        return terms


def _coerce_bool(value: str | bool | None, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or str(value).strip() == "":
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "y"}


def _prepare_row(row: dict[str, str]) -> dict[str, object]:
    mapped: dict[str, object] = {}
    for key, value in row.items():
        if key is None:
            continue
        mapped[key.strip()] = value.strip() if isinstance(value, str) else value
    mapped["enabled"] = _coerce_bool(mapped.get("enabled"), default=True)
    return mapped


def load_cities(csv_path: Path) -> List[CityConfig]:
    """Load enabled cities from the registry CSV, validating each row."""
    cities: List[CityConfig] = []
    with csv_path.open("r", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for raw in reader:
            if not raw or not raw.get("slug"):
                continue
            prepared = _prepare_row(raw)
            try:
                city = CityConfig(**prepared)
            except ValidationError as exc:
                raise ValueError(f"Invalid city row {prepared.get('slug')}: {exc}") from exc
            if city.enabled:
                cities.append(city)
    return cities


def validate_cities(csv_path: Path) -> List[Tuple[str, bool, str]]:
    """Validate all rows, returning results per city without raising."""
    results: List[Tuple[str, bool, str]] = []
    seen: set[str] = set()
    with csv_path.open("r", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for raw in reader:
            if not raw or not raw.get("slug"):
                continue
            prepared = _prepare_row(raw)
            slug = str(prepared.get("slug"))
            try:
                city = CityConfig(**prepared)
            except ValidationError as exc:
                results.append((slug, False, str(exc)))
                continue
            if city.slug in seen:
                results.append((slug, False, "duplicate slug"))
                continue
            seen.add(city.slug)
            results.append((slug, True, "ok" if city.enabled else "disabled"))
    return results


def city_for_slug(cities: Sequence[CityConfig], slug: str | None) -> CityConfig:
    """Return the city for ``slug``, falling back to the first registered city."""
    if not cities:
        raise ValueError("City registry is empty")
    wanted = (slug or "").lower()
    return next((city for city in cities if city.slug == wanted), cities[0])


def allowed_city_names(cities: Sequence[CityConfig]) -> List[str]:
    """Canonical names in registry order, suitable as a resolver allow-list."""
    return [city.name for city in cities]

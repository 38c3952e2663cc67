"""Comparison keys for place names."""
from __future__ import annotations

import unicodedata


def normalize(value: str) -> str:
    """Fold ``value`` to a case- and diacritic-insensitive comparison key.

    Lower-casing happens before decomposition so that characters whose
    lower-case form carries a combining mark (``"İ"``) fold in one pass.
    """
    decomposed = unicodedata.normalize("NFD", value.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))

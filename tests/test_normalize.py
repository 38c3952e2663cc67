import pytest

from cityfinder.normalize.cities import ALIASES, CANONICAL_SPELLINGS, CityTables, canonical_spelling
from cityfinder.normalize.text import normalize


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Göteborg", "goteborg"),
        ("MALMÖ", "malmo"),
        ("Umeå", "umea"),
        ("Västerås", "vasteras"),
        ("Hisings Kärra", "hisings karra"),
        ("", ""),
    ],
)
def test_normalize_folds_case_and_diacritics(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize("raw", ["Göteborg", "İstanbul", "Ǆemal", "São Paulo", "  Täby  ", "ß", ""])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_normalize_keeps_whitespace():
    assert normalize("  Täby ") == "  taby "


def test_canonical_spelling_restores_diacritics():
    assert canonical_spelling("malmo") == "Malmö"
    assert canonical_spelling("Gothenburg") == "Göteborg"
    assert canonical_spelling("UMEA") == "Umeå"


def test_canonical_spelling_returns_unknown_names_unchanged():
    assert canonical_spelling("Kiruna") == "Kiruna"
    assert canonical_spelling("") == ""


def test_table_keys_are_normalized():
    for key in list(ALIASES) + list(CANONICAL_SPELLINGS):
        assert normalize(key) == key
    assert ALIASES["hisings karra"] == "Göteborg"
    assert ALIASES["taby"] == "Stockholm"


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        ALIASES["kista"] = "Stockholm"  # type: ignore[index]


def test_city_tables_build_merges_extra_entries():
    tables = CityTables.build(aliases={"Järfälla": "Stockholm"}, spellings={"Vaxjo": "Växjö"})
    assert tables.alias_for("JARFALLA") == "Stockholm"
    assert tables.alias_for("Solna") == "Stockholm"
    assert tables.canonical_spelling("växjö") == "Växjö"
    assert tables.canonical_spelling("goteborg") == "Göteborg"
    assert CityTables().alias_for("Järfälla") is None


def test_city_tables_default_construction_uses_builtin_tables():
    tables = CityTables()
    assert tables.alias_for("Solna") == "Stockholm"
    assert tables.canonical_spelling("malmo") == "Malmö"

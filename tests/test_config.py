from pathlib import Path

import pytest

from dppmap.config import (
    DEFAULT_CONTEXT_BASE,
    DEFAULT_CUTOFF,
    MapperConfig,
    load_config,
)
from dppmap.errors import ConfigError
from dppmap.match.score import SYNONYM_MAP


def test_defaults():
    cfg = MapperConfig.from_config(None)
    assert cfg.hopeless_cutoff == DEFAULT_CUTOFF
    assert cfg.synonyms == SYNONYM_MAP
    assert cfg.context_base == DEFAULT_CONTEXT_BASE


def test_default_synonyms_are_a_copy():
    cfg = MapperConfig()
    cfg.synonyms["sku"] = "identifiers.gtin"
    assert "sku" not in SYNONYM_MAP


def test_strict_profile_and_override():
    assert MapperConfig.from_config({"profile": "strict"}).hopeless_cutoff == 1.5
    cfg = MapperConfig.from_config({"profile": "strict", "hopeless_cutoff": 2})
    assert cfg.hopeless_cutoff == 2.0


def test_synonyms_merge_lowercased():
    cfg = MapperConfig.from_config({"synonyms": {"SKU": "identifiers.gtin"}})
    assert cfg.synonyms["sku"] == "identifiers.gtin"
    assert cfg.synonyms["brand"] == "tradeName"


def test_context_base_gets_trailing_slash():
    cfg = MapperConfig.from_config({"context_base": "https://example.org/ctx"})
    assert cfg.context_base == "https://example.org/ctx/"


@pytest.mark.parametrize(
    "raw",
    [
        {"cutoff": 3},
        {"profile": "fuzzy"},
        {"hopeless_cutoff": "high"},
        {"synonyms": ["sku"]},
        ["profile", "strict"],
    ],
)
def test_bad_config_raises(raw):
    with pytest.raises(ConfigError):
        MapperConfig.from_config(raw)


def test_load_config_from_yaml(tmp_path: Path):
    p = tmp_path / "mapper.yaml"
    p.write_text(
        "profile: strict\n"
        "synonyms:\n"
        "  Article No: identifiers.gtin\n",
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.hopeless_cutoff == 1.5
    assert cfg.synonyms["article no"] == "identifiers.gtin"


def test_load_config_missing_and_invalid(tmp_path: Path):
    assert load_config(None) == MapperConfig()
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")
    bad = tmp_path / "bad.yaml"
    bad.write_text("profile: [strict\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(bad)

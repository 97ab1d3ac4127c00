from __future__ import annotations

from pathlib import Path

import pytest

from heart_score.config.loader import ConfigError, build_config, load_config
from heart_score.excel.columns import COLUMN_ALIASES
from heart_score.services.normalization import NormalizationMode


def test_load_config_applies_values(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_file == Path("./data/HEART_Model.xlsx")
    assert cfg.sheet_name is None
    assert cfg.header_row == 1
    assert cfg.aggregate_country == "WORLD"
    assert cfg.percent_scale == "fraction"
    assert cfg.normalization_mode is NormalizationMode.DATASET
    assert (cfg.reference_bounds.lo, cfg.reference_bounds.hi) == (-10.0, 60.0)
    assert cfg.reference_bounds.mode is NormalizationMode.REFERENCE
    assert cfg.null_sentinels == frozenset({"N/A"})


def test_minimal_config_defaults(temp_workdir: Path):
    cfg = build_config({"source_file": "book.xlsx"})
    assert cfg.normalization_mode is NormalizationMode.DATASET
    assert cfg.aggregate_country == "WORLD"
    assert cfg.column_aliases == COLUMN_ALIASES


def test_env_overrides_source_file(temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("HEART_SOURCE_FILE", "/srv/heart/latest.xlsx")
    cfg = build_config({"source_file": "book.xlsx"})
    assert cfg.source_file == Path("/srv/heart/latest.xlsx")


def test_relative_source_resolved_against_base_dir(temp_workdir: Path):
    cfg = build_config({"source_file": "book.xlsx"}, base_dir=Path("/base"))
    assert cfg.source_file == Path("/base/book.xlsx")


def test_missing_config_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "heart.yml"
    p.write_text("source_file: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


def test_non_mapping_root(temp_workdir: Path):
    p = temp_workdir / "config" / "heart.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(p)


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"source_file": ""},
        {"source_file": "x.xlsx", "header_row": 0},
        {"source_file": "x.xlsx", "percent_scale": "ratio"},
        {"source_file": "x.xlsx", "normalization": {"mode": "global"}},
        {"source_file": "x.xlsx", "normalization": {"reference_bounds": [1]}},
        {"source_file": "x.xlsx", "unexpected": 1},
    ],
)
def test_schema_violations(temp_workdir: Path, data):
    with pytest.raises(ConfigError, match="validation failed"):
        build_config(data)


def test_descending_reference_bounds(temp_workdir: Path):
    with pytest.raises(ConfigError, match="ascending"):
        build_config({"source_file": "x.xlsx", "normalization": {"reference_bounds": [60, -10]}})


def test_column_aliases_extend_builtin(temp_workdir: Path):
    cfg = build_config({"source_file": "x.xlsx", "column_aliases": {"pci": ["PCI (USD)"]}})
    assert cfg.column_aliases["pci"][-1] == "PCI (USD)"
    assert cfg.column_aliases["pci"][0] == COLUMN_ALIASES["pci"][0]


def test_column_aliases_unknown_field(temp_workdir: Path):
    with pytest.raises(ConfigError):
        build_config({"source_file": "x.xlsx", "column_aliases": {"nonsense": ["x"]}})


def test_reference_mode_config(temp_workdir: Path):
    cfg = build_config(
        {"source_file": "x.xlsx", "normalization": {"mode": "reference", "reference_bounds": [0, 50]}}
    )
    assert cfg.normalization_mode is NormalizationMode.REFERENCE
    assert cfg.reference_bounds.hi == 50.0

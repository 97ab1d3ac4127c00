from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from heart_score.config.loader import HeartConfig
from heart_score.models import CountryRecord, GlobalMetrics, RowData
from heart_score.models.country_record import HEART_VALUE_BASES
from heart_score.services.derivation import derive_records


def _alpha_record(world, alpha) -> CountryRecord:
    rows = [RowData(row_number=2, values=world), RowData(row_number=3, values=alpha)]
    return derive_records(rows, HeartConfig(source_file=Path("unused.xlsx"))).records[0]


def test_record_is_immutable(world, alpha):
    rec = _alpha_record(world, alpha)
    with pytest.raises(dataclasses.FrozenInstanceError):
        rec.heart_value = 0.1  # type: ignore[misc]


def test_global_metrics_property(world, alpha):
    rec = _alpha_record(world, alpha)
    assert rec.global_metrics == GlobalMetrics(global_gdp=1e14, global_population=8e9, global_trade=3e13)


def test_to_dict_has_every_field(world, alpha):
    d = _alpha_record(world, alpha).to_dict()
    assert set(d) == {f.name for f in dataclasses.fields(CountryRecord)}
    assert d["country"] == "Alpha"
    assert d["heart_value_basis"] in HEART_VALUE_BASES


def test_global_metrics_default_zero():
    assert GlobalMetrics() == GlobalMetrics(0.0, 0.0, 0.0)


def test_row_data_frozen():
    row = RowData(row_number=2, values={"COUNTRY": "Alpha"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        row.row_number = 3  # type: ignore[misc]

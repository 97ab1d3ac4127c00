from __future__ import annotations

import pytest

from heart_score.models.country_record import GlobalMetrics
from heart_score.services.dataset import HeartDataset
from heart_score.services.normalization import REFERENCE_BOUNDS, HeartValueBounds, NormalizationMode
from heart_score.services.summary import (
    format_currency,
    format_large_number,
    format_percent,
    render_summary_line,
)


def _dataset(**kw) -> HeartDataset:
    base = dict(records=(), global_metrics=GlobalMetrics(), bounds=REFERENCE_BOUNDS)
    base.update(kw)
    return HeartDataset(**base)


def test_render_empty():
    assert render_summary_line(_dataset()) == (
        "SUMMARY countries=0 skipped=0 anomalies=0 "
        "basis=sheet:0/dataset:0/reference:0 hv_bounds=-10..60 elapsed_sec=0"
    )


def test_render_counts_and_bounds():
    ds = _dataset(
        bounds=HeartValueBounds(lo=0.0, hi=34.6, mode=NormalizationMode.DATASET),
        skipped_rows=2,
        basis_counts={"dataset": 2, "sheet": 1},
        elapsed_seconds=1.25,
    )
    line = render_summary_line(ds, anomalies=4)
    assert "skipped=2" in line
    assert "anomalies=4" in line
    assert "basis=sheet:1/dataset:2/reference:0" in line
    assert "hv_bounds=0..34.6" in line
    assert line.endswith("elapsed_sec=1.25")


@pytest.mark.parametrize(
    "value, text",
    [
        (25e12, "$25.00T"),
        (1.5e9, "$1.50B"),
        (-1.5e9, "-$1.50B"),
        (48750, "$48.75K"),
        (999, "$999.00"),
        (0, "$0.00"),
    ],
)
def test_format_currency(value, text):
    assert format_currency(value) == text


def test_format_percent():
    assert format_percent(5.2) == "5.20%"
    assert format_percent(0.025, fraction=True) == "2.50%"


def test_format_large_number():
    assert format_large_number(1.2e9) == "1B"
    assert format_large_number(45_000) == "45K"
    assert format_large_number(999) == "999"

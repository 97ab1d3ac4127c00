from __future__ import annotations

import math

import pytest

from heart_score.excel.coercion import (
    coerce_currency,
    coerce_fraction,
    coerce_number,
    coerce_percent_points,
    coerce_text,
    is_blank,
    parse_number,
    parse_percent_points,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$1,234.50", 1234.5),
        ("", 0.0),
        (None, 0.0),
        ("  42 ", 42.0),
        ("$ 25,000,000,000,000", 25e12),
        ("-$5,000", -5000.0),
        (1234.5, 1234.5),
        (7, 7.0),
        ("n/a", 0.0),
        (float("nan"), 0.0),
    ],
)
def test_coerce_currency_formats(raw, expected):
    assert coerce_currency(raw) == expected


def test_coerce_number_strips_whitespace_and_thousands():
    assert coerce_number(" 8,000,000,000 ") == 8e9
    assert coerce_number("0.025") == 0.025
    assert coerce_number("abc") == 0.0
    assert coerce_number("   ") == 0.0


def test_coerce_number_keeps_dollar_sign_unparseable():
    # "$" は通貨列のみ許容
    assert coerce_number("$12") == 0.0
    assert coerce_currency("$12") == 12.0


def test_parse_number_distinguishes_absent_from_zero():
    assert parse_number(None) is None
    assert parse_number("") is None
    assert parse_number("garbage") is None
    assert parse_number("0") == 0.0
    assert parse_number(0) == 0.0


def test_parse_number_rejects_non_finite_and_bool():
    assert parse_number("inf") is None
    assert parse_number(float("inf")) is None
    assert parse_number(True) is None


def test_percent_points_fraction_scale():
    assert coerce_percent_points(0.052, "fraction") == pytest.approx(5.2)
    assert coerce_percent_points("5.2%", "fraction") == pytest.approx(5.2)
    assert coerce_percent_points(None, "fraction") == 0.0


def test_percent_points_points_scale():
    assert coerce_percent_points(5.2, "points") == 5.2
    assert coerce_percent_points("5.2 %", "points") == 5.2


def test_percent_unknown_scale_raises():
    with pytest.raises(ValueError):
        parse_percent_points(1, "basis_points")


def test_fraction_from_either_scale():
    assert coerce_fraction(0.025, "fraction") == pytest.approx(0.025)
    assert coerce_fraction(2.5, "points") == pytest.approx(0.025)
    assert coerce_fraction("2.5%", "fraction") == pytest.approx(0.025)
    assert coerce_fraction("", "points") == 0.0


def test_is_blank_with_sentinels():
    assert is_blank(None)
    assert is_blank(math.nan)
    assert is_blank("  ")
    assert is_blank("n/a", {"N/A"})
    assert not is_blank("n/a")
    assert not is_blank(0)


def test_coerce_text():
    assert coerce_text("  Alpha ") == "Alpha"
    assert coerce_text(None) is None
    assert coerce_text(3.0) == "3"
    assert coerce_text("") is None

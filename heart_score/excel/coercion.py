from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

"""Cell coercion for loosely-typed spreadsheet values.

The HEART workbook mixes numbers, currency strings ("$1,234.50"), percentages
stored either as decimals (0.052) or whole numbers (5.2), and blank cells that
stand for "unknown". Everything here is total: absent or malformed input maps
to ``None`` (parse_*) or ``0.0`` (coerce_*), never to an exception.
"""

__all__ = [
    "PERCENT_SCALES",
    "is_blank",
    "parse_number",
    "coerce_number",
    "coerce_currency",
    "parse_percent_points",
    "coerce_percent_points",
    "parse_fraction",
    "coerce_fraction",
    "coerce_text",
]

PERCENT_SCALES = ("fraction", "points")

# "$", thousands separators and any whitespace (incl. NBSP)
_CURRENCY_NOISE = re.compile(r"[$,\s]")
_NUMBER_NOISE = re.compile(r"[,\s]")


def is_blank(value: Any, null_sentinels: Iterable[str] | None = None) -> bool:
    """True for None, NaN, empty/whitespace-only strings and configured sentinels."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        stripped = value.strip()
        if stripped == "":
            return True
        if null_sentinels and stripped.upper() in {s.upper() for s in null_sentinels}:
            return True
    return False


def parse_number(value: Any, *, currency: bool = False) -> float | None:
    """Parse a cell into a finite float, or None when absent/unparseable.

    ``currency=True`` additionally strips a ``$`` symbol. A trailing ``%`` is
    accepted and dropped; the caller decides what unit the number is in.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    text = str(value)
    noise = _CURRENCY_NOISE if currency else _NUMBER_NOISE
    cleaned = noise.sub("", text)
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    if cleaned == "":
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    # "nan" / "inf" parse as floats but carry no data
    return number if math.isfinite(number) else None


def coerce_number(value: Any) -> float:
    """Numeric coercion: absent, empty or unparseable -> 0.0."""
    number = parse_number(value)
    return 0.0 if number is None else number


def coerce_currency(value: Any) -> float:
    """Currency coercion: ``"$1,234.50"`` -> 1234.5, ``""``/None -> 0.0."""
    number = parse_number(value, currency=True)
    return 0.0 if number is None else number


def _has_percent_sign(value: Any) -> bool:
    return isinstance(value, str) and value.strip().endswith("%")


def parse_percent_points(value: Any, scale: str) -> float | None:
    """Percent cell -> percentage points (5.2 means 5.2 %), None when absent.

    ``scale`` describes how bare numbers are stored in the sheet: ``fraction``
    (0.052) or ``points`` (5.2). An explicit ``%`` suffix always means points.
    """
    if scale not in PERCENT_SCALES:
        raise ValueError(f"unknown percent scale: {scale!r}")
    number = parse_number(value)
    if number is None:
        return None
    if _has_percent_sign(value) or scale == "points":
        return number
    return number * 100


def coerce_percent_points(value: Any, scale: str) -> float:
    number = parse_percent_points(value, scale)
    return 0.0 if number is None else number


def parse_fraction(value: Any, scale: str) -> float | None:
    """Percent cell -> decimal fraction (0.025 for 2.5 %), None when absent."""
    points = parse_percent_points(value, scale)
    return None if points is None else points / 100


def coerce_fraction(value: Any, scale: str) -> float:
    number = parse_fraction(value, scale)
    return 0.0 if number is None else number


def coerce_text(value: Any) -> str | None:
    """Stripped string for text cells; None when blank."""
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # Excel hands back 1.0 for a cell typed as "1"
        return str(int(value))
    return str(value).strip()

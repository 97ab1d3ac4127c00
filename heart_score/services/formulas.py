from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from collections.abc import Callable
from typing import TypeVar

from ..models.grades import affordability_grade

"""HEART formulas.

Pure arithmetic on already-coerced inputs. Every function is total: zero
denominators resolve to a defined value instead of raising or returning a
non-finite number. Percentages are whole points except ``inflation``, which
is a decimal fraction.
"""

__all__ = [
    "prefer",
    "share_pct",
    "adjusted_pci",
    "interest_payment",
    "adjusted_debt_to_gdp",
    "adjusted_hdi",
    "heart_affordability_value",
    "heart_affordability_ranking",
    "raw_heart_value",
    "normalize_heart_value",
    "format_heart_score",
]

T = TypeVar("T")


def prefer(source: T | None, fallback: Callable[[], T]) -> T:
    """Sheet-supplied value wins verbatim; otherwise compute the fallback.

    ``source`` is None only when the sheet had no usable value, so an
    explicit 0 in the sheet is authoritative.
    """
    if source is not None:
        return source
    return fallback()


def share_pct(part: float, whole: float) -> float:
    """``part`` as percentage points of ``whole``; 0 when whole is 0."""
    if whole == 0:
        return 0.0
    result = part / whole * 100
    return result if math.isfinite(result) else 0.0


def adjusted_pci(pci: float, inflation: float) -> float:
    """APCI = PCI x (1 - inflation), inflation as a decimal fraction."""
    return pci * (1 - inflation)


def interest_payment(interest_rate_pct: float, total_debt: float) -> float:
    return (interest_rate_pct / 100) * total_debt


def adjusted_debt_to_gdp(total_debt: float, interest: float, gdp: float) -> float:
    """(debt + interest) / GDP in percentage points; 0 for a zero GDP."""
    return share_pct(total_debt + interest, gdp)


def adjusted_hdi(hdi: float, gini: float) -> float:
    return hdi - gini


def heart_affordability_value(apci: float, ahdi: float) -> float:
    return apci * ahdi


def heart_affordability_ranking(hav: float) -> str:
    return affordability_grade(hav).grade


def raw_heart_value(
    housing_pct: float,
    health_pct: float,
    energy_pct: float,
    education_pct: float,
    global_gdp_share_pct: float,
    interest_payment_to_gdp_pct: float,
    trade_balance_to_gdp_pct: float,
) -> float:
    """HV_raw = housing + health + energy + education + global share - interest + trade balance."""
    return (
        housing_pct
        + health_pct
        + energy_pct
        + education_pct
        + global_gdp_share_pct
        - interest_payment_to_gdp_pct
        + trade_balance_to_gdp_pct
    )


def normalize_heart_value(raw: float, lo: float, hi: float) -> float:
    """Min-max normalize into [0, 1]; 0.5 when the bounds coincide."""
    if hi == lo:
        return 0.5
    return max(0.0, min(1.0, (raw - lo) / (hi - lo)))


def format_heart_score(heart_value: float, ranking: str) -> str:
    """e.g. 0.76 + "C" -> "0.76C".

    Two decimals rounded half-up on the exact binary value, so 0.125 shows
    as "0.13" rather than the round-half-even "0.12".
    """
    rounded = Decimal(heart_value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{rounded}{ranking}"

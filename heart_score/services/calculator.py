from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..excel.coercion import coerce_number
from ..models.grades import resilience_for
from . import formulas as f
from .normalization import REFERENCE_BOUNDS, HeartValueBounds

"""Manual-entry HEART calculator.

Same formulas as the batch path, without a dataset: the Heart Value is
always normalized against fixed reference bounds.

Inputs are free-form (strings or numbers) and go through the coercion
layer. ``unit`` scales GDP and, in ``absolute`` mode, the sector amounts;
in ``percentage`` mode sector inputs are already percent of GDP. The global
GDP share is always a percentage. Inflation is entered in percentage points
(2.5 for 2.5 %).
"""

__all__ = [
    "UNIT_MULTIPLIERS",
    "INPUT_MODES",
    "CalculatorInput",
    "CalculatorResult",
    "calculate",
]

UNIT_MULTIPLIERS: dict[str, float] = {
    "K": 1e3,
    "M": 1e6,
    "B": 1e9,
    "T": 1e12,
}

INPUT_MODES = ("percentage", "absolute")


@dataclass(frozen=True)
class CalculatorInput:
    gdp: Any = None
    unit: str = "B"
    input_mode: str = "percentage"
    # Heart Value terms
    housing: Any = None
    health: Any = None
    energy: Any = None
    education: Any = None
    global_gdp_share: Any = None
    interest_payment: Any = None
    trade_balance: Any = None
    # affordability
    pci: Any = None
    inflation: Any = None
    hdi: Any = None
    gini: Any = None

    def __post_init__(self) -> None:
        if self.unit not in UNIT_MULTIPLIERS:
            raise ValueError(f"unit must be one of {sorted(UNIT_MULTIPLIERS)}: {self.unit!r}")
        if self.input_mode not in INPUT_MODES:
            raise ValueError(f"input_mode must be one of {INPUT_MODES}: {self.input_mode!r}")


@dataclass(frozen=True)
class CalculatorResult:
    raw_heart_value: float
    heart_value: float
    adjusted_pci: float
    adjusted_hdi: float
    heart_affordability_value: float
    heart_affordability_ranking: str
    heart_score: str
    resilience: str


def _to_points(value: Any, gdp: float, inputs: CalculatorInput) -> float:
    number = coerce_number(value)
    if inputs.input_mode == "percentage":
        return number
    return f.share_pct(number * UNIT_MULTIPLIERS[inputs.unit], gdp)


def calculate(
    inputs: CalculatorInput,
    bounds: HeartValueBounds = REFERENCE_BOUNDS,
) -> CalculatorResult | None:
    """Derive a HEART Score from manual inputs; None when GDP is zero or missing."""
    gdp = coerce_number(inputs.gdp) * UNIT_MULTIPLIERS[inputs.unit]
    if gdp == 0:
        return None

    raw_hv = f.raw_heart_value(
        _to_points(inputs.housing, gdp, inputs),
        _to_points(inputs.health, gdp, inputs),
        _to_points(inputs.energy, gdp, inputs),
        _to_points(inputs.education, gdp, inputs),
        coerce_number(inputs.global_gdp_share),
        _to_points(inputs.interest_payment, gdp, inputs),
        _to_points(inputs.trade_balance, gdp, inputs),
    )
    heart_value = bounds.normalize(raw_hv)

    apci = f.adjusted_pci(coerce_number(inputs.pci), coerce_number(inputs.inflation) / 100)
    ahdi = f.adjusted_hdi(coerce_number(inputs.hdi), coerce_number(inputs.gini))
    hav = f.heart_affordability_value(apci, ahdi)
    har = f.heart_affordability_ranking(hav)

    return CalculatorResult(
        raw_heart_value=raw_hv,
        heart_value=heart_value,
        adjusted_pci=apci,
        adjusted_hdi=ahdi,
        heart_affordability_value=hav,
        heart_affordability_ranking=har,
        heart_score=f.format_heart_score(heart_value, har),
        resilience=resilience_for(heart_value),
    )

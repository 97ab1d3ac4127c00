from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

"""CountryRecord and GlobalMetrics domain models.

CountryRecord is the finished, read-only per-country entity handed to
consumers. Units:
- currency amounts in USD
- ``*_pct`` fields in whole percentage points (5.2 == 5.2 %)
- ``inflation`` as a decimal fraction (0.025 == 2.5 %)
- hdi / gini / adjusted_hdi / heart_value on 0-1
"""

__all__ = [
    "GlobalMetrics",
    "CountryRecord",
    "HEART_VALUE_BASES",
]

# Where a record's normalized heart_value came from
HEART_VALUE_BASES = ("sheet", "dataset", "reference")


@dataclass(frozen=True)
class GlobalMetrics:
    """World-level aggregates read once from the aggregate row."""
    global_gdp: float = 0.0
    global_population: float = 0.0
    global_trade: float = 0.0


@dataclass(frozen=True)
class CountryRecord:
    # identity
    s_no: int
    country: str

    # macro
    global_gdp: float
    country_gdp: float
    gdp_rank: int
    gdp_share_pct: float
    global_population: float
    population: float
    population_share_pct: float
    per_capita_income: float
    inflation: float  # decimal fraction
    adjusted_pci: float

    # debt
    interest_rate_pct: float
    total_debt: float
    interest_payment: float
    adjusted_debt: float
    interest_payment_to_gdp_pct: float
    adjusted_debt_to_gdp_pct: float

    # trade
    global_trade: float
    trade: float
    trade_share_pct: float
    trade_to_gdp_pct: float
    trade_balance: float  # signed
    trade_balance_to_gdp_pct: float

    # sectors
    housing_contribution: float
    housing_pct: float
    housing_units: float
    houses_per_person: float
    health_contribution: float
    health_pct: float
    energy_contribution: float
    energy_pct: float
    education_contribution: float
    education_pct: float

    # composite scores
    hdi: float
    gini: float
    adjusted_hdi: float
    heart_affordability_value: float
    heart_affordability_ranking: str
    raw_heart_value: float
    heart_value: float
    heart_value_basis: str
    heart_score: str
    description: str = ""

    @property
    def global_metrics(self) -> GlobalMetrics:
        return GlobalMetrics(
            global_gdp=self.global_gdp,
            global_population=self.global_population,
            global_trade=self.global_trade,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..logging.anomaly_log import AnomalyLogBuffer
from ..models.anomaly_record import AnomalyRecord
from .coercion import (
    coerce_text,
    is_blank,
    parse_fraction,
    parse_number,
    parse_percent_points,
)

"""Logical field -> on-disk header spellings, and per-row resolution.

Header names in the HEART workbook drift between editions: leading/trailing
spaces, double spaces, typos ("Intrest", "balnce"). The alias table below is
part of the input format; extend it (or ``column_aliases`` in the config)
instead of patching formula code.
"""

__all__ = [
    "COLUMN_ALIASES",
    "PERCENT_FIELDS",
    "CURRENCY_FIELDS",
    "match_headers",
    "merge_aliases",
    "normalize_header",
    "resolve_cell",
    "RowReader",
]

logger = logging.getLogger(__name__)

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    # identity
    "s_no": ("SR NO.", "SR NO", "S.No"),
    "country": ("COUNTRY", "Country"),
    # global (aggregate row only)
    "global_gdp": (
        " Global GDP (in USD)",
        "Global GDP (in USD)",
        " Global GDP (in USD) ",
        "Global GDP (in USD) ",
    ),
    "global_population": ("Total Global Population", " Total Global Population"),
    "global_trade": ("Total Global Trade (in USD)", " Total Global Trade (in USD)"),
    # macro
    "gdp": (" Country GDP (in USD)", "Country GDP (in USD)"),
    "gdp_rank": ("Country GDP Global Ranking",),
    "gdp_share": ("Country GDP ( %)To Global GDP ", "Country GDP ( %)To Global GDP"),
    "population": ("Country population",),
    "population_share": ("Country population To global Population ( %)",),
    "pci": ("Per Capita income(PCI)", "Per Capita income (PCI)"),
    "inflation": ("Country inflation ( %)",),
    "adjusted_pci": ("Adjusted PCI (APCI)", "Adjusted PCI"),
    # debt
    "interest_rate": ("Intrest Rate ( %)", "Interest Rate ( %)"),
    "total_debt": ("  Country Total Debt (in USD)", "Country Total Debt (in USD)"),
    "interest_payment": (" Country Interest Payment (in USD)", "Country Interest Payment (in USD)"),
    "adjusted_debt": (" Country Adjusted Debt (in USD)", "Country Adjusted Debt (in USD)"),
    "interest_payment_to_gdp": (
        "Intrest Payment to Country GDP( %)",
        "Interest Payment to Country GDP( %)",
    ),
    "adjusted_debt_to_gdp": ("Country Adjusted Debt to GDP(%)",),
    # trade
    "trade": (" Country Trade (in USD)", "Country Trade (in USD)"),
    "trade_share": ("Country % to  global trade", "Country % to global trade"),
    "trade_to_gdp": ("Trade Contribution to GDP ( %)",),
    "trade_balance": (" Trade Balance (in USD; + - )", "Trade Balance (in USD; + - )"),
    "trade_balance_to_gdp": ("Trade balnce to GDP ( %)", "Trade balance to GDP ( %)"),
    # sectors
    "housing": (" Housing Contribution to GDP (in USD)", "Housing Contribution to GDP (in USD)"),
    "housing_pct": ("Housing Contribution to GDP ( %)",),
    "housing_units": ("Country Housing Units",),
    "houses_per_person": ("Country House per Person ", "Country House per Person"),
    "health": (" Health Contribution to GDP", "Health Contribution to GDP"),
    "health_pct": ("Health Contribution to GDP ( %)",),
    "energy": (" Energy Contribution To GDP", "Energy Contribution To GDP"),
    "energy_pct": ("Energy Contribution To GDP  ( %)", "Energy Contribution To GDP ( %)"),
    "education": (" Education Contribution To GDP", "Education Contribution To GDP"),
    "education_pct": ("Education Contribution To GDP ( %)",),
    # composite
    "heart_value": ("Heart Value (HV--Range; 0-1)",),
    "hdi": ("HDI(Range: 0-1)", "HDI (Range: 0-1)"),
    "gini": ("GINI (Range: 0-1)", "GINI(Range: 0-1)"),
    "adjusted_hdi": ("Adjusted HDI (AHDI) == HDI-GINI",),
    "heart_affordability_value": ("HEART Affordability Value (APCI*AHDI)",),
    "heart_affordability_ranking": (
        "Heart  AFFORDABILITY RANKING (HAR)",
        "Heart AFFORDABILITY RANKING (HAR)",
    ),
    "heart_score": ("HEART SCORE (HV&HAR)",),
    "description": ("Brief Description of HEART Scores",),
}

# Stored as a fraction or whole number depending on percent_scale
PERCENT_FIELDS = frozenset({
    "gdp_share",
    "population_share",
    "inflation",
    "interest_rate",
    "interest_payment_to_gdp",
    "adjusted_debt_to_gdp",
    "trade_share",
    "trade_to_gdp",
    "trade_balance_to_gdp",
    "housing_pct",
    "health_pct",
    "energy_pct",
    "education_pct",
})

# May carry "$" and thousands separators
CURRENCY_FIELDS = frozenset({
    "global_gdp",
    "global_trade",
    "gdp",
    "pci",
    "adjusted_pci",
    "total_debt",
    "interest_payment",
    "adjusted_debt",
    "trade",
    "trade_balance",
    "housing",
    "health",
    "energy",
    "education",
    "heart_affordability_value",
})

_WS = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """Collapse runs of whitespace, strip, casefold."""
    return _WS.sub(" ", str(header)).strip().casefold()


def merge_aliases(extra: Mapping[str, Iterable[str]] | None) -> dict[str, tuple[str, ...]]:
    """Built-in table with configured spellings appended after the known ones."""
    merged = dict(COLUMN_ALIASES)
    if not extra:
        return merged
    for field, headers in extra.items():
        if field not in merged:
            raise KeyError(f"unknown logical field in column_aliases: {field}")
        known = merged[field]
        merged[field] = known + tuple(h for h in headers if h not in known)
    return merged


def resolve_cell(
    row: Mapping[str, Any],
    field: str,
    aliases: Mapping[str, tuple[str, ...]] | None = None,
    null_sentinels: Iterable[str] | None = None,
) -> Any:
    """Return the first non-blank value among the field's header spellings.

    Exact spellings are tried in table order first; when none carries a value
    the same spellings are compared whitespace/case-insensitively. None when
    nothing matches.
    """
    table = aliases if aliases is not None else COLUMN_ALIASES
    candidates = table[field]
    for header in candidates:
        if header in row and not is_blank(row[header], null_sentinels):
            return row[header]
    wanted = [normalize_header(h) for h in candidates]
    by_normalized: dict[str, list[str]] = {}
    for key in row:
        by_normalized.setdefault(normalize_header(key), []).append(key)
    for norm in wanted:
        for key in by_normalized.get(norm, []):
            if not is_blank(row[key], null_sentinels):
                return row[key]
    return None


def match_headers(
    columns: Iterable[str],
    aliases: Mapping[str, tuple[str, ...]] | None = None,
) -> dict[str, str | None]:
    """Which sheet header each logical field would read from (ignoring cell values)."""
    table = aliases if aliases is not None else COLUMN_ALIASES
    present = list(columns)
    by_normalized = {normalize_header(c): c for c in reversed(present)}
    matched: dict[str, str | None] = {}
    for field, candidates in table.items():
        hit = next((h for h in candidates if h in present), None)
        if hit is None:
            hit = next(
                (by_normalized[normalize_header(h)] for h in candidates if normalize_header(h) in by_normalized),
                None,
            )
        matched[field] = hit
    return matched


class RowReader:
    """Typed access to one RawRow with anomaly recording.

    ``number``/``currency``/``percent``/``fraction`` return None when the
    sheet holds no usable value; a non-blank cell that fails to parse is
    recorded as CELL_MALFORMED and also reads as None.
    """

    def __init__(
        self,
        row: Mapping[str, Any],
        *,
        aliases: Mapping[str, tuple[str, ...]] | None = None,
        percent_scale: str = "fraction",
        null_sentinels: Iterable[str] | None = None,
        sheet: str = "",
        row_number: int = -1,
        anomalies: AnomalyLogBuffer | None = None,
    ) -> None:
        self._row = row
        self._aliases = aliases if aliases is not None else COLUMN_ALIASES
        self._percent_scale = percent_scale
        self._null_sentinels = set(null_sentinels or ())
        self._sheet = sheet
        self.row_number = row_number
        self._anomalies = anomalies
        self.country = coerce_text(self.raw("country")) or ""

    def raw(self, field: str) -> Any:
        return resolve_cell(self._row, field, self._aliases, self._null_sentinels)

    def _malformed(self, field: str, value: Any) -> None:
        logger.debug(f"row {self.row_number} ({self.country}): malformed {field}={value!r} -> 0")
        if self._anomalies is not None:
            self._anomalies.append(
                AnomalyRecord.create(
                    self._sheet, self.row_number, self.country, field,
                    "CELL_MALFORMED", f"unparseable value {value!r}",
                )
            )

    def _parsed(self, field: str, parse) -> float | None:
        value = self.raw(field)
        if value is None:
            return None
        number = parse(value)
        if number is None:
            self._malformed(field, value)
        return number

    def number(self, field: str) -> float | None:
        return self._parsed(field, parse_number)

    def currency(self, field: str) -> float | None:
        return self._parsed(field, lambda v: parse_number(v, currency=True))

    def percent(self, field: str) -> float | None:
        """Percentage points regardless of how the sheet stores them."""
        return self._parsed(field, lambda v: parse_percent_points(v, self._percent_scale))

    def fraction(self, field: str) -> float | None:
        return self._parsed(field, lambda v: parse_fraction(v, self._percent_scale))

    def value(self, field: str) -> float | None:
        """Parse a field the way its column is typed (percent, currency or plain)."""
        if field in PERCENT_FIELDS:
            return self.percent(field)
        if field in CURRENCY_FIELDS:
            return self.currency(field)
        return self.number(field)

    def text(self, field: str) -> str | None:
        return coerce_text(self.raw(field))

    def anomaly(self, field: str, kind: str, detail: str) -> None:
        logger.warning(f"row {self.row_number} ({self.country}): {kind} {field}: {detail}")
        if self._anomalies is not None:
            self._anomalies.append(
                AnomalyRecord.create(self._sheet, self.row_number, self.country, field, kind, detail)
            )

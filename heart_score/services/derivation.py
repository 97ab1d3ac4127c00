from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..config.loader import HeartConfig
from ..excel.columns import RowReader
from ..logging.anomaly_log import AnomalyLogBuffer
from ..models.anomaly_record import AnomalyRecord
from ..models.country_record import CountryRecord, GlobalMetrics
from ..models.row_data import RowData
from . import formulas as f
from .normalization import HeartValueBounds, resolve_bounds
from .progress import RowProgress

"""Derivation engine: RawRow -> CountryRecord.

Two passes:

1. Per row: coerce cells, then compute every derived field. Each derived
   field goes through ``formulas.prefer`` so a value already present in the
   sheet is kept verbatim and the local formula only fills gaps.
2. Per dataset: choose the Heart Value bounds (dataset min/max or the fixed
   reference) once, then normalize every row lacking a sheet HV and
   assemble the immutable records.
"""

__all__ = [
    "RowDraft",
    "DerivationResult",
    "read_global_metrics",
    "derive_row",
    "finalize_row",
    "derive_records",
]

logger = logging.getLogger(__name__)

# Tolerance for cross-checking sheet overrides against recomputed values
_AHDI_TOLERANCE = 1e-6


def _z(value: float | None) -> float:
    return 0.0 if value is None else value


@dataclass(frozen=True)
class RowDraft:
    """First-pass result: everything except the normalized Heart Value."""
    row_number: int
    fields: dict[str, Any]
    sheet_heart_value: float | None
    sheet_heart_score: str | None


@dataclass(frozen=True)
class DerivationResult:
    records: tuple[CountryRecord, ...]
    global_metrics: GlobalMetrics
    bounds: HeartValueBounds
    skipped_rows: int = 0
    basis_counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "basis_counts", MappingProxyType(dict(self.basis_counts)))


def read_global_metrics(reader: RowReader) -> GlobalMetrics:
    """Global figures from the aggregate row; its own country columns fill gaps."""
    return GlobalMetrics(
        global_gdp=f.prefer(reader.currency("global_gdp"), lambda: _z(reader.currency("gdp"))),
        global_population=f.prefer(reader.number("global_population"), lambda: _z(reader.number("population"))),
        global_trade=f.prefer(reader.currency("global_trade"), lambda: _z(reader.currency("trade"))),
    )


def derive_row(reader: RowReader, globals_: GlobalMetrics) -> RowDraft:
    r = reader
    gdp = _z(r.currency("gdp"))

    # income
    pci = _z(r.currency("pci"))
    inflation = _z(r.fraction("inflation"))
    apci = f.prefer(r.currency("adjusted_pci"), lambda: f.adjusted_pci(pci, inflation))

    # debt
    rate_pct = _z(r.percent("interest_rate"))
    debt = _z(r.currency("total_debt"))
    interest = f.prefer(r.currency("interest_payment"), lambda: f.interest_payment(rate_pct, debt))
    adjusted_debt = f.prefer(r.currency("adjusted_debt"), lambda: debt + interest)
    interest_to_gdp = f.prefer(r.percent("interest_payment_to_gdp"), lambda: f.share_pct(interest, gdp))
    adjusted_debt_to_gdp = f.prefer(
        r.percent("adjusted_debt_to_gdp"), lambda: f.adjusted_debt_to_gdp(debt, interest, gdp)
    )

    # shares of world totals
    population = _z(r.number("population"))
    gdp_share = f.prefer(r.percent("gdp_share"), lambda: f.share_pct(gdp, globals_.global_gdp))
    population_share = f.prefer(
        r.percent("population_share"), lambda: f.share_pct(population, globals_.global_population)
    )

    # trade
    trade = _z(r.currency("trade"))
    trade_balance = _z(r.currency("trade_balance"))
    trade_share = f.prefer(r.percent("trade_share"), lambda: f.share_pct(trade, globals_.global_trade))
    trade_to_gdp = f.prefer(r.percent("trade_to_gdp"), lambda: f.share_pct(trade, gdp))
    trade_balance_to_gdp = f.prefer(
        r.percent("trade_balance_to_gdp"), lambda: f.share_pct(trade_balance, gdp)
    )

    # sectors
    sectors: dict[str, float] = {}
    for sector in ("housing", "health", "energy", "education"):
        amount = _z(r.currency(sector))
        sectors[f"{sector}_contribution"] = amount
        sectors[f"{sector}_pct"] = f.prefer(r.percent(f"{sector}_pct"), lambda a=amount: f.share_pct(a, gdp))
    housing_units = _z(r.number("housing_units"))
    houses_per_person = f.prefer(
        r.number("houses_per_person"),
        lambda: housing_units / population if population else 0.0,
    )

    # affordability
    hdi = _z(r.number("hdi"))
    gini = _z(r.number("gini"))
    computed_ahdi = f.adjusted_hdi(hdi, gini)
    sheet_ahdi = r.number("adjusted_hdi")
    if sheet_ahdi is not None and (hdi or gini) and not math.isclose(
        sheet_ahdi, computed_ahdi, abs_tol=_AHDI_TOLERANCE
    ):
        r.anomaly("adjusted_hdi", "OVERRIDE_MISMATCH", f"sheet {sheet_ahdi} != hdi-gini {computed_ahdi:.6f}")
    ahdi = f.prefer(sheet_ahdi, lambda: computed_ahdi)
    hav = f.prefer(r.currency("heart_affordability_value"), lambda: f.heart_affordability_value(apci, ahdi))
    computed_har = f.heart_affordability_ranking(hav)
    sheet_har = r.text("heart_affordability_ranking")
    if sheet_har is not None and sheet_har != computed_har:
        r.anomaly(
            "heart_affordability_ranking", "OVERRIDE_MISMATCH",
            f"sheet {sheet_har!r} but HAV {hav:.2f} grades {computed_har!r}",
        )
    har = f.prefer(sheet_har, lambda: computed_har)

    raw_hv = f.raw_heart_value(
        sectors["housing_pct"],
        sectors["health_pct"],
        sectors["energy_pct"],
        sectors["education_pct"],
        gdp_share,
        interest_to_gdp,
        trade_balance_to_gdp,
    )

    fields: dict[str, Any] = {
        "s_no": int(_z(r.number("s_no"))),
        "country": r.country,
        "global_gdp": globals_.global_gdp,
        "country_gdp": gdp,
        "gdp_rank": int(_z(r.number("gdp_rank"))),
        "gdp_share_pct": gdp_share,
        "global_population": globals_.global_population,
        "population": population,
        "population_share_pct": population_share,
        "per_capita_income": pci,
        "inflation": inflation,
        "adjusted_pci": apci,
        "interest_rate_pct": rate_pct,
        "total_debt": debt,
        "interest_payment": interest,
        "adjusted_debt": adjusted_debt,
        "interest_payment_to_gdp_pct": interest_to_gdp,
        "adjusted_debt_to_gdp_pct": adjusted_debt_to_gdp,
        "global_trade": globals_.global_trade,
        "trade": trade,
        "trade_share_pct": trade_share,
        "trade_to_gdp_pct": trade_to_gdp,
        "trade_balance": trade_balance,
        "trade_balance_to_gdp_pct": trade_balance_to_gdp,
        **sectors,
        "housing_units": housing_units,
        "houses_per_person": houses_per_person,
        "hdi": hdi,
        "gini": gini,
        "adjusted_hdi": ahdi,
        "heart_affordability_value": hav,
        "heart_affordability_ranking": har,
        "raw_heart_value": raw_hv,
        "description": r.text("description") or "",
    }
    return RowDraft(
        row_number=r.row_number,
        fields=fields,
        sheet_heart_value=r.number("heart_value"),
        sheet_heart_score=r.text("heart_score"),
    )


def finalize_row(draft: RowDraft, bounds: HeartValueBounds) -> CountryRecord:
    """Second pass: normalized Heart Value and HEART Score."""
    if draft.sheet_heart_value is not None:
        heart_value, basis = draft.sheet_heart_value, "sheet"
    else:
        heart_value, basis = bounds.normalize(draft.fields["raw_heart_value"]), bounds.mode.value
    har = draft.fields["heart_affordability_ranking"]
    score = f.prefer(draft.sheet_heart_score, lambda: f.format_heart_score(heart_value, har))
    return CountryRecord(
        **draft.fields,
        heart_value=heart_value,
        heart_value_basis=basis,
        heart_score=score,
    )


def _reader(row: RowData, config: HeartConfig, sheet: str, anomalies: AnomalyLogBuffer | None) -> RowReader:
    return RowReader(
        row.values,
        aliases=config.column_aliases,
        percent_scale=config.percent_scale,
        null_sentinels=config.null_sentinels,
        sheet=sheet,
        row_number=row.row_number,
        anomalies=anomalies,
    )


def derive_records(
    rows: Sequence[RowData],
    config: HeartConfig,
    *,
    sheet: str = "",
    anomalies: AnomalyLogBuffer | None = None,
) -> DerivationResult:
    """Full pipeline over the rows of one sheet, in source order.

    The aggregate row (country == config.aggregate_country, case-insensitive)
    seeds GlobalMetrics and is never returned. Rows without a country name
    are skipped; a repeated name keeps the first occurrence.
    """
    readers = [_reader(row, config, sheet, anomalies) for row in rows]
    aggregate_key = config.aggregate_country.strip().casefold()

    aggregate = next((r for r in readers if r.country.casefold() == aggregate_key), None)
    if aggregate is None:
        logger.warning(f"aggregate row '{config.aggregate_country}' not found; global metrics are 0")
        if anomalies is not None:
            anomalies.append(
                AnomalyRecord.create(
                    sheet, -1, "", "country", "MISSING_AGGREGATE",
                    f"no row with country '{config.aggregate_country}'",
                )
            )
        globals_ = GlobalMetrics()
    else:
        globals_ = read_global_metrics(aggregate)
        logger.debug(f"aggregate row {aggregate.row_number}: {globals_}")

    drafts: list[RowDraft] = []
    seen: set[str] = set()
    skipped = 0
    with RowProgress(len(readers)) as progress:
        for reader in readers:
            progress.advance(reader.country)
            key = reader.country.casefold()
            if reader is aggregate or key == aggregate_key:
                continue
            if not reader.country:
                skipped += 1
                logger.debug(f"row {reader.row_number}: no country name, skipped")
                continue
            if key in seen:
                skipped += 1
                reader.anomaly("country", "DUPLICATE_COUNTRY", "repeated country name, row dropped")
                continue
            seen.add(key)
            drafts.append(derive_row(reader, globals_))

    bounds = resolve_bounds(
        config.normalization_mode,
        (d.fields["raw_heart_value"] for d in drafts),
        config.reference_bounds,
    )
    records = tuple(finalize_row(d, bounds) for d in drafts)
    basis_counts: dict[str, int] = {}
    for rec in records:
        basis_counts[rec.heart_value_basis] = basis_counts.get(rec.heart_value_basis, 0) + 1
    return DerivationResult(
        records=records,
        global_metrics=globals_,
        bounds=bounds,
        skipped_rows=skipped,
        basis_counts=basis_counts,
    )

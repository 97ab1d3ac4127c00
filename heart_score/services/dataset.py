from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..config.loader import HeartConfig
from ..excel.columns import match_headers
from ..excel.reader import SheetHeaderError, normalize_sheet, read_workbook
from ..logging.anomaly_log import AnomalyLogBuffer
from ..models.country_record import CountryRecord, GlobalMetrics
from .derivation import derive_records
from .normalization import HeartValueBounds

"""Dataset service: load once, read many.

load_dataset() runs the whole pipeline (read workbook -> derive -> normalize)
and returns a HeartDataset. DatasetCache memoizes one HeartDataset per
process; it is injectable so callers and tests own its lifetime.

Only a missing/unreadable workbook (DatasetLoadError) aborts a load.
"""

__all__ = [
    "HeartDataset",
    "DatasetCache",
    "load_dataset",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeartDataset:
    """Read-only result of one load. ``records`` keeps source row order."""
    records: tuple[CountryRecord, ...]
    global_metrics: GlobalMetrics
    bounds: HeartValueBounds
    sheet_name: str = ""
    skipped_rows: int = 0
    basis_counts: Mapping[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    def __post_init__(self) -> None:
        # 読み取り専用ビュー
        object.__setattr__(self, "basis_counts", MappingProxyType(dict(self.basis_counts)))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[CountryRecord]:
        return iter(self.records)

    def find(self, name: str) -> CountryRecord | None:
        """Case-insensitive exact match on country name; None when absent."""
        key = name.strip().casefold()
        for rec in self.records:
            if rec.country.casefold() == key:
                return rec
        return None

    def country_names(self) -> list[str]:
        return sorted(rec.country for rec in self.records)


def load_dataset(config: HeartConfig, *, anomalies: AnomalyLogBuffer | None = None) -> HeartDataset:
    """Load and derive the whole sheet.

    Raises:
        SourceUnavailableError: workbook missing or unreadable
        SheetHeaderError: header row missing or without a country column
    """
    start = time.perf_counter()
    logger.info(f"Loading workbook: {config.source_file}")
    sheet_name, df = read_workbook(config.source_file, config.sheet_name)
    sheet = normalize_sheet(df, sheet_name, header_row=config.header_row, null_sentinels=config.null_sentinels)
    if match_headers(sheet.columns, config.column_aliases)["country"] is None:
        raise SheetHeaderError(
            f"sheet '{sheet_name}' header row {config.header_row} has no country column (columns: {sheet.columns})"
        )
    logger.debug(f"sheet '{sheet_name}': {len(sheet.columns)} columns, {len(sheet.rows)} rows")
    result = derive_records(sheet.rows, config, sheet=sheet_name, anomalies=anomalies)
    elapsed = time.perf_counter() - start
    logger.info(f"Derived {len(result.records)} countries from sheet '{sheet_name}'")
    return HeartDataset(
        records=result.records,
        global_metrics=result.global_metrics,
        bounds=result.bounds,
        sheet_name=sheet_name,
        skipped_rows=result.skipped_rows,
        basis_counts=result.basis_counts,
        elapsed_seconds=elapsed,
    )


class DatasetCache:
    """One-shot memo of a HeartDataset.

    get_or_load() calls the loader at most once until invalidate(). A failing
    loader propagates its exception and leaves the cache empty.
    """

    def __init__(self, loader: Callable[[], HeartDataset]) -> None:
        self._loader = loader
        self._dataset: HeartDataset | None = None

    @classmethod
    def for_config(cls, config: HeartConfig, *, anomalies: AnomalyLogBuffer | None = None) -> DatasetCache:
        return cls(lambda: load_dataset(config, anomalies=anomalies))

    @property
    def is_loaded(self) -> bool:
        return self._dataset is not None

    def get_or_load(self) -> HeartDataset:
        if self._dataset is None:
            self._dataset = self._loader()
        return self._dataset

    def invalidate(self) -> None:
        self._dataset = None

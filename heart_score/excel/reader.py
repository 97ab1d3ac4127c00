from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.row_data import RowData
from .coercion import is_blank

"""Excel reader.

The whole sheet is read at once with pandas (openpyxl engine for .xlsx) with
no header and ``dtype=object`` so currency strings stay strings. The
configured header row (1-based) names the columns; everything below it is
data. Header text is kept verbatim; alias resolution happens later in
excel.columns.
"""

__all__ = [
    "DatasetLoadError",
    "SourceUnavailableError",
    "SheetHeaderError",
    "SheetData",
    "read_workbook",
    "normalize_sheet",
]


class DatasetLoadError(Exception):
    """Base class for failures that abort a dataset load."""


class SourceUnavailableError(DatasetLoadError):
    """Raised when the workbook cannot be located or opened."""


class SheetHeaderError(DatasetLoadError):
    """Raised when the header row is missing or invalid."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RowData]


def read_workbook(path: Path, sheet_name: str | None = None) -> tuple[str, pd.DataFrame]:
    """Read one sheet (first when sheet_name is None) as a raw DataFrame.

    Raises:
        SourceUnavailableError: file missing, not a workbook, or sheet absent
    """
    if not path.exists():
        raise SourceUnavailableError(f"workbook not found: {path}")
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise SourceUnavailableError(f"cannot open workbook {path}: {e}") from e
    with xls:
        names = [str(n) for n in xls.sheet_names]
        if not names:
            raise SourceUnavailableError(f"workbook has no sheets: {path}")
        name = sheet_name if sheet_name is not None else names[0]
        if name not in names:
            raise SourceUnavailableError(f"sheet '{name}' not found in {path.name} (sheets: {names})")
        try:
            df = xls.parse(name, header=None, dtype=object)
        except Exception as e:
            raise SourceUnavailableError(f"cannot parse sheet '{name}' of {path}: {e}") from e
    return name, df


def _header_text(value: Any) -> str | None:
    if is_blank(value):
        return None
    return str(value)


def normalize_sheet(
    df: pd.DataFrame,
    sheet_name: str,
    header_row: int = 1,
    null_sentinels: set[str] | frozenset[str] | None = None,
) -> SheetData:
    """Apply the header row and turn remaining rows into RowData.

    Steps:
    1. Validate the header row exists
    2. Take header text from it (blank header cells drop their column)
    3. Rows below become RowData; all-blank rows are skipped
    4. NaN and null sentinels become None
    """
    header_idx = header_row - 1
    if df.shape[0] <= header_idx:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row {header_row}")
    headers = [_header_text(v) for v in df.iloc[header_idx].tolist()]
    columns = [h for h in headers if h is not None]
    if not columns:
        raise SheetHeaderError(f"sheet '{sheet_name}' header row {header_row} is empty")

    rows: list[RowData] = []
    for offset, raw in enumerate(df.iloc[header_idx + 1:].itertuples(index=False, name=None)):
        values: dict[str, Any] = {}
        for header, val in zip(headers, raw, strict=False):
            # 見出し重複時は最初の非空セルを採用
            if header is None or values.get(header) is not None:
                continue
            values[header] = None if is_blank(val, null_sentinels) else val
        if all(v is None for v in values.values()):
            continue
        # 行番号はシート上の番号 (ヘッダ行 + 1 始まり)
        rows.append(RowData(row_number=header_row + 1 + offset, values=values))

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)

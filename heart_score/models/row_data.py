from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model: one spreadsheet row before coercion.

``values`` is the RawRow mapping (header text exactly as in the sheet,
spaces included -> cell value or None). Consumed once by the derivation
engine.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    row_number: int  # spreadsheet row number (1-based, header row included in the count)
    values: dict[str, Any]

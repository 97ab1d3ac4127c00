from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""AnomalyRecord model for the anomaly log.

Per-field problems never abort a load; they are recovered with a defined
fallback and recorded here so they stay visible to whoever maintains the
workbook. Serialized as one JSON object per line with a fixed key set.

Kinds:
    CELL_MALFORMED      non-blank cell that could not be parsed (used 0)
    OVERRIDE_MISMATCH   sheet-supplied value disagrees with the recomputed one
    DUPLICATE_COUNTRY   repeated country name, later row dropped
    MISSING_AGGREGATE   no aggregate (world) row, global metrics are 0
"""

__all__ = [
    "AnomalyRecord",
]


@dataclass(frozen=True)
class AnomalyRecord:
    """Structured anomaly for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        sheet: Sheet name the row came from
        row: Spreadsheet row number (1-based). -1 when not tied to a row
        country: Country name of the row, "" when unknown
        field: Logical field name (see excel.columns.COLUMN_ALIASES), "" for row-level
        kind: Anomaly classification in UPPER_SNAKE_CASE
        detail: Human-readable description
    """
    timestamp: str  # ISO8601 UTC
    sheet: str
    row: int
    country: str
    field: str
    kind: str  # UPPER_SNAKE
    detail: str

    @staticmethod
    def create(sheet: str, row: int, country: str, field: str, kind: str, detail: str) -> AnomalyRecord:
        """Create a new AnomalyRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return AnomalyRecord(
            timestamp=ts,
            sheet=sheet,
            row=row,
            country=country,
            field=field,
            kind=kind,
            detail=detail,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

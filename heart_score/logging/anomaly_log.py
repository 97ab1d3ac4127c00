from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.anomaly_record import AnomalyRecord

"""Anomaly log buffering.

- JSON Lines, fixed schema (see models.anomaly_record)
- One file per run: ``logs/anomalies-YYYYMMDD-HHMMSS.log`` (UTC), created on first flush
- Records stay in memory until flush(); a load without ``--anomaly-log`` never touches disk
"""

__all__ = [
    "AnomalyRecord",
    "AnomalyLogBuffer",
    "SCHEMA_PATH",
]

LOGS_DIR = Path("./logs")
# JSON schema of one log line, for consumers of the log files
SCHEMA_PATH = Path(__file__).with_name("anomaly_log_schema.json")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class AnomalyLogBuffer:
    """In-memory buffer of anomaly records. Flush writes JSON Lines.

    Single-threaded use only (one dataset load at a time).
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[AnomalyRecord] = []
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"anomalies-{stamp}.log"
        return self._file_path

    def append(self, record: AnomalyRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> list[AnomalyRecord]:
        return list(self._records)

    def counts_by_kind(self) -> dict[str, int]:
        return dict(Counter(r.kind for r in self._records))

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when there was nothing to write."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp

from __future__ import annotations

import time
from pathlib import Path

from heart_score.config.loader import HeartConfig
from heart_score.models.row_data import RowData
from heart_score.services.derivation import derive_records

"""Performance smoke test: one derivation pass over a few hundred countries.
Lenient bound so CI stays green; catches accidental quadratic behaviour.
"""

ROWS = 500


def test_derivation_smoke(world, alpha):
    rows = [RowData(row_number=2, values=world)]
    for i in range(ROWS):
        values = dict(alpha)
        values["COUNTRY"] = f"Country_{i:04d}"
        values["Per Capita income(PCI)"] = 1000 + i * 10
        rows.append(RowData(row_number=i + 3, values=values))

    start = time.perf_counter()
    result = derive_records(rows, HeartConfig(source_file=Path("unused.xlsx")))
    elapsed = time.perf_counter() - start

    assert len(result.records) == ROWS
    assert elapsed < 20, f"derivation too slow: {elapsed:.3f}s"
    throughput = ROWS / max(elapsed, 1e-9)
    assert throughput > 25

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .formulas import normalize_heart_value

"""Heart Value normalization modes.

Two deliberately distinct modes:

- REFERENCE: fixed bounds (-10, 60). Used for single ad-hoc calculations
  where no dataset exists, and optionally for batch loads.
- DATASET: empirical min/max of the raw Heart Values in the loaded sheet.

One load uses exactly one HeartValueBounds for every record that needs a
computed HV; rows whose sheet already carries an HV keep it (basis "sheet").
"""

__all__ = [
    "NormalizationMode",
    "HeartValueBounds",
    "REFERENCE_BOUNDS",
    "dataset_bounds",
    "resolve_bounds",
]


class NormalizationMode(Enum):
    REFERENCE = "reference"
    DATASET = "dataset"


@dataclass(frozen=True)
class HeartValueBounds:
    lo: float
    hi: float
    mode: NormalizationMode

    def normalize(self, raw: float) -> float:
        return normalize_heart_value(raw, self.lo, self.hi)

    def __str__(self) -> str:
        return f"{self.lo:g}..{self.hi:g}"


REFERENCE_BOUNDS = HeartValueBounds(lo=-10.0, hi=60.0, mode=NormalizationMode.REFERENCE)


def dataset_bounds(raw_values: Iterable[float]) -> HeartValueBounds:
    """Min/max over the dataset; an empty dataset collapses to (0, 0)."""
    values = list(raw_values)
    if not values:
        return HeartValueBounds(lo=0.0, hi=0.0, mode=NormalizationMode.DATASET)
    return HeartValueBounds(lo=min(values), hi=max(values), mode=NormalizationMode.DATASET)


def resolve_bounds(
    mode: NormalizationMode,
    raw_values: Iterable[float],
    reference: HeartValueBounds = REFERENCE_BOUNDS,
) -> HeartValueBounds:
    if mode is NormalizationMode.DATASET:
        return dataset_bounds(raw_values)
    return reference

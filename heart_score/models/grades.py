from __future__ import annotations

from dataclasses import dataclass

"""Fixed grading tables.

AFFORDABILITY_GRADES partitions [0, inf) into 12 contiguous bands on the
Heart Affordability Value (HAV). Bands are [min, max); the top band also
absorbs everything at or above its max.

RESILIENCE_GRADES describes a normalized Heart Value (0-1).
"""

__all__ = [
    "AffordabilityGrade",
    "AFFORDABILITY_GRADES",
    "affordability_grade",
    "ResilienceGrade",
    "RESILIENCE_GRADES",
    "resilience_for",
]


@dataclass(frozen=True)
class AffordabilityGrade:
    grade: str
    min: float  # inclusive
    max: float  # exclusive (except top band)
    description: str

    def contains(self, value: float) -> bool:
        return self.min <= value < self.max


# Highest first
AFFORDABILITY_GRADES: tuple[AffordabilityGrade, ...] = (
    AffordabilityGrade("A+", 50000, 100000, "Excellent"),
    AffordabilityGrade("A", 40000, 50000, "Very Good"),
    AffordabilityGrade("A-", 35000, 40000, "Good+"),
    AffordabilityGrade("B+", 30000, 35000, "Good"),
    AffordabilityGrade("B", 25000, 30000, "Above Average"),
    AffordabilityGrade("B-", 20000, 25000, "Average+"),
    AffordabilityGrade("C+", 15000, 20000, "Average"),
    AffordabilityGrade("C", 12500, 15000, "Below Average"),
    AffordabilityGrade("C-", 10000, 12500, "Low"),
    AffordabilityGrade("D+", 5000, 10000, "Very Low"),
    AffordabilityGrade("D", 2500, 5000, "Poor"),
    AffordabilityGrade("D-", 0, 2500, "Very Poor"),
)

_TOP = AFFORDABILITY_GRADES[0]
_BOTTOM = AFFORDABILITY_GRADES[-1]


def affordability_grade(hav: float) -> AffordabilityGrade:
    """Band containing ``hav``; A+ above the table, D- below it."""
    for band in AFFORDABILITY_GRADES:
        if band.contains(hav):
            return band
    if hav >= _TOP.max:
        return _TOP
    return _BOTTOM


@dataclass(frozen=True)
class ResilienceGrade:
    min: float
    description: str


RESILIENCE_GRADES: tuple[ResilienceGrade, ...] = (
    ResilienceGrade(0.70, "Superb"),
    ResilienceGrade(0.51, "Excellent"),
    ResilienceGrade(0.41, "Good"),
    ResilienceGrade(0.31, "Satisfactory"),
    ResilienceGrade(0.26, "Moderate"),
    ResilienceGrade(0.00, "Weak"),
)


def resilience_for(heart_value: float) -> str:
    for grade in RESILIENCE_GRADES:
        if heart_value >= grade.min:
            return grade.description
    return RESILIENCE_GRADES[-1].description

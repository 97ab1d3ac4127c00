"""Domain models for HEART Score ingestion.

Row-level input (RowData), the derived per-country output (CountryRecord,
GlobalMetrics), the fixed grading tables and anomaly records.
"""

from .anomaly_record import AnomalyRecord
from .country_record import CountryRecord, GlobalMetrics
from .grades import AFFORDABILITY_GRADES, AffordabilityGrade, affordability_grade, resilience_for
from .row_data import RowData

__all__ = [
    # Input
    "RowData",
    # Output
    "CountryRecord",
    "GlobalMetrics",
    # Grading
    "AFFORDABILITY_GRADES",
    "AffordabilityGrade",
    "affordability_grade",
    "resilience_for",
    # Diagnostics
    "AnomalyRecord",
]

from __future__ import annotations

from .dataset import HeartDataset

"""SUMMARY line rendering and display formatting.

SUMMARY format:
SUMMARY countries={n} skipped={m} anomalies={k} basis=sheet:{a}/dataset:{b}/reference:{c}
hv_bounds={lo}..{hi} elapsed_sec={s}
(one line; wrapped here for readability)
"""

__all__ = [
    "render_summary_line",
    "format_currency",
    "format_percent",
    "format_large_number",
]


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation for very small numbers
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(dataset: HeartDataset, anomalies: int = 0) -> str:
    """Render the SUMMARY line for one load.

    Examples:
        >>> from heart_score.services.normalization import REFERENCE_BOUNDS
        >>> from heart_score.models.country_record import GlobalMetrics
        >>> ds = HeartDataset(records=(), global_metrics=GlobalMetrics(), bounds=REFERENCE_BOUNDS)
        >>> render_summary_line(ds)
        'SUMMARY countries=0 skipped=0 anomalies=0 basis=sheet:0/dataset:0/reference:0 hv_bounds=-10..60 elapsed_sec=0'
    """
    counts = dataset.basis_counts
    basis = "/".join(f"{b}:{counts.get(b, 0)}" for b in ("sheet", "dataset", "reference"))
    return (
        f"SUMMARY countries={len(dataset)} "
        f"skipped={dataset.skipped_rows} "
        f"anomalies={anomalies} "
        f"basis={basis} "
        f"hv_bounds={dataset.bounds} "
        f"elapsed_sec={_format_seconds(dataset.elapsed_seconds)}"
    )


def format_currency(value: float) -> str:
    """USD with T/B/M/K suffix, sign kept: -1.5e9 -> '-$1.50B'."""
    abs_value = abs(value)
    sign = "-" if value < 0 else ""
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs_value >= threshold:
            return f"{sign}${abs_value / threshold:.2f}{suffix}"
    return f"{sign}${abs_value:.2f}"


def format_percent(value: float, *, fraction: bool = False) -> str:
    """Percentage points -> '5.20%'. ``fraction=True`` for decimal inputs like inflation."""
    points = value * 100 if fraction else value
    return f"{points:.2f}%"


def format_large_number(value: float) -> str:
    """Counts such as housing units: 1.2e9 -> '1B', 45_000 -> '45K'."""
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if value >= threshold:
            return f"{value / threshold:.0f}{suffix}"
    return f"{value:,.0f}"

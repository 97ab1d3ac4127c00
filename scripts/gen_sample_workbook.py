#!/usr/bin/env python3
"""Sample workbook generation script.

Generates a synthetic HEART workbook in the on-disk format the loader expects:
- Optional title row (then set ``header_row: 2`` in config/heart.yml)
- Header row with the drifting spellings found in real editions
  (leading spaces, "Intrest", "balnce")
- One WORLD aggregate row, placed at a random position
- Country rows: currency as "$1,234" strings, percentages as fractions

Useful for trying the CLI without the real HEART_Model.xlsx and for
timing loads of large sheets.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

HEADERS = [
    "SR NO.",
    "COUNTRY",
    " Global GDP (in USD)",
    "Total Global Population",
    "Total Global Trade (in USD)",
    " Country GDP (in USD)",
    "Country GDP Global Ranking",
    "Country population",
    "Per Capita income(PCI)",
    "Country inflation ( %)",
    "Intrest Rate ( %)",
    "  Country Total Debt (in USD)",
    " Country Trade (in USD)",
    " Trade Balance (in USD; + - )",
    " Housing Contribution to GDP (in USD)",
    "Country Housing Units",
    " Health Contribution to GDP",
    " Energy Contribution To GDP",
    " Education Contribution To GDP",
    "HDI(Range: 0-1)",
    "GINI (Range: 0-1)",
]


def _usd(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def generate_countries(countries: int, seed: int = 42) -> list[dict[str, Any]]:
    """Generate country rows plus the WORLD row whose totals match them.

    Args:
        countries: Number of country rows
        seed: Random seed for reproducible data

    Returns:
        Rows keyed by header spelling, WORLD row included
    """
    np.random.seed(seed)

    gdp = np.round(np.random.lognormal(mean=25, sigma=1.5, size=countries), 0)
    population = np.random.randint(100_000, 1_400_000_000, countries)
    trade = np.round(gdp * np.random.uniform(0.2, 1.2, countries), 0)
    ranks = (-gdp).argsort().argsort() + 1

    rows: list[dict[str, Any]] = []
    for i in range(countries):
        g = float(gdp[i])
        rows.append({
            "SR NO.": i + 1,
            "COUNTRY": f"Country_{i + 1:03d}",
            " Country GDP (in USD)": _usd(g),
            "Country GDP Global Ranking": int(ranks[i]),
            "Country population": int(population[i]),
            "Per Capita income(PCI)": _usd(g / population[i]),
            "Country inflation ( %)": round(float(np.random.uniform(0.0, 0.15)), 4),
            "Intrest Rate ( %)": round(float(np.random.uniform(0.005, 0.12)), 4),
            "  Country Total Debt (in USD)": _usd(g * np.random.uniform(0.2, 2.0)),
            " Country Trade (in USD)": _usd(float(trade[i])),
            " Trade Balance (in USD; + - )": _usd(g * np.random.uniform(-0.1, 0.1)),
            " Housing Contribution to GDP (in USD)": _usd(g * np.random.uniform(0.02, 0.12)),
            "Country Housing Units": int(population[i] * np.random.uniform(0.2, 0.5)),
            " Health Contribution to GDP": _usd(g * np.random.uniform(0.02, 0.15)),
            " Energy Contribution To GDP": _usd(g * np.random.uniform(0.01, 0.08)),
            " Education Contribution To GDP": _usd(g * np.random.uniform(0.02, 0.07)),
            "HDI(Range: 0-1)": round(float(np.random.uniform(0.4, 0.96)), 3),
            "GINI (Range: 0-1)": round(float(np.random.uniform(0.24, 0.63)), 3),
        })

    world = {
        "COUNTRY": "WORLD",
        " Global GDP (in USD)": _usd(float(gdp.sum())),
        "Total Global Population": f"{int(population.sum()):,}",
        "Total Global Trade (in USD)": _usd(float(trade.sum())),
    }
    rows.insert(int(np.random.randint(0, countries + 1)), world)
    return rows


def create_workbook(
    output_path: Path,
    countries: int,
    sheet: str = "HEART",
    title: str | None = None,
    seed: int = 42,
) -> None:
    """Write the generated rows to ``output_path`` (openpyxl engine)."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    rows = generate_countries(countries, seed)

    sheet_data: list[list[Any]] = []
    if title:
        sheet_data.append([title] + [None] * (len(HEADERS) - 1))
    sheet_data.append(list(HEADERS))
    for row in rows:
        sheet_data.append([row.get(h) for h in HEADERS])

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        pd.DataFrame(sheet_data).to_excel(writer, sheet_name=sheet, header=False, index=False)

    print(f"Created workbook: {output_path}")
    print(f"  Sheet: {sheet}")
    print(f"  Countries: {countries} (+ WORLD row)")
    print(f"  Header row: {2 if title else 1}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic HEART workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 195 countries into the default config location
  %(prog)s data/HEART_Model.xlsx

  # Large sheet with a title row (use header_row: 2)
  %(prog)s big.xlsx --countries 20000 --title "HEART Model 2024"
        """,
    )
    parser.add_argument("output", type=Path, help="Output workbook path")
    parser.add_argument("--countries", type=int, default=195, help="Number of country rows (default: 195)")
    parser.add_argument("--sheet", default="HEART", help="Sheet name (default: HEART)")
    parser.add_argument("--title", default=None, help="Optional title row above the headers")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.countries <= 0:
        print("Error: --countries must be positive", file=sys.stderr)
        return 1

    try:
        create_workbook(args.output, args.countries, args.sheet, args.title, args.seed)
    except OSError as e:
        print(f"Error writing workbook: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

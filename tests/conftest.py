# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from heart_score.logging.init import reset_logging

# On-disk spellings as found in the HEART workbook (leading spaces and typos included)
HEADERS = [
    "SR NO.",
    "COUNTRY",
    " Global GDP (in USD)",
    "Total Global Population",
    "Total Global Trade (in USD)",
    " Country GDP (in USD)",
    "Country GDP Global Ranking",
    "Country GDP ( %)To Global GDP ",
    "Country population",
    "Country population To global Population ( %)",
    "Per Capita income(PCI)",
    "Country inflation ( %)",
    "Intrest Rate ( %)",
    "  Country Total Debt (in USD)",
    " Country Interest Payment (in USD)",
    "Intrest Payment to Country GDP( %)",
    " Country Trade (in USD)",
    " Trade Balance (in USD; + - )",
    "Trade balnce to GDP ( %)",
    "Housing Contribution to GDP ( %)",
    "Country Housing Units",
    "Health Contribution to GDP ( %)",
    "Energy Contribution To GDP  ( %)",
    "Education Contribution To GDP ( %)",
    "Heart Value (HV--Range; 0-1)",
    "HDI(Range: 0-1)",
    "GINI (Range: 0-1)",
    "HEART Affordability Value (APCI*AHDI)",
    "Heart  AFFORDABILITY RANKING (HAR)",
    "HEART SCORE (HV&HAR)",
    "Brief Description of HEART Scores",
]


def world_row() -> dict[str, Any]:
    return {
        "COUNTRY": "WORLD",
        " Global GDP (in USD)": "$100,000,000,000,000",
        "Total Global Population": "8,000,000,000",
        "Total Global Trade (in USD)": "$30,000,000,000,000",
    }


def alpha_row() -> dict[str, Any]:
    """rawHV = 5.2+6.5+3.8+4.2+15.5-2.1+1.5 = 34.6, HAV = 48750 * 0.5 = 24375 (B-)."""
    return {
        "SR NO.": 1,
        "COUNTRY": "Alpha",
        " Country GDP (in USD)": "$1,000,000",
        "Country GDP Global Ranking": 12,
        "Country GDP ( %)To Global GDP ": 0.155,
        "Country population": 20,
        "Per Capita income(PCI)": 50000,
        "Country inflation ( %)": 0.025,
        "Intrest Rate ( %)": 0.05,
        "  Country Total Debt (in USD)": "$200,000",
        "Intrest Payment to Country GDP( %)": 0.021,
        " Trade Balance (in USD; + - )": "-$5,000",
        "Trade balnce to GDP ( %)": 0.015,
        "Housing Contribution to GDP ( %)": 0.052,
        "Country Housing Units": 10,
        "Health Contribution to GDP ( %)": 0.065,
        "Energy Contribution To GDP  ( %)": 0.038,
        "Education Contribution To GDP ( %)": 0.042,
        "HDI(Range: 0-1)": 0.85,
        "GINI (Range: 0-1)": 0.35,
    }


def beta_row() -> dict[str, Any]:
    """Zero GDP, no sector data: rawHV = 0, HAV = 10000 * 0.4 = 4000 (D)."""
    return {
        "SR NO.": 2,
        "COUNTRY": "Beta",
        " Country GDP (in USD)": "",
        "Per Capita income(PCI)": "$10,000",
        "HDI(Range: 0-1)": 0.7,
        "GINI (Range: 0-1)": 0.3,
        "  Country Total Debt (in USD)": "$500",
        "Intrest Rate ( %)": 0.1,
    }


def gamma_row() -> dict[str, Any]:
    """Pre-computed HV / HAR / score in the sheet; rawHV = 10."""
    return {
        "SR NO.": 3,
        "COUNTRY": "Gamma",
        " Country GDP (in USD)": 5000,
        "Housing Contribution to GDP ( %)": 0.1,
        "Per Capita income(PCI)": 26000,
        "HDI(Range: 0-1)": 0.8,
        "GINI (Range: 0-1)": 0.3,
        "Heart Value (HV--Range; 0-1)": 0.76,
        "HEART Affordability Value (APCI*AHDI)": 13000,
        "Heart  AFFORDABILITY RANKING (HAR)": "C",
        "HEART SCORE (HV&HAR)": "0.76C",
        "Brief Description of HEART Scores": "Steady and affordable",
    }


def make_workbook(
    path: Path,
    rows: list[dict[str, Any]],
    headers: list[str] | None = None,
    sheet: str = "HEART",
) -> Path:
    df = pd.DataFrame(rows, columns=headers or HEADERS)
    with pd.ExcelWriter(path) as writer:
        df.to_excel(writer, sheet_name=sheet, index=False)
    return path


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("HEART_SOURCE_FILE", raising=False)
        yield p


@pytest.fixture()
def sample_rows() -> list[dict[str, Any]]:
    return [world_row(), alpha_row(), beta_row(), gamma_row()]


@pytest.fixture()
def workbook(temp_workdir: Path, sample_rows) -> Path:
    return make_workbook(temp_workdir / "data" / "HEART_Model.xlsx", sample_rows)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_file: ./data/HEART_Model.xlsx
sheet_name: null
header_row: 1
aggregate_country: WORLD
percent_scale: fraction
normalization:
  mode: dataset
  reference_bounds: [-10, 60]
null_sentinels: ["N/A"]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "heart.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def world() -> dict[str, Any]:
    return world_row()


@pytest.fixture()
def alpha() -> dict[str, Any]:
    return alpha_row()


@pytest.fixture()
def beta() -> dict[str, Any]:
    return beta_row()


@pytest.fixture()
def gamma() -> dict[str, Any]:
    return gamma_row()


@pytest.fixture()
def make_book(temp_workdir: Path):
    """Write rows into data/<name> and return the path."""
    def _make(
        rows: list[dict[str, Any]],
        headers: list[str] | None = None,
        sheet: str = "HEART",
        name: str = "HEART_Model.xlsx",
    ) -> Path:
        return make_workbook(temp_workdir / "data" / name, rows, headers, sheet)
    return _make

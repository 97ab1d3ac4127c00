"""HEART Score ingestion: spreadsheet of country indicators -> derived HEART Scores."""

__version__ = "0.1.0"

# fundfolio/ingest/__init__.py
from .models import (
    MutualFund,
    PortfolioHolding,
    AllocationResult,
    AggregateStats,
    ForecastPoint,
    PortfolioSummary,
    IngestReport,
)
from .parser import parse_csv_line, parse_csv_text, parse_file, classify_cell, build_fund_record
from .column_detector import normalize_header, detect_columns
from .reconciler import reconcile, merge_records, FundCatalog

__all__ = [
    "MutualFund",
    "PortfolioHolding",
    "AllocationResult",
    "AggregateStats",
    "ForecastPoint",
    "PortfolioSummary",
    "IngestReport",
    "parse_csv_line",
    "parse_csv_text",
    "parse_file",
    "classify_cell",
    "build_fund_record",
    "normalize_header",
    "detect_columns",
    "reconcile",
    "merge_records",
    "FundCatalog",
]

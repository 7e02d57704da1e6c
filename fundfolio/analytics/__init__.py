# fundfolio/analytics/__init__.py
from .aggregator import (
    calculate_allocation,
    calculate_aggregate_stats,
    contribution_breakdown,
    total_investment,
    weighted_average,
)
from .forecast import future_value_annuity, forecast_series, forecast_portfolio

__all__ = [
    "calculate_allocation",
    "calculate_aggregate_stats",
    "contribution_breakdown",
    "total_investment",
    "weighted_average",
    "future_value_annuity",
    "forecast_series",
    "forecast_portfolio",
]

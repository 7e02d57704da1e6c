# fundfolio/analytics/forecast.py
"""
Growth forecast for a recurring annual contribution (ordinary annuity).
"""

from typing import List, Optional

from ..ingest.models import ForecastPoint
from .aggregator import round_half_up


WEEKS_PER_YEAR = 52
DEFAULT_HORIZON_YEARS = 20


def future_value_annuity(annual_contribution: float, rate: float, years: int) -> float:
    """FV = P * ((1 + r)^n - 1) / r, or P * n when r == 0."""
    if rate == 0:
        return annual_contribution * years
    return annual_contribution * ((1 + rate) ** years - 1) / rate


def forecast_series(
    annual_contribution: float,
    annual_rate: Optional[float],
    years: int = DEFAULT_HORIZON_YEARS,
) -> List[ForecastPoint]:
    """
    Projected value and cumulative contribution for years 0..years.

    Returns an empty list when the rate or the contribution is not positive;
    the caller decides how to present "no forecast".
    """
    if annual_rate is None or annual_rate <= 0 or annual_contribution <= 0:
        return []

    points = [ForecastPoint(year=0, projected_value=0.0, total_invested=0.0)]
    for year in range(1, years + 1):
        fv = future_value_annuity(annual_contribution, annual_rate, year)
        points.append(ForecastPoint(
            year=year,
            projected_value=round_half_up(fv, 0),
            total_invested=round_half_up(annual_contribution * year, 0),
        ))
    return points


def forecast_portfolio(
    total_weekly_investment: float,
    cagr_percent: Optional[float],
    years: int = DEFAULT_HORIZON_YEARS,
) -> List[ForecastPoint]:
    """Forecast from a weekly total and a CAGR given in percent (10 means 10%)."""
    rate = None if cagr_percent is None else cagr_percent / 100
    return forecast_series(total_weekly_investment * WEEKS_PER_YEAR, rate, years)

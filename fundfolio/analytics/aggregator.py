# fundfolio/analytics/aggregator.py
"""
Portfolio-level weighted averages.

Two conventions live side by side here:
- market-cap buckets: a holding that does not report a bucket counts as 0%
  of it, and its weekly investment still counts in the denominator;
- scalar metrics (expense ratio, CAGR): holdings that do not report the
  metric are left out of both numerator and denominator, and the result is
  None when nobody reports it.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

import pandas as pd

from ..ingest.models import AggregateStats, AllocationResult, PortfolioHolding


BUCKETS = {
    "large": "percentLargecapHolding",
    "mid": "percentMidcapHolding",
    "small": "percentSmallcapHolding",
}

BREAKDOWN_COLUMNS = [
    "id",
    "name",
    "weeklyInvestment",
    "overallContributionPercent",
    "contributionToOverallLargeCapPercent",
    "contributionToOverallMidCapPercent",
    "contributionToOverallSmallCapPercent",
]


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def total_investment(holdings: Iterable[PortfolioHolding]) -> float:
    return float(sum(h.weekly_investment for h in holdings))


def bucket_percentage(holdings: Sequence[PortfolioHolding], bucket_key: str) -> float:
    total = total_investment(holdings)
    if total == 0:
        return 0.0
    weighted = sum((h.metric(bucket_key) or 0.0) * h.weekly_investment for h in holdings)
    return round_half_up(weighted / total, 2)


def calculate_allocation(holdings: Sequence[PortfolioHolding]) -> AllocationResult:
    """Weighted large/mid/small-cap split of the portfolio, in percent."""
    return AllocationResult(
        large_cap_percentage=bucket_percentage(holdings, BUCKETS["large"]),
        mid_cap_percentage=bucket_percentage(holdings, BUCKETS["mid"]),
        small_cap_percentage=bucket_percentage(holdings, BUCKETS["small"]),
    )


def weighted_average(holdings: Sequence[PortfolioHolding], metric: str) -> Optional[float]:
    """
    Investment-weighted average of a scalar metric over the holdings that
    report it. Returns None when no holding reports it or their total
    investment is zero.
    """
    numerator = 0.0
    denominator = 0.0
    found = False
    for h in holdings:
        value = h.metric(metric)
        if value is None:
            continue
        found = True
        numerator += value * h.weekly_investment
        denominator += h.weekly_investment
    if not found or denominator == 0:
        return None
    return numerator / denominator


def calculate_aggregate_stats(holdings: Sequence[PortfolioHolding]) -> AggregateStats:
    return AggregateStats(
        weighted_average_expense_ratio=weighted_average(holdings, "expenseRatio"),
        weighted_average_cagr3y=weighted_average(holdings, "cagr3y"),
    )


def contribution_breakdown(
    holdings: Sequence[PortfolioHolding],
    sort_by: str = "weeklyInvestment",
    ascending: bool = False,
) -> pd.DataFrame:
    """
    Per-holding share of the portfolio's weekly investment and of each
    market-cap bucket's absolute exposure.

    Returns:
        DataFrame with BREAKDOWN_COLUMNS, sorted by `sort_by`
    """
    if not holdings:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)

    df = pd.DataFrame({
        "id": [h.id for h in holdings],
        "name": [h.name for h in holdings],
        "weeklyInvestment": [float(h.weekly_investment) for h in holdings],
    })
    total = df["weeklyInvestment"].sum()
    df["overallContributionPercent"] = (df["weeklyInvestment"] / total * 100) if total > 0 else 0.0

    for label, key in (("LargeCap", BUCKETS["large"]),
                       ("MidCap", BUCKETS["mid"]),
                       ("SmallCap", BUCKETS["small"])):
        absolute = pd.Series(
            [h.weekly_investment * ((h.metric(key) or 0.0) / 100) for h in holdings],
            dtype=float,
        )
        bucket_total = absolute.sum()
        column = f"contributionToOverall{label}Percent"
        df[column] = (absolute / bucket_total * 100) if bucket_total > 0 else 0.0

    if sort_by not in df.columns:
        raise ValueError(f"Unknown sort column: {sort_by}")
    return df.sort_values(sort_by, ascending=ascending, kind="stable").reset_index(drop=True)

# fundfolio/agents/portfolio_agent.py
"""
PortfolioAgent - owns the user's portfolio for one session.

Holds the list of holdings, validates user input at the boundary, derives
the allocation / stats / forecast summary, and persists every change through
a debounced writer.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Optional

from ..analytics.aggregator import calculate_aggregate_stats, calculate_allocation, total_investment
from ..analytics.forecast import DEFAULT_HORIZON_YEARS, forecast_portfolio
from ..ingest.models import MutualFund, PortfolioHolding, PortfolioSummary
from ..results import Failure, Result
from .portfolio_store import DebouncedWriter, parse_portfolio_document, serialize_portfolio

logger = logging.getLogger("PortfolioAgent")
if not logger.handlers:
    ch = logging.StreamHandler()
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(ch)
logger.setLevel(logging.INFO)


def parse_weekly_investment(raw: Any) -> float:
    """
    Validate a user-entered weekly amount. Accepts numbers or numeric strings
    ("1,500" is allowed); rejects non-numeric, non-finite and non-positive values.
    """
    if isinstance(raw, bool):
        raise ValueError("Please enter a valid positive weekly investment amount.")
    if isinstance(raw, str):
        cleaned = raw.replace(",", "").replace("₹", "").strip()
        try:
            value = float(cleaned)
        except ValueError:
            raise ValueError("Please enter a valid positive weekly investment amount.")
    elif isinstance(raw, (int, float)):
        value = float(raw)
    else:
        raise ValueError("Please enter a valid positive weekly investment amount.")

    if not math.isfinite(value) or value <= 0:
        raise ValueError("Please enter a valid positive weekly investment amount.")
    return value


class PortfolioAgent:
    def __init__(
        self,
        store: Any,
        writer: Optional[DebouncedWriter] = None,
        default_portfolio_loader: Optional[Callable[[], Result[List[PortfolioHolding]]]] = None,
        forecast_years: int = DEFAULT_HORIZON_YEARS,
    ):
        self.store = store
        self.writer = writer if writer is not None else DebouncedWriter(store)
        self.default_portfolio_loader = default_portfolio_loader
        self.forecast_years = forecast_years
        self._holdings: List[PortfolioHolding] = []

    @property
    def holdings(self) -> List[PortfolioHolding]:
        return list(self._holdings)

    # -------------------------
    # loading
    # -------------------------
    def load_initial_portfolio(self) -> List[PortfolioHolding]:
        """
        Stored portfolio first; if it is missing, empty or malformed, fall back
        to the default portfolio (and store it); otherwise start empty.
        """
        stored = self.store.get()
        if isinstance(stored, Failure):
            logger.warning("stored portfolio unreadable: %s", stored.describe())
        elif stored.value:
            parsed = parse_portfolio_document(stored.value, source="store")
            if isinstance(parsed, Failure):
                logger.warning("malformed portfolio in store, ignoring: %s", parsed.reason)
            elif parsed.value:
                self._holdings = parsed.value
                logger.info("portfolio loaded from store (%d funds)", len(self._holdings))
                return self.holdings

        if self.default_portfolio_loader is None:
            self._holdings = []
            return self.holdings

        default = self.default_portfolio_loader()
        if isinstance(default, Failure):
            logger.warning("could not load default portfolio: %s", default.describe())
            self._holdings = []
            return self.holdings

        self._holdings = default.value
        logger.info("default portfolio loaded (%d funds)", len(self._holdings))
        saved = self.store.put(serialize_portfolio(self._holdings))
        if isinstance(saved, Failure):
            logger.warning("could not store default portfolio: %s", saved.describe())
        return self.holdings

    def load_holdings(self, holdings: List[PortfolioHolding]) -> None:
        """Replace the session's holdings without persisting them."""
        ids = [h.id for h in holdings]
        if len(ids) != len(set(ids)):
            raise ValueError("Portfolio contains duplicate fund ids.")
        self._holdings = list(holdings)

    # -------------------------
    # mutations
    # -------------------------
    def add_fund(self, fund: MutualFund, weekly_investment: Any) -> PortfolioHolding:
        amount = parse_weekly_investment(weekly_investment)
        if self._index_of(fund.id) is not None:
            raise ValueError(f"{fund.name} is already in your portfolio.")
        holding = PortfolioHolding.from_fund(fund, amount)
        self._holdings.append(holding)
        logger.info("added %s with weekly investment %s", fund.name, amount)
        self._changed()
        return holding

    def remove_fund(self, fund_id: str) -> PortfolioHolding:
        idx = self._require(fund_id)
        removed = self._holdings.pop(idx)
        logger.info("removed %s", removed.name)
        self._changed()
        return removed

    def update_weekly_investment(self, fund_id: str, weekly_investment: Any) -> PortfolioHolding:
        amount = parse_weekly_investment(weekly_investment)
        idx = self._require(fund_id)
        updated = self._holdings[idx].model_copy(update={"weekly_investment": amount})
        self._holdings[idx] = updated
        logger.info("weekly investment for %s updated to %s", updated.name, amount)
        self._changed()
        return updated

    # -------------------------
    # derived
    # -------------------------
    def summary(self, years: Optional[int] = None) -> PortfolioSummary:
        holdings = self._holdings
        total = total_investment(holdings)
        stats = calculate_aggregate_stats(holdings)
        horizon = self.forecast_years if years is None else years
        return PortfolioSummary(
            total_weekly_investment=total,
            allocation=calculate_allocation(holdings),
            stats=stats,
            forecast=forecast_portfolio(total, stats.weighted_average_cagr3y, horizon),
        )

    def flush(self) -> Optional[Result[None]]:
        """Persist any pending change now."""
        return self.writer.flush()

    # -------------------------
    # helpers
    # -------------------------
    def _changed(self) -> None:
        self.writer.schedule(serialize_portfolio(self._holdings))

    def _index_of(self, fund_id: str) -> Optional[int]:
        for i, h in enumerate(self._holdings):
            if h.id == fund_id:
                return i
        return None

    def _require(self, fund_id: str) -> int:
        idx = self._index_of(fund_id)
        if idx is None:
            raise KeyError(fund_id)
        return idx

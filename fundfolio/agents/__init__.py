# fundfolio/agents/__init__.py
from .fund_data_agent import FundDataAgent, build_catalog, load_local_sources
from .portfolio_agent import PortfolioAgent, parse_weekly_investment
from .portfolio_store import (
    DebouncedWriter,
    JsonBinStore,
    LocalFileStore,
    parse_portfolio_document,
    serialize_portfolio,
)

__all__ = [
    "FundDataAgent",
    "build_catalog",
    "load_local_sources",
    "PortfolioAgent",
    "parse_weekly_investment",
    "DebouncedWriter",
    "JsonBinStore",
    "LocalFileStore",
    "parse_portfolio_document",
    "serialize_portfolio",
]

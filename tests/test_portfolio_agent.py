import logging

import pytest

from fundfolio.agents.portfolio_agent import PortfolioAgent, parse_weekly_investment
from fundfolio.agents.portfolio_store import DebouncedWriter
from fundfolio.ingest.models import MutualFund
from fundfolio.results import Failure, FailureKind, Success


ALPHA = MutualFund(id="alphafund-0", name="Alpha Fund", cagr_3y=12.0, expense_ratio=0.5,
                   percent_largecap_holding=80, percent_midcap_holding=20)
BETA = MutualFund(id="betafund-1", name="Beta Fund", expense_ratio=1.5, percent_smallcap_holding=60)


def _agent(store, **kwargs):
    # long delay: writes only happen on flush()
    writer = DebouncedWriter(store, delay_seconds=3600)
    return PortfolioAgent(store, writer=writer, **kwargs)


@pytest.mark.parametrize("raw,expected", [(500, 500.0), ("1,500", 1500.0), (" 250.5 ", 250.5), ("₹100", 100.0)])
def test_parse_weekly_investment_accepts(raw, expected):
    assert parse_weekly_investment(raw) == expected


@pytest.mark.parametrize("raw", [0, -10, "abc", "", None, True, float("nan"), float("inf"), [5]])
def test_parse_weekly_investment_rejects(raw):
    with pytest.raises(ValueError):
        parse_weekly_investment(raw)


def test_add_update_remove(store_cls):
    store = store_cls()
    agent = _agent(store)
    agent.add_fund(ALPHA, "1000")
    agent.add_fund(BETA, 3000)
    assert [h.id for h in agent.holdings] == ["alphafund-0", "betafund-1"]

    updated = agent.update_weekly_investment("alphafund-0", 2000)
    assert updated.weekly_investment == 2000
    assert updated.cagr_3y == 12.0

    removed = agent.remove_fund("betafund-1")
    assert removed.name == "Beta Fund"
    assert [h.id for h in agent.holdings] == ["alphafund-0"]


def test_add_rejects_duplicates_and_bad_amounts(store_cls):
    agent = _agent(store_cls())
    agent.add_fund(ALPHA, 100)
    with pytest.raises(ValueError):
        agent.add_fund(ALPHA, 200)
    with pytest.raises(ValueError):
        agent.add_fund(BETA, -1)
    with pytest.raises(ValueError):
        agent.update_weekly_investment("alphafund-0", "zero")
    assert [h.weekly_investment for h in agent.holdings] == [100]


def test_unknown_fund_id(store_cls):
    agent = _agent(store_cls())
    with pytest.raises(KeyError):
        agent.remove_fund("nope")
    with pytest.raises(KeyError):
        agent.update_weekly_investment("nope", 10)


def test_mutations_are_persisted_once_on_flush(store_cls):
    store = store_cls()
    agent = _agent(store)
    agent.add_fund(ALPHA, 1000)
    agent.add_fund(BETA, 3000)
    agent.update_weekly_investment("betafund-1", 1000)
    assert store.writes == []

    agent.flush()
    assert len(store.writes) == 1
    saved = store.writes[0]
    assert [(item["id"], item["weeklyInvestment"]) for item in saved] == [
        ("alphafund-0", 1000.0), ("betafund-1", 1000.0),
    ]


def test_summary(store_cls):
    agent = _agent(store_cls(), forecast_years=2)
    agent.add_fund(ALPHA, 1000)
    agent.add_fund(BETA, 1000)
    summary = agent.summary()
    assert summary.total_weekly_investment == 2000
    assert summary.allocation.large_cap_percentage == 40.0
    assert summary.allocation.mid_cap_percentage == 10.0
    assert summary.allocation.small_cap_percentage == 30.0
    assert summary.stats.weighted_average_expense_ratio == pytest.approx(1.0)
    # only Alpha reports a CAGR
    assert summary.stats.weighted_average_cagr3y == pytest.approx(12.0)
    assert [p.year for p in summary.forecast] == [0, 1, 2]
    assert summary.forecast[1].projected_value == 104000.0


def test_summary_without_forecast(store_cls):
    agent = _agent(store_cls())
    agent.add_fund(BETA, 500)
    summary = agent.summary(years=5)
    assert summary.stats.weighted_average_cagr3y is None
    assert summary.forecast == []


def test_load_initial_from_store(store_cls):
    store = store_cls(data=[{"id": "a", "name": "A", "weeklyInvestment": 100}])
    agent = _agent(store, default_portfolio_loader=lambda: pytest.fail("default should not load"))
    holdings = agent.load_initial_portfolio()
    assert [h.id for h in holdings] == ["a"]
    assert store.writes == []


def test_load_initial_falls_back_to_default(store_cls, holding):
    store = store_cls(data=[{"id": "a", "weeklyInvestment": "x"}])
    default = [holding("d", 250, name="Default Fund")]
    agent = _agent(store, default_portfolio_loader=lambda: Success(default))
    holdings = agent.load_initial_portfolio()
    assert [h.id for h in holdings] == ["d"]
    assert store.writes == [[{"id": "d", "name": "Default Fund", "weeklyInvestment": 250.0}]]


def test_load_initial_empty_store_and_failed_default(store_cls):
    store = store_cls(get_result=Failure(FailureKind.TRANSPORT, "offline", "jsonbin"))
    failure = Failure(FailureKind.MALFORMED_DOCUMENT, "bad", "default_portfolio")
    agent = _agent(store, default_portfolio_loader=lambda: failure)
    assert agent.load_initial_portfolio() == []
    assert store.writes == []


def test_load_initial_without_default_loader(store_cls):
    agent = _agent(store_cls(data=[]))
    assert agent.load_initial_portfolio() == []


def test_load_holdings_rejects_duplicates(store_cls, holding):
    agent = _agent(store_cls())
    with pytest.raises(ValueError):
        agent.load_holdings([holding("a", 1), holding("a", 2)])
    agent.load_holdings([holding("a", 1), holding("b", 2)])
    assert len(agent.holdings) == 2


def test_summary_with_zero_year_horizon(store_cls):
    agent = _agent(store_cls(), forecast_years=20)
    agent.add_fund(ALPHA, 1000)
    forecast = agent.summary(years=0).forecast
    assert [p.year for p in forecast] == [0]


def test_failed_store_of_default_portfolio_is_logged(store_cls, holding, caplog):
    class ReadOnlyStore(store_cls):
        def put(self, items):
            self.writes.append(items)
            return Failure(FailureKind.TRANSPORT, "HTTP 401", "jsonbin")

    store = ReadOnlyStore(data=None)
    agent = _agent(store, default_portfolio_loader=lambda: Success([holding("d", 250)]))
    with caplog.at_level(logging.WARNING, logger="PortfolioAgent"):
        holdings = agent.load_initial_portfolio()
    assert [h.id for h in holdings] == ["d"]
    assert len(store.writes) == 1
    assert "could not store default portfolio" in caplog.text
    assert "HTTP 401" in caplog.text

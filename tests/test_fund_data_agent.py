import json

from fundfolio.agents.fund_data_agent import FundDataAgent, load_local_sources
from fundfolio.results import Failure, FailureKind, Success


BASE = "https://cdn.test/data/base.csv"
SUPP1 = "https://cdn.test/data/supp1.csv"
SUPP2 = "https://cdn.test/data/supp2.csv"
DEFAULT = "https://cdn.test/data/my_funds.json"

SOURCES = [("base", BASE), ("supplement_1", SUPP1), ("supplement_2", SUPP2)]


def test_fetch_source_success(fake_session, fake_response):
    agent = FundDataAgent(sources=SOURCES, session=fake_session({BASE: fake_response(200, "name\nA")}))
    assert agent.fetch_source("base", BASE) == Success("name\nA")


def test_fetch_source_bad_status(fake_session, fake_response):
    agent = FundDataAgent(sources=SOURCES, session=fake_session({BASE: fake_response(503, "")}))
    result = agent.fetch_source("base", BASE)
    assert isinstance(result, Failure)
    assert result.kind is FailureKind.TRANSPORT
    assert "503" in result.reason
    assert result.source == "base"


def test_fetch_source_unreachable(fake_session):
    agent = FundDataAgent(sources=SOURCES, session=fake_session({}))
    result = agent.fetch_source("base", BASE)
    assert isinstance(result, Failure)
    assert result.kind is FailureKind.TRANSPORT


def test_fetch_all_keeps_priority_order(fake_session, fake_response):
    session = fake_session({
        BASE: fake_response(200, "a"),
        SUPP1: fake_response(200, "b"),
        SUPP2: fake_response(200, "c"),
    })
    agent = FundDataAgent(sources=SOURCES, session=session)
    results = agent.fetch_all()
    assert [name for name, _ in results] == ["base", "supplement_1", "supplement_2"]
    assert [r.value for _, r in results] == ["a", "b", "c"]


def test_load_catalog_end_to_end(fake_session, fake_response):
    session = fake_session({
        BASE: fake_response(200, "name,aum\nAlpha Fund,500"),
        SUPP1: fake_response(200, "name,cagr3y\nAlpha Fund,12.5\nBeta Fund,9.0"),
        SUPP2: fake_response(200, "name,expenseRatio\nAlpha Fund,1.1"),
    })
    result, report = FundDataAgent(sources=SOURCES, session=session).load_catalog()
    assert isinstance(result, Success)
    alpha = result.value.find_by_name("Alpha Fund")
    assert (alpha.aum, alpha.cagr_3y, alpha.expense_ratio) == (500.0, 12.5, 1.1)
    assert result.value.find_by_name("Beta Fund").to_record() == {
        "id": "betafund-1", "name": "Beta Fund", "cagr3y": 9.0,
    }
    assert report.source_failures == {}


def test_load_catalog_with_one_source_down(fake_session, fake_response):
    session = fake_session({
        BASE: fake_response(200, "name,aum\nAlpha Fund,500"),
        SUPP2: fake_response(200, ""),
    })
    result, report = FundDataAgent(sources=SOURCES, session=session).load_catalog()
    assert isinstance(result, Success)
    assert len(result.value) == 1
    assert list(report.source_failures) == ["supplement_1"]
    assert report.record_counts["supplement_2"] == 0


def test_load_catalog_everything_down(fake_session):
    result, report = FundDataAgent(sources=SOURCES, session=fake_session({})).load_catalog()
    assert isinstance(result, Failure)
    assert result.kind is FailureKind.NO_DATA
    assert len(report.source_failures) == 3


def test_load_default_portfolio(fake_session, fake_response):
    doc = [
        {"id": "alphafund-0", "name": "Alpha Fund", "weeklyInvestment": 500, "cagr3y": 12.5, "riskLevel": "High"},
        {"id": "betafund-1", "name": "Beta Fund", "weeklyInvestment": 250.5},
    ]
    agent = FundDataAgent(sources=SOURCES, session=fake_session({DEFAULT: fake_response(200, json.dumps(doc))}))
    result = agent.load_default_portfolio(DEFAULT)
    assert isinstance(result, Success)
    alpha, beta = result.value
    assert alpha.weekly_investment == 500
    assert alpha.cagr_3y == 12.5
    assert alpha.extra == {"riskLevel": "High"}
    assert beta.weekly_investment == 250.5


def test_load_default_portfolio_malformed(fake_session, fake_response):
    doc = [{"id": "x", "name": "X", "weeklyInvestment": "100"}]
    agent = FundDataAgent(sources=SOURCES, session=fake_session({DEFAULT: fake_response(200, json.dumps(doc))}))
    result = agent.load_default_portfolio(DEFAULT)
    assert isinstance(result, Failure)
    assert result.kind is FailureKind.MALFORMED_DOCUMENT


def test_load_default_portfolio_not_json(fake_session, fake_response):
    agent = FundDataAgent(sources=SOURCES, session=fake_session({DEFAULT: fake_response(200, "<html>")}))
    result = agent.load_default_portfolio(DEFAULT)
    assert result.kind is FailureKind.MALFORMED_DOCUMENT


def test_load_local_sources(tmp_path):
    base = tmp_path / "base.csv"
    base.write_text("name,aum\nA,1\n", encoding="utf-8")
    sources = load_local_sources([str(base), str(tmp_path / "missing.csv")])
    assert sources[0] == ("base", Success("name,aum\nA,1\n"))
    name, result = sources[1]
    assert name == "supplement_1"
    assert result.kind is FailureKind.TRANSPORT


def test_load_local_sources_undecodable_file(tmp_path):
    bad = tmp_path / "bad.csv"
    bad.write_bytes(b"name,aum\n\xff\xfeBad,1\n")
    [(name, result)] = load_local_sources([str(bad)])
    assert name == "base"
    assert isinstance(result, Failure)
    assert result.kind is FailureKind.MALFORMED_DOCUMENT

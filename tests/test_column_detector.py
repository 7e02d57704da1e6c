import pytest

from fundfolio.ingest.column_detector import detect_columns, known_fields_present, normalize_header


@pytest.mark.parametrize("raw,expected", [
    ("% Large-cap Holding", "percentLargecapHolding"),
    ("% Mid-cap Holding", "percentMidcapHolding"),
    ("%  Concentration Top 10 Holdings ", "percentConcentrationTop10Holdings"),
    ("Expense Ratio", "expenseRatio"),
    ("Sub Category", "subCategory"),
    ("CAGR 3Y", "cagr3y"),
    ("AUM", "aum"),
    ("Name", "name"),
    ("  Sharpe   Ratio  ", "sharpeRatio"),
    ("Sortino-Ratio", "sortinoratio"),
    ("% Other Holdings", "percentOtherHoldings"),
])
def test_normalize_examples(raw, expected):
    assert normalize_header(raw) == expected


def test_canonical_names_pass_through():
    assert normalize_header("expenseRatio") == "expenseRatio"
    assert normalize_header("cagr3y") == "cagr3y"
    assert normalize_header(" percentLargecapHolding ") == "percentLargecapHolding"
    assert normalize_header("percentConcentrationTop3Holdings") == "percentConcentrationTop3Holdings"


@pytest.mark.parametrize("raw,expected", [("3Y", "3y"), ("cagr3Y", "cagr3y"), ("return5Y", "return5y")])
def test_period_suffix_after_digit_is_lowercased(raw, expected):
    assert normalize_header(raw) == expected
    assert normalize_header(expected) == expected


@pytest.mark.parametrize("raw", [
    "% Large-cap Holding", "Expense Ratio", "3Y Avg Annual Rolling Return ", "AUM (Cr)", "weird__Header!!",
])
def test_normalize_is_idempotent(raw):
    once = normalize_header(raw)
    assert normalize_header(once) == once


def test_differently_punctuated_headers_collapse():
    assert normalize_header("Expense Ratio") == normalize_header("expense  ratio") == "expenseRatio"
    assert normalize_header("Expense Ratio") == normalize_header(" EXPENSE RATIO")
    assert normalize_header("% Small-cap Holding") == normalize_header("%  Small-Cap  Holding")


def test_detect_columns_reports_known_fields():
    detected = detect_columns(["Name", "AUM", "% Large-cap Holding", "Fund Manager"])
    assert detected["name"] == "Name"
    assert detected["aum"] == "AUM"
    assert detected["percentLargecapHolding"] == "% Large-cap Holding"
    assert detected["cagr3y"] is None
    assert "fundManager" not in detected


def test_known_fields_present():
    assert known_fields_present(["name", "cagr3y", "Something Else"]) == ["name", "cagr3y"]

# fundfolio/ingest/models.py
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


FieldValue = Union[None, float, str]
FundRecord = Dict[str, FieldValue]


# canonical CSV key -> model attribute
TEXT_FIELDS = {
    "name": "name",
    "subCategory": "sub_category",
    "plan": "plan",
}

NUMERIC_FIELDS = {
    "aum": "aum",
    "sortinoRatio": "sortino_ratio",
    "sharpeRatio": "sharpe_ratio",
    "cagr3y": "cagr_3y",
    "expenseRatio": "expense_ratio",
    "percentLargecapHolding": "percent_largecap_holding",
    "percentMidcapHolding": "percent_midcap_holding",
    "percentSmallcapHolding": "percent_smallcap_holding",
    "percentEquityHolding": "percent_equity_holding",
    "percentCashHolding": "percent_cash_holding",
    "percentOtherHoldings": "percent_other_holdings",
    "percentConcentrationTop3Holdings": "percent_concentration_top3_holdings",
    "percentConcentrationTop5Holdings": "percent_concentration_top5_holdings",
    "percentConcentrationTop10Holdings": "percent_concentration_top10_holdings",
}

KNOWN_FIELDS = {**TEXT_FIELDS, **NUMERIC_FIELDS}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def render_number(value: float) -> str:
    """Plain decimal text for a number: 500.0 -> '500', 12.5 -> '12.5'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class MutualFund(BaseModel):
    """
    Canonical fund entity produced by reconciliation.
    Known columns are typed attributes; any other CSV column lives in `extra`.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    sub_category: Optional[str] = Field(None, alias="subCategory")
    plan: Optional[str] = None
    aum: Optional[float] = None
    sortino_ratio: Optional[float] = Field(None, alias="sortinoRatio")
    sharpe_ratio: Optional[float] = Field(None, alias="sharpeRatio")
    cagr_3y: Optional[float] = Field(None, alias="cagr3y")
    expense_ratio: Optional[float] = Field(None, alias="expenseRatio")
    percent_largecap_holding: Optional[float] = Field(None, alias="percentLargecapHolding")
    percent_midcap_holding: Optional[float] = Field(None, alias="percentMidcapHolding")
    percent_smallcap_holding: Optional[float] = Field(None, alias="percentSmallcapHolding")
    percent_equity_holding: Optional[float] = Field(None, alias="percentEquityHolding")
    percent_cash_holding: Optional[float] = Field(None, alias="percentCashHolding")
    percent_other_holdings: Optional[float] = Field(None, alias="percentOtherHoldings")
    percent_concentration_top3_holdings: Optional[float] = Field(None, alias="percentConcentrationTop3Holdings")
    percent_concentration_top5_holdings: Optional[float] = Field(None, alias="percentConcentrationTop5Holdings")
    percent_concentration_top10_holdings: Optional[float] = Field(None, alias="percentConcentrationTop10Holdings")
    extra: Dict[str, Any] = Field(default_factory=dict)  # unrecognized columns, passed through

    @classmethod
    def from_record(cls, fund_id: str, record: FundRecord, **kwargs: Any) -> "MutualFund":
        """
        Build a fund from a merged partial record.

        A value of the wrong type for a typed column (e.g. "1,000" under aum)
        is kept in `extra` and the typed field stays unset; numbers found in a
        text column keep their decimal text.
        """
        known: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in record.items():
            if key in TEXT_FIELDS:
                if _is_number(value):
                    value = render_number(value)
                if value is None or isinstance(value, str):
                    known[TEXT_FIELDS[key]] = value
                else:
                    extra[key] = value
            elif key in NUMERIC_FIELDS:
                if value is None or _is_number(value):
                    known[NUMERIC_FIELDS[key]] = value
                else:
                    extra[key] = value
            else:
                extra[key] = value
        return cls(id=fund_id, extra=extra, **known, **kwargs)

    def metric(self, key: str) -> Optional[float]:
        """Numeric value for a canonical key, from a typed field or `extra`; None if unknown."""
        if key in NUMERIC_FIELDS:
            return getattr(self, NUMERIC_FIELDS[key])
        value = self.extra.get(key)
        if _is_number(value):
            return float(value)
        return None

    def to_record(self) -> Dict[str, Any]:
        """camelCase dict with `extra` flattened, omitting unknown values."""
        data = self.model_dump(by_alias=True, exclude_none=True, exclude={"extra"})
        for key, value in self.extra.items():
            if value is not None and key not in data:
                data[key] = value
        return data


class PortfolioHolding(MutualFund):
    """A fund in the user's portfolio with its weekly contribution."""
    weekly_investment: float = Field(..., ge=0, alias="weeklyInvestment")

    @classmethod
    def from_fund(cls, fund: MutualFund, weekly_investment: float) -> "PortfolioHolding":
        data = fund.model_dump()
        data["weekly_investment"] = weekly_investment
        return cls.model_validate(data)

    @classmethod
    def from_blob_item(cls, item: Dict[str, Any]) -> "PortfolioHolding":
        """Rebuild a holding from one object of a persisted portfolio array."""
        record = {k: v for k, v in item.items() if k not in {"id", "weeklyInvestment"}}
        return cls.from_record(item["id"], record, weekly_investment=item["weeklyInvestment"])


class AllocationResult(BaseModel):
    large_cap_percentage: float = Field(0.0, alias="largeCapPercentage")
    mid_cap_percentage: float = Field(0.0, alias="midCapPercentage")
    small_cap_percentage: float = Field(0.0, alias="smallCapPercentage")

    model_config = ConfigDict(populate_by_name=True)


class AggregateStats(BaseModel):
    weighted_average_expense_ratio: Optional[float] = Field(None, alias="weightedAverageExpenseRatio")
    weighted_average_cagr3y: Optional[float] = Field(None, alias="weightedAverageCagr3y")

    model_config = ConfigDict(populate_by_name=True)


class ForecastPoint(BaseModel):
    year: int = Field(..., ge=0)
    projected_value: float = Field(..., alias="projectedValue")
    total_invested: float = Field(..., alias="totalInvested")

    model_config = ConfigDict(populate_by_name=True)


class PortfolioSummary(BaseModel):
    """Everything derived from the current holdings; recomputed, never persisted."""
    total_weekly_investment: float = Field(0.0, alias="totalWeeklyInvestment")
    allocation: AllocationResult
    stats: AggregateStats
    forecast: List[ForecastPoint] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class IngestReport(BaseModel):
    """
    What happened during one catalog ingestion pass.
    """
    sources_loaded: List[str] = Field(default_factory=list)
    source_failures: Dict[str, str] = Field(default_factory=dict)   # source -> reason
    record_counts: Dict[str, int] = Field(default_factory=dict)     # source -> records kept
    detected_columns: Dict[str, List[str]] = Field(default_factory=dict)  # source -> known fields present
    parse_notes: List[str] = Field(default_factory=list)            # dropped rows
    total_funds: int = 0

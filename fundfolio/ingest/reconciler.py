# fundfolio/ingest/reconciler.py
"""
Merge partial fund records from several sheets into one canonical fund per
name. Sources are folded in priority order (base sheet, supplement 1,
supplement 2); for each field the last source that reports a value wins.
"""

import re
from typing import Dict, List, Optional, Tuple

from .models import FundRecord, MutualFund
from ..results import Failure, FailureKind, Result, Success


_SLUG_RE = re.compile(r"[^a-z0-9]")

SourceResult = Tuple[str, Result[List[FundRecord]]]


def slugify(name: str) -> str:
    slug = _SLUG_RE.sub("", name.lower())
    return slug or "unknown"


def fund_id(name: str, ordinal: int) -> str:
    return f"{slugify(name)}-{ordinal}"


def merge_records(records_by_source: List[List[FundRecord]]) -> Dict[str, FundRecord]:
    """
    Fold record lists (in priority order) into name -> merged record.
    A None from a later source never erases a value reported earlier.
    """
    merged: Dict[str, FundRecord] = {}
    for records in records_by_source:
        for record in records:
            name = record.get("name")
            if not name:
                continue
            existing = merged.get(name)
            if existing is None:
                merged[name] = dict(record)
                continue
            for key, value in record.items():
                if value is None and existing.get(key) is not None:
                    continue
                existing[key] = value
    return merged


def reconcile(sources: List[SourceResult]) -> Result[List[MutualFund]]:
    """
    Reconcile per-source results into the canonical fund list.

    Args:
        sources: (source_name, result) pairs in priority order. Failed sources
            are skipped; the caller is expected to have logged them.

    Returns:
        Success with funds in first-seen order, or Failure(NO_DATA) when every
        source failed.
    """
    loaded = [result.value for _, result in sources if isinstance(result, Success)]
    failures = [result for _, result in sources if isinstance(result, Failure)]

    if sources and not loaded:
        reasons = "; ".join(f.describe() for f in failures)
        return Failure(FailureKind.NO_DATA, f"all fund data sources failed ({reasons})")

    merged = merge_records(loaded)
    funds = [
        MutualFund.from_record(fund_id(name, ordinal), record)
        for ordinal, (name, record) in enumerate(merged.items())
    ]
    return Success(funds)


class FundCatalog:
    """Immutable view over one reconciliation pass."""

    def __init__(self, funds: List[MutualFund]):
        self._funds = tuple(funds)
        self._by_id = {f.id: f for f in self._funds}
        self._by_name = {f.name: f for f in self._funds}

    @property
    def funds(self) -> List[MutualFund]:
        return list(self._funds)

    def __len__(self) -> int:
        return len(self._funds)

    def __iter__(self):
        return iter(self._funds)

    def get(self, fund_id: str) -> Optional[MutualFund]:
        return self._by_id.get(fund_id)

    def find_by_name(self, name: str) -> Optional[MutualFund]:
        return self._by_name.get(name)

    def search(self, term: str, limit: int = 50) -> List[MutualFund]:
        """Case-insensitive name search. An empty term returns the first 3 funds."""
        needle = (term or "").strip().lower()
        if not needle:
            return list(self._funds[:3])
        hits = [f for f in self._funds if needle in f.name.lower()]
        return hits[:limit]

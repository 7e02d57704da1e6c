# fundfolio/agents/fund_data_agent.py
"""
FundDataAgent - fetches the fund sheets (base + two supplements) and the
default portfolio over HTTP, and builds the reconciled fund catalog.

Fetches run concurrently; the merge always applies sources in priority
order, whichever fetch finished first.

Usage:
    from fundfolio.agents.fund_data_agent import FundDataAgent
    agent = FundDataAgent(sources=settings.csv_sources)
    result, report = agent.load_catalog()
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..ingest.column_detector import known_fields_present
from ..ingest.models import FundRecord, IngestReport, PortfolioHolding
from ..ingest.parser import parse_csv_text, split_csv_lines
from ..ingest.reconciler import FundCatalog, reconcile
from ..results import Failure, FailureKind, Result, Success
from .portfolio_store import parse_portfolio_document

logger = logging.getLogger("FundDataAgent")
if not logger.handlers:
    ch = logging.StreamHandler()
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(ch)
logger.setLevel(logging.INFO)


def build_catalog(
    source_texts: List[Tuple[str, Result[str]]],
) -> Tuple[Result[FundCatalog], IngestReport]:
    """
    Parse each fetched document and reconcile them in the given order.

    Args:
        source_texts: (source_name, Result[csv_text]) pairs in priority order

    Returns:
        Tuple of (catalog_result, report)
    """
    report = IngestReport()
    parsed: List[Tuple[str, Result[List[FundRecord]]]] = []

    for name, result in source_texts:
        if isinstance(result, Failure):
            logger.warning("fund source %s skipped: %s", name, result.reason)
            report.source_failures[name] = result.reason
            parsed.append((name, result))
            continue

        records, notes = parse_csv_text(result.value, source=name)
        headers, _ = split_csv_lines(result.value)
        report.sources_loaded.append(name)
        report.record_counts[name] = len(records)
        report.detected_columns[name] = known_fields_present(headers)
        report.parse_notes.extend(notes)
        parsed.append((name, Success(records)))

    merged = reconcile(parsed)
    if isinstance(merged, Failure):
        logger.warning("fund catalog unavailable: %s", merged.reason)
        return merged, report

    report.total_funds = len(merged.value)
    logger.info("fund catalog built: %d funds from %d sources", report.total_funds, len(report.sources_loaded))
    return Success(FundCatalog(merged.value)), report


@dataclass
class FundDataAgent:
    sources: List[Tuple[str, str]]      # (name, url) in merge priority order
    concurrency: int = 3
    request_timeout_seconds: int = 15
    session: Any = None

    def __post_init__(self):
        if self.session is None:
            self.session = requests.Session()

    def fetch_source(self, name: str, url: str) -> Result[str]:
        """
        Fetch one document. An empty body is a valid (empty) source; an
        unreachable URL or non-2xx status is a transport failure.
        """
        try:
            resp = self.session.get(url, timeout=self.request_timeout_seconds)
        except requests.RequestException as e:
            logger.debug("fetch failed for %s: %s", name, e, exc_info=True)
            return Failure(FailureKind.TRANSPORT, f"Failed to fetch {url}: {e}", name)

        if not resp.ok:
            return Failure(
                FailureKind.TRANSPORT,
                f"Failed to fetch {url}: {resp.status_code} {resp.reason}",
                name,
            )
        return Success(resp.text)

    def fetch_all(self) -> List[Tuple[str, Result[str]]]:
        """Fetch every source concurrently; results come back in priority order."""
        results: Dict[str, Result[str]] = {}
        with ThreadPoolExecutor(max_workers=max(1, self.concurrency)) as ex:
            future_to_name = {
                ex.submit(self.fetch_source, name, url): name
                for name, url in self.sources
            }
            for fut in as_completed(future_to_name):
                name = future_to_name[fut]
                try:
                    results[name] = fut.result()
                except Exception as e:
                    logger.debug("fetch worker failed for %s: %s", name, e, exc_info=True)
                    results[name] = Failure(FailureKind.TRANSPORT, str(e), name)

        return [(name, results[name]) for name, _ in self.sources]

    def load_catalog(self) -> Tuple[Result[FundCatalog], IngestReport]:
        return build_catalog(self.fetch_all())

    def load_default_portfolio(self, url: str) -> Result[List[PortfolioHolding]]:
        """
        Fetch the default portfolio document. A document of the wrong shape
        comes back as Failure(MALFORMED_DOCUMENT), not an exception.
        """
        fetched = self.fetch_source("default_portfolio", url)
        if isinstance(fetched, Failure):
            logger.warning("default portfolio unavailable: %s", fetched.reason)
            return fetched
        try:
            data = json.loads(fetched.value)
        except json.JSONDecodeError as e:
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"not JSON: {e}", "default_portfolio")

        result = parse_portfolio_document(data, source="default_portfolio")
        if isinstance(result, Failure):
            logger.warning("default portfolio from %s is not in the expected format: %s", url, result.reason)
        return result


def load_local_sources(paths: List[Optional[str]]) -> List[Tuple[str, Result[str]]]:
    """
    Read CSV files from disk as catalog sources, in the order given.
    A missing or unreadable file is a source failure, like an unreachable URL;
    a file that is not UTF-8 text fails as a malformed document.
    """
    names = ["base", "supplement_1", "supplement_2"]
    out: List[Tuple[str, Result[str]]] = []
    for idx, path in enumerate(paths):
        name = names[idx] if idx < len(names) else f"source_{idx}"
        if not path:
            continue
        try:
            with open(path, encoding="utf-8-sig") as fh:
                out.append((name, Success(fh.read())))
        except OSError as e:
            out.append((name, Failure(FailureKind.TRANSPORT, str(e), name)))
        except UnicodeDecodeError as e:
            out.append((name, Failure(FailureKind.MALFORMED_DOCUMENT, f"not UTF-8 text: {e}", name)))
    return out

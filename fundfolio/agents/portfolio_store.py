# fundfolio/agents/portfolio_store.py
"""
Opaque blob storage for the serialized portfolio, plus a debounced writer.

The portfolio is always read and written whole, as a JSON array of holding
objects ({"id", "name", "weeklyInvestment", ...}).

Stores:
    JsonBinStore   - remote bin over HTTP (JSONBin v3 style API)
    LocalFileStore - JSON file on disk
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import ValidationError

from ..ingest.models import PortfolioHolding
from ..results import Failure, FailureKind, Result, Success

logger = logging.getLogger("PortfolioStore")
if not logger.handlers:
    ch = logging.StreamHandler()
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(ch)
logger.setLevel(logging.INFO)


# ---------- Document shape ----------

def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def parse_portfolio_document(data: Any, source: str = "portfolio") -> Result[List[PortfolioHolding]]:
    """
    Validate a portfolio array and turn it into holdings.

    Every item needs a non-empty string id, a string name and a numeric
    weeklyInvestment >= 0. Anything else makes the whole document malformed.
    """
    if not isinstance(data, list):
        return Failure(FailureKind.MALFORMED_DOCUMENT, "expected a JSON array", source)

    holdings: List[PortfolioHolding] = []
    seen = set()
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"item {idx} is not an object", source)
        fund_id = item.get("id")
        name = item.get("name")
        weekly = item.get("weeklyInvestment")
        if not isinstance(fund_id, str) or not fund_id:
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"item {idx} has no id", source)
        if not isinstance(name, str) or not name:
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"item {idx} has no name", source)
        if not _is_number(weekly):
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"item {idx} has no numeric weeklyInvestment", source)
        if fund_id in seen:
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"duplicate id {fund_id}", source)
        try:
            holdings.append(PortfolioHolding.from_blob_item(item))
        except ValidationError as e:
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"item {idx}: {e.errors()[0]['msg']}", source)
        seen.add(fund_id)
    return Success(holdings)


def serialize_portfolio(holdings: List[PortfolioHolding]) -> List[Dict[str, Any]]:
    return [h.to_record() for h in holdings]


# ---------- Stores ----------

@dataclass
class JsonBinStore:
    bin_id: str
    api_key: str
    base_url: str = "https://api.jsonbin.io/v3"
    request_timeout_seconds: int = 15
    session: Any = None

    def __post_init__(self):
        if self.session is None:
            self.session = requests.Session()

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "X-Master-Key": self.api_key,
            "Content-Type": "application/json",
        }

    def get(self) -> Result[Optional[List[Dict[str, Any]]]]:
        """Current array, Success(None) if the bin is missing or empty."""
        url = f"{self.base_url}/b/{self.bin_id}/latest"
        headers = dict(self._headers, **{"X-Bin-Meta": "false"})
        try:
            resp = self.session.get(url, headers=headers, timeout=self.request_timeout_seconds)
        except requests.RequestException as e:
            logger.debug("bin read failed for %s: %s", self.bin_id, e, exc_info=True)
            return Failure(FailureKind.TRANSPORT, str(e), "jsonbin")

        if resp.status_code == 404:
            return Success(None)
        if not resp.ok:
            return Failure(FailureKind.TRANSPORT, f"HTTP {resp.status_code} reading bin {self.bin_id}", "jsonbin")
        if not resp.text.strip():
            return Success(None)
        try:
            data = resp.json()
        except ValueError:
            return Failure(FailureKind.MALFORMED_DOCUMENT, "bin content is not JSON", "jsonbin")
        # some bins wrap the document in {"record": [...]}
        if isinstance(data, dict) and "record" in data:
            data = data["record"]
        return Success(data)

    def put(self, items: List[Dict[str, Any]]) -> Result[None]:
        url = f"{self.base_url}/b/{self.bin_id}"
        try:
            resp = self.session.put(url, headers=self._headers, json=items, timeout=self.request_timeout_seconds)
        except requests.RequestException as e:
            logger.debug("bin write failed for %s: %s", self.bin_id, e, exc_info=True)
            return Failure(FailureKind.TRANSPORT, str(e), "jsonbin")
        if not resp.ok:
            return Failure(FailureKind.TRANSPORT, f"HTTP {resp.status_code} writing bin {self.bin_id}", "jsonbin")
        return Success(None)


@dataclass
class LocalFileStore:
    path: Path

    def __post_init__(self):
        self.path = Path(self.path).expanduser()

    def get(self) -> Result[Optional[List[Dict[str, Any]]]]:
        if not self.path.exists():
            return Success(None)
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return Success(None)
        try:
            return Success(json.loads(text))
        except json.JSONDecodeError as e:
            return Failure(FailureKind.MALFORMED_DOCUMENT, f"invalid JSON: {e}", str(self.path))

    def put(self, items: List[Dict[str, Any]]) -> Result[None]:
        # atomic replace
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(items, indent=2), encoding="utf-8")
        tmp.replace(self.path)
        return Success(None)


# ---------- Debounced persistence ----------

@dataclass
class DebouncedWriter:
    """
    Coalesces rapid portfolio changes into one store write.

    Each schedule() call restarts the quiet-period timer; when it expires the
    latest snapshot is written exactly once. Writes never overlap, and a
    snapshot older than one already written is dropped, so the newest state
    is the one left in the store.
    """
    store: Any
    delay_seconds: float = 1.5
    timer_factory: Callable[..., threading.Timer] = threading.Timer
    _pending: Optional[List[Dict[str, Any]]] = field(default=None, init=False, repr=False)
    _timer: Optional[threading.Timer] = field(default=None, init=False, repr=False)
    _generation: int = field(default=0, init=False, repr=False)
    _written_generation: int = field(default=0, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _write_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def schedule(self, snapshot: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._generation += 1
            self._pending = snapshot
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self.timer_factory(self.delay_seconds, self._fire)
            self._timer.daemon = True
            self._timer.start()

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def flush(self) -> Optional[Result[None]]:
        """Write any pending snapshot now. Returns None if nothing was pending."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        return self._fire()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None

    def _fire(self) -> Optional[Result[None]]:
        with self._lock:
            snapshot = self._pending
            generation = self._generation
            self._pending = None
            self._timer = None
        if snapshot is None:
            return None

        with self._write_lock:
            if generation <= self._written_generation:
                logger.debug("skipping stale portfolio snapshot (generation %d)", generation)
                return None
            result = self.store.put(snapshot)
            self._written_generation = generation

        if isinstance(result, Failure):
            logger.warning("portfolio save failed: %s", result.describe())
        else:
            logger.debug("portfolio saved (%d holdings)", len(snapshot))
        return result

# fundfolio/ingest/column_detector.py
"""
Header normalization: map human-readable CSV headers such as
"% Large-cap Holding" or "Expense Ratio" onto canonical camelCase field
names, so the same column collapses onto one field across every sheet.
"""

import re
from typing import Dict, List, Optional

from .models import KNOWN_FIELDS


# already-canonical identifiers pass through untouched; a lone capital after a
# digit ("3Y", "cagr3Y") is a raw period suffix and still gets lowercased
_CANONICAL_RE = re.compile(r"^(?!.*\d[A-Z](?![a-z]))[a-z0-9]+(?:[A-Z][a-z0-9]*)*$")
_DISALLOWED_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """
    Map one raw header to its canonical field name.

    Examples:
        "% Large-cap Holding" -> "percentLargecapHolding"
        "Expense Ratio"       -> "expenseRatio"
        "CAGR 3Y"             -> "cagr3y"
        "expenseRatio"        -> "expenseRatio"
    """
    key = header.strip()
    if _CANONICAL_RE.match(key):
        return key

    if key.startswith("%"):
        key = "percent" + key[1:]

    key = key.lower()
    key = _DISALLOWED_RE.sub("", key)
    key = _WHITESPACE_RE.sub(" ", key).strip()

    words = key.split(" ")
    return words[0] + "".join(w[:1].upper() + w[1:] for w in words[1:])


def normalize_headers(headers: List[str]) -> List[str]:
    return [normalize_header(h) for h in headers]


def detect_columns(column_names: List[str]) -> Dict[str, Optional[str]]:
    """
    Report which well-known fund fields a header row provides.

    Args:
        column_names: Raw header strings from the first CSV line

    Returns:
        Dictionary mapping canonical field names to the raw header that
        produced them (or None if the sheet does not carry that field)
        Example: {"name": "Name", "aum": "AUM", "cagr3y": None, ...}
    """
    normalized = {}
    for col in column_names:
        # first header wins if two raw headers collapse onto one field
        normalized.setdefault(normalize_header(col), col)

    return {field: normalized.get(field) for field in KNOWN_FIELDS}


def known_fields_present(column_names: List[str]) -> List[str]:
    """Canonical names of the well-known fields present in a header row."""
    detected = detect_columns(column_names)
    return [field for field, col in detected.items() if col is not None]

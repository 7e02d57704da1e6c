# fundfolio/ingest/parser.py
from pathlib import Path
from typing import List, Tuple
import math
import re

from .models import FieldValue, FundRecord
from .column_detector import normalize_headers


NOT_APPLICABLE = {"", "n.a.", "na", "n/a"}

# plain decimal literal: no sign other than '-', no leading zeros, no exponent
_DECIMAL_RE = re.compile(r"^-?(?:0|[1-9]\d*)(?:\.\d+)?$")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def parse_csv_line(line: str) -> List[str]:
    """
    Split one CSV line on unquoted commas.

    A double quote toggles quoted mode; a doubled quote inside quotes is a
    literal quote. Unterminated quotes run to the end of the line. Fields are
    trimmed. Never raises.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current).strip())
    return fields


def split_csv_lines(text: str) -> Tuple[List[str], List[str]]:
    """
    Split a document into (header_line_fields, data_lines).
    Blank data lines are dropped here and never reach the record builder.
    """
    stripped = text.strip()
    if not stripped:
        return [], []
    lines = _LINE_SPLIT_RE.split(stripped)
    headers = parse_csv_line(lines[0])
    data_lines = [line for line in lines[1:] if line.strip()]
    return headers, data_lines


def classify_cell(raw: str) -> FieldValue:
    """
    Classify one cell as None, a number or text.

    '12.5%' -> 12.5, '500' -> 500.0, 'N/A' -> None, '12,500' -> '12,500'

    Trailing zeros are accepted on purpose: '9.0' and '1.10' are numbers.
    """
    value = raw.strip()
    if value.lower() in NOT_APPLICABLE:
        return None

    candidate = value[:-1].strip() if value.endswith("%") else value
    if _DECIMAL_RE.match(candidate):
        num = float(candidate)
        if math.isfinite(num):
            return num
    return value


def build_fund_record(headers: List[str], values: List[str]) -> FundRecord:
    """
    Combine canonical headers with one row of raw cells.
    Cells past the end of a short row are stored as None; the name column is
    kept as text.
    """
    record: FundRecord = {}
    for i, header in enumerate(headers):
        if i >= len(values):
            record[header] = None
            continue
        if header == "name":
            name = values[i].strip()
            record[header] = None if name.lower() in NOT_APPLICABLE else name
        else:
            record[header] = classify_cell(values[i])
    return record


def parse_csv_text(text: str, source: str = "csv") -> Tuple[List[FundRecord], List[str]]:
    """
    Parse a whole CSV document into partial fund records.

    Args:
        text: Raw document text, first line is the header row
        source: Label used in parse notes

    Returns:
        Tuple of (records, parse_notes) where parse_notes lists dropped rows
    """
    raw_headers, data_lines = split_csv_lines(text)
    if not raw_headers:
        return [], []

    headers = normalize_headers(raw_headers)
    records: List[FundRecord] = []
    parse_notes: List[str] = []

    if "name" not in headers:
        if data_lines:
            parse_notes.append(f"{source}: no name column - {len(data_lines)} rows skipped")
        return records, parse_notes

    for idx, line in enumerate(data_lines, start=1):
        record = build_fund_record(headers, parse_csv_line(line))
        if not record.get("name"):
            parse_notes.append(f"{source} row {idx}: Empty name - skipped")
            continue
        records.append(record)

    return records, parse_notes


def parse_file(file_path: str) -> Tuple[List[FundRecord], List[str]]:
    """
    Read a local CSV file and parse it into partial fund records.
    """
    p = Path(file_path)
    if not p.exists():
        raise FileNotFoundError(file_path)
    if p.suffix.lower() != ".csv":
        raise ValueError("Unsupported file type. Use .csv")

    text = p.read_text(encoding="utf-8-sig")
    return parse_csv_text(text, source=p.name)

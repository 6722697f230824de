from __future__ import annotations

import csv
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

# Columns appended to every output row.
OUTPUT_COLUMNS = ["Price", "Cat", "Sub Cat", "Source", "URL", "Pricer", "Status"]

PRICER_FOUND = "AI-Enhanced"
PRICER_MANUAL = "Manual Validation Required"
PRICER_ERROR = "Error - Manual Review Required"

_SKIP_MARKERS = ("bulk personal care", "misc", "various")
_PRICE_NOISE_RE = re.compile(r"[$,\s]")


@dataclass(frozen=True)
class ColumnMap:
    item_number: str | None = None
    desc: str | None = None
    item_description: str | None = None
    brand: str | None = None
    model: str | None = None
    cost_to_replace: str | None = None
    tolerance: str | None = None


@dataclass(frozen=True)
class InventoryRow:
    index: int
    item_number: str
    query: str | None
    target_price: float | None = None
    tolerance: float | None = None
    skip_reason: str | None = None
    raw: dict[str, str] = field(default_factory=dict, compare=False)


def detect_columns(headers: Iterable[str]) -> ColumnMap:
    found: dict[str, str] = {}
    for header in headers:
        h = header.strip().lower()
        if h in ("desc", "description"):
            found.setdefault("desc", header)
        if "item" in h and "#" in h:
            found.setdefault("item_number", header)
        if "item" in h and "description" in h:
            found.setdefault("item_description", header)
        if "brand" in h or "manufacturer" in h:
            found.setdefault("brand", header)
        if h in ("model", "model #", "model number"):
            found.setdefault("model", header)
        if "cost" in h and "replace" in h:
            found.setdefault("cost_to_replace", header)
        if h in ("tolerance", "tolerance %", "tolerance (%)"):
            found.setdefault("tolerance", header)
    return ColumnMap(**found)


def _cell(row: Mapping[str, str], column: str | None) -> str:
    if column is None:
        return ""
    return (row.get(column) or "").strip()


def parse_amount(text: str | None) -> float | None:
    """Parse '$1,299.00' style cells; blanks, junk and non-positive values give None."""
    if not text:
        return None
    cleaned = _PRICE_NOISE_RE.sub("", text).rstrip("%")
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not value > 0:
        return None
    return value


def build_query(row: Mapping[str, str], columns: ColumnMap) -> str | None:
    desc = _cell(row, columns.desc)
    if len(desc) > 15 and desc not in ("1", "EMPTY") and "�" not in desc:
        return desc

    parts = [
        _cell(row, columns.brand),
        _cell(row, columns.item_description),
        _cell(row, columns.model),
    ]
    if not parts[1]:
        return None
    return " ".join(p for p in parts if p)


def skip_reason(row: Mapping[str, str], columns: ColumnMap) -> str | None:
    item_desc = _cell(row, columns.item_description).lower()
    desc = _cell(row, columns.desc).lower()

    if any(marker in item_desc for marker in _SKIP_MARKERS):
        return "bulk or generic item"
    if not item_desc and len(desc) < 5:
        return "no usable description"
    return None


def parse_rows(records: Iterable[Mapping[str, str]], columns: ColumnMap) -> list[InventoryRow]:
    out: list[InventoryRow] = []
    for idx, record in enumerate(records):
        item_number = _cell(record, columns.item_number)
        if not item_number:
            continue

        reason = skip_reason(record, columns)
        query = build_query(record, columns) if reason is None else None
        if reason is None and query is None:
            reason = "no search terms"

        out.append(
            InventoryRow(
                index=idx,
                item_number=item_number,
                query=query,
                target_price=parse_amount(_cell(record, columns.cost_to_replace)),
                tolerance=parse_amount(_cell(record, columns.tolerance)),
                skip_reason=reason,
                raw=dict(record),
            )
        )
    return out


def read_inventory(path: str | Path) -> tuple[list[InventoryRow], list[str]]:
    """Read an inventory CSV. Returns the parsed rows and the original header order."""
    with open(path, newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        headers = list(reader.fieldnames or [])
        if not headers:
            raise RuntimeError(f"Inventory file has no header row: {path}")
        columns = detect_columns(headers)
        if columns.item_number is None:
            raise RuntimeError(f"Inventory file has no 'Item #' column: {path}")
        rows = parse_rows(reader, columns)
    return rows, headers


def write_inventory(path: str | Path, headers: list[str], rows: Iterable[Mapping[str, object]]) -> str:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fieldnames = headers + [c for c in OUTPUT_COLUMNS if c not in headers]
    with open(out, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return str(out)

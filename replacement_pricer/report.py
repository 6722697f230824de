from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from pathlib import Path

from .inventory import PRICER_ERROR, PRICER_FOUND, PRICER_MANUAL

FOUND = "FOUND"
NOT_FOUND = "NOT_FOUND"
SKIPPED = "SKIPPED"
ERROR = "ERROR"
CANCELLED = "CANCELLED"


@dataclass
class ItemReport:
    item_number: str
    query: str | None
    target_price: float | None
    status: str  # FOUND, NOT_FOUND, SKIPPED, ERROR, CANCELLED
    price: float | None = None
    source: str | None = None
    url: str | None = None
    category: str | None = None
    subcategory: str | None = None
    description: str | None = None
    within_range: bool = False
    message: str | None = None
    raw: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def pricer(self) -> str:
        if self.status == FOUND:
            return PRICER_FOUND
        if self.status == ERROR:
            return PRICER_ERROR
        return PRICER_MANUAL

    def output_row(self) -> dict[str, object]:
        row: dict[str, object] = dict(self.raw)
        row.update({
            "Price": f"{self.price:.2f}" if self.price is not None else "",
            "Cat": self.category or "",
            "Sub Cat": self.subcategory or "",
            "Source": self.source or "",
            "URL": self.url or "",
            "Pricer": self.pricer,
            "Status": self.message if self.status != FOUND and self.message else self.status,
        })
        return row


@dataclass
class RunReport:
    timestamp: str
    total: int
    found: int
    not_found: int
    skipped: int
    errors: int
    cancelled: int
    within_range: int
    cache_hits: int
    elapsed_s: float
    items: list[ItemReport]

    @property
    def success_rate(self) -> float:
        priced = self.total - self.skipped - self.cancelled
        return (self.found / priced * 100) if priced else 0.0

    def summary_text(self) -> str:
        lines = [
            f"Run: {self.timestamp}  ({self.elapsed_s:.1f}s)",
            f"Total: {self.total}  Found: {self.found}  Not found: {self.not_found}  "
            f"Skipped: {self.skipped}  Errors: {self.errors}  Cancelled: {self.cancelled}",
            f"Success: {self.success_rate:.0f}%  Within range: {self.within_range}  "
            f"Cache hits: {self.cache_hits}",
            "",
        ]
        for it in self.items:
            lines.append(f"  {it.item_number}. [{it.status}] {it.query or '-'}")
            if it.status == FOUND:
                lines.append(f"     → ${it.price:.2f} {it.source}  {it.url}")
            elif it.message:
                lines.append(f"     → {it.message}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        data = asdict(self)
        for item in data["items"]:
            item.pop("raw", None)
        return data

    def write_json(self, path: str = "artifacts/run_report.json") -> str:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(self.to_dict(), indent=2))
        return str(out)


def build_report(items: list[ItemReport], *, cache_hits: int = 0, elapsed_s: float = 0.0) -> RunReport:
    return RunReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        total=len(items),
        found=sum(1 for i in items if i.status == FOUND),
        not_found=sum(1 for i in items if i.status == NOT_FOUND),
        skipped=sum(1 for i in items if i.status == SKIPPED),
        errors=sum(1 for i in items if i.status == ERROR),
        cancelled=sum(1 for i in items if i.status == CANCELLED),
        within_range=sum(1 for i in items if i.status == FOUND and i.within_range),
        cache_hits=cache_hits,
        elapsed_s=round(elapsed_s, 3),
        items=items,
    )

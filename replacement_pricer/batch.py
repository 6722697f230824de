from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from .inventory import InventoryRow
from .pricer import ItemPricer
from .pricing import price_window
from .report import CANCELLED, ERROR, FOUND, NOT_FOUND, SKIPPED, ItemReport

logger = logging.getLogger("replacement_pricer.batch")

MAX_WORKERS = 4


def _report(row: InventoryRow, status: str, **kwargs) -> ItemReport:
    return ItemReport(
        item_number=row.item_number,
        query=row.query,
        target_price=row.target_price,
        status=status,
        raw=row.raw,
        **kwargs,
    )


def price_row(pricer: ItemPricer, row: InventoryRow, *, tolerance: float | None = None) -> ItemReport:
    if row.skip_reason is not None or not row.query:
        return _report(row, SKIPPED, message=row.skip_reason or "no search terms")

    tol = row.tolerance if row.tolerance is not None else tolerance
    if tol is None:
        tol = pricer.policy.default_tolerance

    try:
        result = pricer.find_best_price(row.query, row.target_price, tol)
    except Exception as e:
        logger.exception("row %s failed", row.item_number)
        return _report(row, ERROR, message=str(e))

    if result.error:
        return _report(row, ERROR, message=result.error)
    if not result.found:
        return _report(row, NOT_FOUND, message=result.message)

    within = row.target_price is not None and price_window(row.target_price, tol).contains(result.price)
    return _report(
        row,
        FOUND,
        price=result.price,
        source=result.source,
        url=result.url,
        category=result.category,
        subcategory=result.subcategory,
        description=result.description,
        within_range=within,
    )


def run_batch(
    pricer: ItemPricer,
    rows: Sequence[InventoryRow],
    *,
    tolerance: float | None = None,
    delay_s: float = 0.0,
    workers: int = 1,
    cancel: threading.Event | None = None,
    on_item: Callable[[int, ItemReport], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[ItemReport]:
    """Price every row, in input order.

    With workers == 1 rows run one after another with ``delay_s`` between
    priced rows. With more workers a small pool is used and spacing is left
    to the provider's shared throttle. Setting ``cancel`` stops new lookups;
    rows not yet started are reported as CANCELLED.
    """
    cancel = cancel or threading.Event()
    workers = max(1, min(workers, MAX_WORKERS))

    if workers == 1:
        reports: list[ItemReport] = []
        priced = 0
        for idx, row in enumerate(rows):
            if cancel.is_set():
                report = _report(row, CANCELLED, message="batch cancelled")
            else:
                if row.skip_reason is None and priced > 0 and delay_s > 0:
                    sleep(delay_s)
                report = price_row(pricer, row, tolerance=tolerance)
                if report.status != SKIPPED:
                    priced += 1
            reports.append(report)
            if on_item is not None:
                on_item(idx, report)
        return reports

    def task(row: InventoryRow) -> ItemReport:
        if cancel.is_set():
            return _report(row, CANCELLED, message="batch cancelled")
        return price_row(pricer, row, tolerance=tolerance)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(task, row) for row in rows]
        reports = []
        for idx, fut in enumerate(futures):
            report = fut.result()
            reports.append(report)
            if on_item is not None:
                on_item(idx, report)
    return reports

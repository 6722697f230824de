from __future__ import annotations

import argparse
import json
import logging
import signal
import threading
import time

from .batch import run_batch
from .browser import browserless_ws_endpoint, check_listing
from .config import OPTIONAL_KEYS, REQUIRED_KEYS, Config
from .models import ConfigError
from .inventory import read_inventory, write_inventory
from .pricer import PRESETS, ItemPricer
from .report import FOUND, build_report

__version__ = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="replacement-pricer")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Log search rounds and decisions")

    sub = p.add_subparsers(dest="cmd", required=False)

    def add_config_source(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--infisical", action="store_true", help="Read settings from Infisical instead of the environment")
        sp.add_argument("--env", default="dev", help="Infisical environment")

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)

    sub_config.add_parser("keys", help="List required and optional settings")

    p_check = sub_config.add_parser("check", help="Validate that required settings are filled")
    add_config_source(p_check)

    p_price = sub.add_parser("price", help="Find a replacement price for one item")
    p_price.add_argument("query", help="Item description (e.g. 'Honeywell tower fan')")
    p_price.add_argument("--target", type=float, default=None, help="Target replacement price")
    p_price.add_argument("--tolerance", type=float, default=None, help="Allowed deviation from target, in percent")
    p_price.add_argument("--preset", choices=sorted(PRESETS), default="standard")
    p_price.add_argument("--json", action="store_true", help="Print the raw result as JSON")
    add_config_source(p_price)

    p_batch = sub.add_parser("batch", help="Price every row of an inventory CSV")
    p_batch.add_argument("input", help="Inventory CSV path")
    p_batch.add_argument("--out", default="artifacts/priced_inventory.csv", help="Output CSV path")
    p_batch.add_argument("--report", default="artifacts/run_report.json", help="JSON run report path")
    p_batch.add_argument("--tolerance", type=float, default=None, help="Default tolerance in percent")
    p_batch.add_argument("--delay", type=float, default=0.5, help="Seconds between items when running sequentially")
    p_batch.add_argument("--workers", type=int, default=1, help="Concurrent lookups (max 4)")
    p_batch.add_argument("--limit", type=int, default=0, help="Max items (0=all)")
    p_batch.add_argument("--skip", type=int, default=0, help="Skip first N items (resume from where you left off)")
    p_batch.add_argument("--preset", choices=sorted(PRESETS), default="standard")
    add_config_source(p_batch)

    p_verify = sub.add_parser("verify", help="Open a listing through Browserless and read its price")
    p_verify.add_argument("url", help="Retailer product URL")
    p_verify.add_argument("--expect", type=float, default=None, help="Price the listing should show")
    p_verify.add_argument("--tolerance", type=float, default=10.0)
    add_config_source(p_verify)

    return p


def _load_config(args) -> Config:
    if getattr(args, "infisical", False):
        return Config.load_from_infisical(env=args.env)
    return Config.load_from_env()


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.cmd is None:
        p.print_help()
        return 0

    try:
        return _dispatch(args)
    except ConfigError as e:
        print(f"CONFIG ERROR: {e}")
        return 2


def _dispatch(args) -> int:
    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in REQUIRED_KEYS:
                print(k)
            for k in OPTIONAL_KEYS:
                print(f"{k} (optional)")
            return 0

        if args.config_cmd == "check":
            # Intentionally do not print secret values
            cfg = _load_config(args)
            source = f"Infisical env={args.env}" if args.infisical else "environment"
            print(f"OK: config present in {source} (browserless={'yes' if cfg.has_browserless else 'no'})")
            return 0

    if args.cmd == "price":
        cfg = _load_config(args)
        pricer = ItemPricer.from_config(cfg, policy=PRESETS[args.preset])
        result = pricer.find_best_price(args.query, args.target, args.tolerance)
        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
        elif result.found:
            print(f"${result.price:.2f}  {result.source}")
            print(f"   {result.description}")
            print(f"   Sub Cat: {result.subcategory}")
            print(f"   URL: {result.url}")
        else:
            print(f"Not found: {result.error or result.message}")
        return 0 if result.found else 1

    if args.cmd == "batch":
        return _run_batch(args)

    if args.cmd == "verify":
        cfg = _load_config(args)
        if not cfg.has_browserless:
            print("ERROR: BROWSERLESS_URL and BROWSERLESS_TOKEN are required for verify")
            return 2
        ws = browserless_ws_endpoint(base_ws_url=cfg.browserless_url, token=cfg.browserless_token)
        check = check_listing(args.url, ws_endpoint=ws, expected_price=args.expect, tolerance=args.tolerance)
        print(f"{check.domain}: {check.title or 'N/A'}")
        print(f"   Price: {f'${check.price:.2f}' if check.price is not None else 'N/A'}")
        if check.matches is not None:
            print(f"   Matches expected: {'yes' if check.matches else 'NO'}")
        return 0 if check.matches is not False else 1

    raise RuntimeError("unreachable")


def _run_batch(args) -> int:
    cfg = _load_config(args)
    pricer = ItemPricer.from_config(cfg, policy=PRESETS[args.preset])

    rows, headers = read_inventory(args.input)
    if args.skip > 0:
        rows = rows[args.skip:]
    if args.limit > 0:
        rows = rows[: args.limit]

    print(f"Read {len(rows)} items from {args.input}.")

    # First Ctrl-C finishes the lookup in flight, then stops.
    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())

    def progress(idx: int, report) -> None:
        tag = report.status
        detail = f"${report.price:.2f} {report.source}" if report.status == FOUND else (report.message or "")
        print(f"→ [{idx+1}/{len(rows)}] {report.item_number} {tag}  {detail}")

    started = time.monotonic()
    try:
        reports = run_batch(
            pricer,
            rows,
            tolerance=args.tolerance,
            delay_s=args.delay,
            workers=args.workers,
            cancel=cancel,
            on_item=progress,
        )
    finally:
        signal.signal(signal.SIGINT, previous)

    report = build_report(reports, cache_hits=pricer.cache.hits, elapsed_s=time.monotonic() - started)
    print("\n" + report.summary_text())
    out = write_inventory(args.out, headers, [r.output_row() for r in reports])
    path = report.write_json(args.report)
    print(f"\nPriced inventory written to {out}")
    print(f"Report written to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from playwright.sync_api import Page, sync_playwright

from .pricing import price_window

logger = logging.getLogger("replacement_pricer.browser")

_PRICE_RE = re.compile(r"\$\s*([\d,]+(?:\.\d+)?)")

# domain -> (price selectors, title selectors), tried in order.
_RETAILER_SELECTORS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "amazon.com": (
        ("#corePrice_feature_div .a-offscreen", "#priceblock_dealprice", "#priceblock_ourprice", ".a-price .a-offscreen"),
        ("#productTitle", "h1"),
    ),
    "target.com": (
        ('[data-test="product-price"]',),
        ('[data-test="product-title"]', "h1"),
    ),
    "walmart.com": (
        ('[itemprop="price"]', '[data-automation-id="product-price"]'),
        ('[data-automation-id="product-title"]', "h1"),
    ),
    "bestbuy.com": (
        ('[data-testid="customer-price"] span', ".priceView-customer-price span"),
        (".sku-title", "h1"),
    ),
}

_GENERIC_SELECTORS: tuple[tuple[str, ...], tuple[str, ...]] = (
    ('[itemprop="price"]', ".product-price", ".price", '[class*="price"]'),
    ("h1", ".product-title", '[class*="title"]'),
)


@dataclass(frozen=True)
class ListingCheck:
    url: str
    domain: str
    price: float | None
    title: str | None
    expected_price: float | None = None
    tolerance: float = 10.0

    @property
    def matches(self) -> bool | None:
        """None when there is nothing to compare against."""
        if self.expected_price is None or self.price is None:
            return None
        return price_window(self.expected_price, self.tolerance).contains(self.price)


def browserless_ws_endpoint(*, base_ws_url: str, token: str) -> str:
    """Compose a Browserless CDP websocket endpoint.

    Accepts ws://, wss://, http:// or https:// bases and appends the token
    unless the caller already supplied one.
    """
    base = base_ws_url.strip()
    if base.startswith("http://"):
        base = "ws://" + base.removeprefix("http://")
    if base.startswith("https://"):
        base = "wss://" + base.removeprefix("https://")

    if "token=" in base:
        return base
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}token={token}"


def normalize_domain(url: str) -> str:
    host = urlsplit(url).hostname or ""
    return host.lower().removeprefix("www.")


def selectors_for(domain: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    for known, selectors in _RETAILER_SELECTORS.items():
        if domain == known or domain.endswith("." + known):
            return selectors
    return _GENERIC_SELECTORS


def parse_price_text(text: str | None) -> float | None:
    if not text:
        return None
    m = _PRICE_RE.search(text)
    if not m:
        return None
    try:
        value = float(m.group(1).replace(",", ""))
    except ValueError:
        return None
    return value if value > 0 else None


def _first_text(page: Page, selectors: tuple[str, ...]) -> str | None:
    for sel in selectors:
        el = page.query_selector(sel)
        if el is None:
            continue
        text = (el.text_content() or "").strip()
        if text:
            return text
    return None


def _first_price(page: Page, selectors: tuple[str, ...]) -> float | None:
    for sel in selectors:
        el = page.query_selector(sel)
        if el is None:
            continue
        price = parse_price_text(el.text_content())
        if price is None:
            # itemprop="price" nodes often carry the bare number in @content.
            content = el.get_attribute("content")
            price = parse_price_text(f"${content}") if content else None
        if price is not None:
            return price
    return None


def check_listing(
    url: str,
    *,
    ws_endpoint: str,
    expected_price: float | None = None,
    tolerance: float = 10.0,
    timeout_ms: int = 30_000,
) -> ListingCheck:
    """Open a retailer listing through Browserless and read its price and title.

    This is a spot check for a resolved URL; it never feeds back into ranking.
    """
    domain = normalize_domain(url)
    price_selectors, title_selectors = selectors_for(domain)

    with sync_playwright() as p:
        browser = p.chromium.connect_over_cdp(ws_endpoint)
        try:
            context = browser.new_context(ignore_https_errors=True)
            page = context.new_page()
            page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            page.wait_for_timeout(1500)
            price = _first_price(page, price_selectors)
            title = _first_text(page, title_selectors)
        finally:
            browser.close()

    logger.info("listing %s: price=%s title=%.50r", domain, price, title)
    return ListingCheck(
        url=url,
        domain=domain,
        price=price,
        title=title,
        expected_price=expected_price,
        tolerance=tolerance,
    )

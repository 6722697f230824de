from __future__ import annotations

# Retailer display strings as they appear in shopping results -> canonical domain.
_KNOWN_SOURCES: dict[str, str] = {
    "Amazon": "amazon.com",
    "amazon.com": "amazon.com",
    "Amazon.com": "amazon.com",
    "Amazon.com - Seller": "amazon.com",
    "Walmart": "walmart.com",
    "walmart.com": "walmart.com",
    "Walmart - Seller": "walmart.com",
    "Walmart - RRX": "walmart.com",
    "Target": "target.com",
    "target.com": "target.com",
    "Home Depot": "homedepot.com",
    "The Home Depot": "homedepot.com",
    "homedepot.com": "homedepot.com",
    "Lowe's": "lowes.com",
    "Lowes": "lowes.com",
    "lowes.com": "lowes.com",
    "Best Buy": "bestbuy.com",
    "BestBuy": "bestbuy.com",
    "bestbuy.com": "bestbuy.com",
    "Wayfair": "wayfair.com",
    "wayfair.com": "wayfair.com",
    "Costco": "costco.com",
    "costco.com": "costco.com",
    "Overstock": "overstock.com",
    "Overstock.com": "overstock.com",
    "overstock.com": "overstock.com",
}

# Checked in order; first fragment contained in the lowercased source wins.
_FRAGMENTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("amazon",), "amazon.com"),
    (("walmart",), "walmart.com"),
    (("target",), "target.com"),
    (("home depot", "homedepot"), "homedepot.com"),
    (("lowe",), "lowes.com"),
    (("best buy", "bestbuy"), "bestbuy.com"),
    (("wayfair",), "wayfair.com"),
    (("costco",), "costco.com"),
    (("overstock",), "overstock.com"),
)

TRUSTED_DOMAINS: tuple[str, ...] = tuple(domain for _, domain in _FRAGMENTS)


def resolve_source(source: str | None) -> str | None:
    """Map a retailer display string to its trusted domain.

    Returns None for anything outside the allow-list; callers drop such hits.
    """
    if not source or not isinstance(source, str):
        return None

    direct = _KNOWN_SOURCES.get(source)
    if direct:
        return direct

    lowered = source.lower()
    for fragments, domain in _FRAGMENTS:
        if any(f in lowered for f in fragments):
            return domain
    return None

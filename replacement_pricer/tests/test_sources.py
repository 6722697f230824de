from replacement_pricer.sources import TRUSTED_DOMAINS, resolve_source


def test_exact_display_strings():
    assert resolve_source("Walmart - RRX") == "walmart.com"
    assert resolve_source("The Home Depot") == "homedepot.com"
    assert resolve_source("Amazon.com - Seller") == "amazon.com"
    assert resolve_source("Lowe's") == "lowes.com"


def test_fragment_fallback_is_case_insensitive():
    assert resolve_source("AMAZON MARKETPLACE") == "amazon.com"
    assert resolve_source("homedepot.com - Pro") == "homedepot.com"
    assert resolve_source("Lowe's Home Improvement") == "lowes.com"
    assert resolve_source("Best Buy Outlet") == "bestbuy.com"
    assert resolve_source("Costco Wholesale") == "costco.com"


def test_fragment_order_decides_collisions():
    assert resolve_source("Walmart Target Bundle") == "walmart.com"


def test_unknown_sources_resolve_to_none():
    assert resolve_source("RandomStore Inc.") is None
    assert resolve_source("unknown.com") is None
    assert resolve_source("eBay - seller123") is None
    assert resolve_source("") is None
    assert resolve_source(None) is None


def test_allow_list_domains():
    assert "amazon.com" in TRUSTED_DOMAINS
    assert len(set(TRUSTED_DOMAINS)) == len(TRUSTED_DOMAINS)


def test_non_string_sources_resolve_to_none():
    for bad in ({"name": "Amazon"}, ["Walmart"], 42):
        assert resolve_source(bad) is None

from replacement_pricer.browser import (
    ListingCheck,
    browserless_ws_endpoint,
    normalize_domain,
    parse_price_text,
    selectors_for,
)


def test_ws_endpoint_from_http_bases():
    assert browserless_ws_endpoint(base_ws_url="https://chrome.example.com", token="t") == "wss://chrome.example.com?token=t"
    assert browserless_ws_endpoint(base_ws_url="http://localhost:3000", token="t") == "ws://localhost:3000?token=t"


def test_ws_endpoint_keeps_existing_query():
    assert browserless_ws_endpoint(base_ws_url="wss://h/chromium?stealth=true", token="t") == "wss://h/chromium?stealth=true&token=t"
    assert browserless_ws_endpoint(base_ws_url="wss://h?token=abc", token="t") == "wss://h?token=abc"


def test_normalize_domain():
    assert normalize_domain("https://www.Amazon.com/dp/B01") == "amazon.com"
    assert normalize_domain("not a url") == ""


def test_selectors_for_known_and_generic():
    amazon_price, _ = selectors_for("amazon.com")
    assert "#productTitle" in selectors_for("smile.amazon.com")[1]
    assert amazon_price[0].startswith("#corePrice")
    assert selectors_for("example.com") == selectors_for("unknown.shop")


def test_parse_price_text():
    assert parse_price_text("Now $1,299.99 was $1,499") == 1299.99
    assert parse_price_text("$ 59") == 59.0
    assert parse_price_text("Free") is None
    assert parse_price_text("$0.00") is None
    assert parse_price_text(None) is None


def test_listing_check_matches():
    check = ListingCheck(url="u", domain="walmart.com", price=104.0, title="Fan", expected_price=100.0)
    assert check.matches is True
    assert ListingCheck(url="u", domain="d", price=120.0, title=None, expected_price=100.0).matches is False
    assert ListingCheck(url="u", domain="d", price=None, title=None, expected_price=100.0).matches is None
    assert ListingCheck(url="u", domain="d", price=10.0, title=None).matches is None

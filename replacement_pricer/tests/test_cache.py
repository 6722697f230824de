import pytest

from replacement_pricer.cache import QueryCache, cache_key
from replacement_pricer.models import ResolutionResult


def _result(price):
    return ResolutionResult(found=True, price=price, source="amazon.com")


def test_cache_key_normalizes_query():
    assert cache_key("  Tower FAN ", 50, 10) == ("tower fan", 50, 10.0)
    assert cache_key("x" * 80, None, 10)[0] == "x" * 50
    assert cache_key("x" * 80, None, 10, prefix=10)[0] == "x" * 10


def test_get_and_put():
    cache = QueryCache(capacity=3)
    key = cache_key("fan", None, 10)
    assert cache.get(key) is None
    cache.put(key, _result(10.0))
    assert cache.get(key) == _result(10.0)
    assert (cache.hits, cache.misses) == (1, 1)
    assert key in cache


def test_evicts_oldest_insert_not_least_recent_use():
    cache = QueryCache(capacity=2)
    a, b, c = (cache_key(q, None, 10) for q in "abc")
    cache.put(a, _result(1.0))
    cache.put(b, _result(2.0))
    cache.get(a)
    cache.put(c, _result(3.0))
    assert a not in cache
    assert b in cache and c in cache
    assert len(cache) == 2


def test_overwrite_does_not_evict():
    cache = QueryCache(capacity=2)
    a, b = cache_key("a", None, 10), cache_key("b", None, 10)
    cache.put(a, _result(1.0))
    cache.put(b, _result(2.0))
    cache.put(a, _result(5.0))
    assert len(cache) == 2
    assert cache.get(a).price == 5.0


def test_clear():
    cache = QueryCache()
    cache.put(cache_key("a", None, 10), _result(1.0))
    cache.clear()
    assert len(cache) == 0
    assert cache.hits == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        QueryCache(capacity=0)


def test_cache_key_collapses_inner_whitespace():
    assert cache_key("Tower  Fan", 50, 10) == cache_key("tower fan", 50, 10)

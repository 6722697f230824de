from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from .http import HttpClient
from .models import ConfigError, ProviderError, RawSearchHit
from .throttle import Throttle

logger = logging.getLogger("replacement_pricer.serpapi")

SERPAPI_URL = "https://serpapi.com"
ENGINE = "google_shopping"


class SearchProvider(Protocol):
    """Anything that turns a query into shopping hits.

    Implementations raise ProviderError for timeouts, transport failures and
    malformed responses; the pricer treats those as an empty round.
    """

    def search(self, query: str, *, num: int = 25) -> list[RawSearchHit]:
        ...


class SerpApiProvider:
    name = "serpapi"

    def __init__(
        self,
        *,
        api_key: str,
        timeout_s: float = 8.0,
        throttle: Throttle | None = None,
        base_url: str = SERPAPI_URL,
        gl: str = "us",
        hl: str = "en",
    ):
        if not api_key or not api_key.strip():
            raise ConfigError("SERPAPI_KEY is required to price items")
        self._api_key = api_key
        self.http = HttpClient(base_url=base_url, timeout_s=timeout_s)
        self.throttle = throttle
        self.gl = gl
        self.hl = hl

    def search(self, query: str, *, num: int = 25) -> list[RawSearchHit]:
        if self.throttle is not None:
            self.throttle.wait()

        params = {
            "engine": ENGINE,
            "q": query,
            "api_key": self._api_key,
            "num": num,
            "gl": self.gl,
            "hl": self.hl,
        }
        try:
            resp = self.http.get("/search.json", params=params)
        except requests.Timeout as e:
            raise ProviderError(self.name, f"timed out after {self.http.timeout_s:g}s") from e
        except requests.RequestException as e:
            raise ProviderError(self.name, f"request failed: {e}") from e

        if resp.status_code >= 400:
            raise ProviderError(self.name, f"HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON: {e}") from e

        return parse_shopping_results(data, limit=num)


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def parse_shopping_results(data: Any, *, limit: int = 25) -> list[RawSearchHit]:
    if not isinstance(data, dict):
        raise ProviderError(SerpApiProvider.name, "unexpected response envelope")
    if data.get("error"):
        # SerpAPI reports "no results" as an error string too.
        if "hasn't returned any results" in str(data["error"]):
            return []
        raise ProviderError(SerpApiProvider.name, str(data["error"]))

    rows = data.get("shopping_results") or []
    if not isinstance(rows, list):
        raise ProviderError(SerpApiProvider.name, "shopping_results is not a list")

    hits: list[RawSearchHit] = []
    for row in rows[:limit]:
        if not isinstance(row, dict):
            continue
        hits.append(
            RawSearchHit(
                title=str(row.get("title") or ""),
                price=row.get("extracted_price"),
                source=_str_or_none(row.get("source")),
                link=_str_or_none(row.get("link")),
                product_link=_str_or_none(row.get("product_link")),
            )
        )
    logger.debug("parsed %d shopping results", len(hits))
    return hits

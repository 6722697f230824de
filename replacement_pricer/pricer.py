"""Resolve an item description to one replacement price.

A lookup runs the sanitized query first and stops as soon as a round yields
an acceptable winner. Otherwise it tries relaxed fallback queries, then
ranks everything seen across rounds once more before giving up.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from . import match
from .cache import QueryCache, cache_key
from .classify import subcategory
from .config import Config
from .extract import extract_candidates
from .models import CATEGORY, Candidate, ProviderError, ResolutionResult
from .normalize import DEFAULT_FILLER_TERMS, fallback_queries, sanitize_query
from .pricing import PriceWindow, normalize_target, price_window
from .serpapi import SearchProvider, SerpApiProvider
from .throttle import Throttle

logger = logging.getLogger("replacement_pricer.pricer")


@dataclass(frozen=True)
class PricerPolicy:
    timeout_s: float = 8.0
    result_count: int = 25
    max_candidates: int = 25
    close_match_percent: float = 20.0
    filler_terms: tuple[str, ...] = field(default=DEFAULT_FILLER_TERMS)
    fallback_max_words: int = 6
    min_fallback_length: int = 5
    max_fallback_rounds: int = 2
    round_delay_s: float = 0.5
    min_call_interval_s: float = 1.0
    cache_size: int = 100
    cache_key_length: int = 50
    amazon_tie_threshold: float = 1.0
    default_tolerance: float = 10.0


PRESETS: dict[str, PricerPolicy] = {
    "standard": PricerPolicy(),
    # Single round, short timeout, fewer candidates: trades hit rate for speed.
    "fast": PricerPolicy(timeout_s=5.0, max_candidates=15, max_fallback_rounds=0),
}


class ItemPricer:
    def __init__(
        self,
        provider: SearchProvider,
        *,
        policy: PricerPolicy | None = None,
        cache: QueryCache | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider
        self.policy = policy or PricerPolicy()
        self.cache = cache if cache is not None else QueryCache(self.policy.cache_size)
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        policy: PricerPolicy | None = None,
        throttle: Throttle | None = None,
    ) -> "ItemPricer":
        policy = policy or PricerPolicy()
        provider = SerpApiProvider(
            api_key=config.serpapi_key,
            timeout_s=policy.timeout_s,
            throttle=throttle or Throttle(policy.min_call_interval_s),
        )
        return cls(provider, policy=policy)

    def find_best_price(
        self,
        query: str,
        target_price: float | None = None,
        tolerance: float | None = None,
    ) -> ResolutionResult:
        """Never raises; unexpected faults come back as a failure result."""
        try:
            return self._resolve(query, target_price, tolerance)
        except Exception as e:
            logger.exception("pricing failed for %.60r", query)
            return ResolutionResult.failure(f"{type(e).__name__}: {e}")

    def _resolve(self, query: str, target_price: float | None, tolerance: float | None) -> ResolutionResult:
        if tolerance is None:
            tolerance = self.policy.default_tolerance
        target = normalize_target(target_price)
        key = cache_key(sanitize_query(query), target, tolerance, prefix=self.policy.cache_key_length)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("cache hit for %.40r", query)
            return cached

        result = self._search(query, target, tolerance)
        self.cache.put(key, result)
        return result

    def _search(self, query: str, target: float | None, tolerance: float) -> ResolutionResult:
        sanitized = sanitize_query(query)
        if not sanitized:
            return ResolutionResult.not_found("No search terms")
        if tolerance < 0:
            return ResolutionResult.not_found(f"Invalid tolerance {tolerance:g}%: must be non-negative")

        window = price_window(target, tolerance)
        logger.info("pricing %.60r, %s", sanitized, window.describe())

        p = self.policy
        rounds = [sanitized] + fallback_queries(
            sanitized,
            filler_terms=p.filler_terms,
            max_words=p.fallback_max_words,
            min_length=p.min_fallback_length,
            limit=p.max_fallback_rounds,
        )

        pool: list[Candidate] = []
        for i, q in enumerate(rounds):
            if i > 0 and p.round_delay_s > 0:
                self._sleep(p.round_delay_s)

            candidates = self._run_round(q)
            pool.extend(candidates)

            selection = self._select(candidates, window)
            if self._accepts(selection, window):
                logger.info("round %d matched $%.2f from %s", i + 1, selection.candidate.price, selection.candidate.domain)
                return self._package(selection)
            logger.info("round %d (%.40r): %d candidates, no acceptable match", i + 1, q, len(candidates))

        selection = self._select(pool, window)
        if selection is not None:
            logger.info("pooled %d candidates, matched $%.2f (%s)", len(pool), selection.candidate.price, selection.tier)
            return self._package(selection)

        if window.has_target:
            return ResolutionResult.not_found(f"No suitable matches found {window.describe()}")
        return ResolutionResult.not_found("No suitable matches found")

    def _run_round(self, query: str) -> list[Candidate]:
        try:
            hits = self.provider.search(query, num=self.policy.result_count)
        except ProviderError as e:
            logger.warning("search failed for %.40r: %s", query, e.message)
            return []
        return extract_candidates(hits, limit=self.policy.max_candidates)

    def _select(self, candidates: list[Candidate], window: PriceWindow) -> match.Selection | None:
        return match.select(
            candidates,
            window,
            close_match_percent=self.policy.close_match_percent,
            amazon_tie_threshold=self.policy.amazon_tie_threshold,
        )

    @staticmethod
    def _accepts(selection: match.Selection | None, window: PriceWindow) -> bool:
        if selection is None:
            return False
        if window.has_target:
            # Widened matches wait for the pooled pass; a later round may land in the window.
            return selection.tier == match.TIER_IN_WINDOW
        c = selection.candidate
        return c.in_range or c.is_amazon

    @staticmethod
    def _package(selection: match.Selection) -> ResolutionResult:
        c = selection.candidate
        return ResolutionResult(
            found=True,
            price=c.price,
            source=c.domain,
            url=c.url,
            category=CATEGORY,
            subcategory=subcategory(c.description),
            description=c.description,
            tier=selection.tier,
        )

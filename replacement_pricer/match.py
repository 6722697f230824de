from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .models import Candidate
from .pricing import PriceWindow, evaluate_all, price_window

logger = logging.getLogger("replacement_pricer.match")

DEFAULT_CLOSE_MATCH_PERCENT = 20.0
DEFAULT_AMAZON_TIE_THRESHOLD = 1.0

# Tier labels, most to least preferred.
TIER_IN_WINDOW = "in_window"
TIER_CLOSE_MATCH = "close_match"
TIER_AMAZON_IN_RANGE = "amazon_in_range"
TIER_IN_RANGE = "in_range"
TIER_AMAZON = "amazon"
TIER_ANY_TRUSTED = "any_trusted"


@dataclass(frozen=True)
class Selection:
    candidate: Candidate
    tier: str

    @property
    def in_window(self) -> bool:
        # A close_match winner lies outside the caller's window by construction.
        return self.tier != TIER_CLOSE_MATCH


def dedupe(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Drop repeats of the same (price, domain) listing; first one seen is kept."""
    seen: set[tuple[float, str]] = set()
    out: list[Candidate] = []
    for c in candidates:
        key = (c.price, c.domain)
        if key in seen:
            continue
        seen.add(key)
        out.append(c)
    return out


def _sort_key(c: Candidate) -> tuple:
    return (c.price, not c.is_amazon, c.score, c.domain, c.url, c.description)


def cheapest(candidates: list[Candidate], *, amazon_tie_threshold: float = DEFAULT_AMAZON_TIE_THRESHOLD) -> Candidate:
    """Lowest price wins; an Amazon listing within the tie threshold of it wins instead."""
    ordered = sorted(candidates, key=_sort_key)
    best = ordered[0]
    if best.is_amazon:
        return best
    for c in ordered[1:]:
        if c.price - best.price >= amazon_tie_threshold:
            break
        if c.is_amazon:
            return c
    return best


def select(
    candidates: Iterable[Candidate],
    window: PriceWindow,
    *,
    close_match_percent: float = DEFAULT_CLOSE_MATCH_PERCENT,
    amazon_tie_threshold: float = DEFAULT_AMAZON_TIE_THRESHOLD,
) -> Selection | None:
    # Canonical order first; the surviving duplicate is then independent of arrival order.
    unique = evaluate_all(dedupe(sorted(candidates, key=_sort_key)), window)
    if not unique:
        return None

    if window.has_target:
        in_window = [c for c in unique if c.in_range]
        if in_window:
            logger.debug("%d of %d candidates in window", len(in_window), len(unique))
            return Selection(cheapest(in_window, amazon_tie_threshold=amazon_tie_threshold), TIER_IN_WINDOW)

        close = price_window(window.target, close_match_percent)
        near = [c for c in unique if close.contains(c.price)]
        if near:
            logger.debug("no candidate in window, %d within ±%g%%", len(near), close_match_percent)
            return Selection(cheapest(near, amazon_tie_threshold=amazon_tie_threshold), TIER_CLOSE_MATCH)

        logger.debug("no candidate within %s", window.describe())
        return None

    tiers = (
        (TIER_AMAZON_IN_RANGE, [c for c in unique if c.in_range and c.is_amazon]),
        (TIER_IN_RANGE, [c for c in unique if c.in_range]),
        (TIER_AMAZON, [c for c in unique if c.is_amazon]),
        (TIER_ANY_TRUSTED, unique),
    )
    for name, tier in tiers:
        if tier:
            logger.debug("selecting from tier %s (%d candidates)", name, len(tier))
            return Selection(cheapest(tier, amazon_tie_threshold=amazon_tie_threshold), name)
    return None

from __future__ import annotations

import re
from typing import Iterable


DEFAULT_FILLER_TERMS: tuple[str, ...] = (
    "new",
    "heavy duty",
    "security",
    "mail box",
    "postal box",
)

_WS_RE = re.compile(r"\s+")
_QUOTES_RE = re.compile(r"[\"']")


def sanitize_query(raw: str | None) -> str:
    """Normalize free text into a provider-safe query.

    Only whitespace and quote characters are touched; other punctuation is
    left as written. An empty return means there is nothing to search for.
    """
    if not raw:
        return ""
    q = _WS_RE.sub(" ", raw)
    q = _QUOTES_RE.sub("", q)
    return q.strip()


def _filler_pattern(terms: Iterable[str]) -> re.Pattern[str] | None:
    # Longest first so "mail box" is removed as a unit before any single word.
    parts = sorted({t.strip().lower() for t in terms if t.strip()}, key=len, reverse=True)
    if not parts:
        return None
    alternation = "|".join(r"\s+".join(re.escape(w) for w in p.split()) for p in parts)
    return re.compile(r"\b(?:" + alternation + r")\b", re.IGNORECASE)


def strip_filler(query: str, terms: Iterable[str] = DEFAULT_FILLER_TERMS) -> str:
    pattern = _filler_pattern(terms)
    if pattern is None:
        return query
    return _WS_RE.sub(" ", pattern.sub(" ", query)).strip()


def truncate_words(query: str, max_words: int) -> str:
    words = query.split()
    return " ".join(words[:max_words])


def fallback_queries(
    query: str,
    *,
    filler_terms: Iterable[str] = DEFAULT_FILLER_TERMS,
    max_words: int = 6,
    min_length: int = 5,
    limit: int = 2,
) -> list[str]:
    """Relaxed variants of an already-sanitized query, in the order to try them.

    Variants that are too short, or that repeat the original or an earlier
    variant, are dropped.
    """
    if limit <= 0:
        return []

    variants = [strip_filler(query, filler_terms)]
    if max_words > 0:
        variants.append(truncate_words(query, max_words))

    seen = {query.lower()}
    out: list[str] = []
    for v in variants:
        if len(v) < min_length or v.lower() in seen:
            continue
        seen.add(v.lower())
        out.append(v)
        if len(out) >= limit:
            break
    return out

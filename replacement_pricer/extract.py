from __future__ import annotations

import logging
import math
import re
from typing import Iterable
from urllib.parse import parse_qs, unquote, urlsplit

from .models import MANUAL_VALIDATION, Candidate, RawSearchHit
from .sources import resolve_source

logger = logging.getLogger("replacement_pricer.extract")

_PRICE_NOISE_RE = re.compile(r"[$,\s]")


def parse_price(value: object) -> float | None:
    """Return a positive price, or None for missing / non-numeric / non-positive values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        price = float(value)
    else:
        text = _PRICE_NOISE_RE.sub("", str(value))
        if not text:
            return None
        try:
            price = float(text)
        except ValueError:
            return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def _ad_redirect_target(link: str) -> str | None:
    # Google Shopping ad clicks look like https://www.google.com/aclk?...&adurl=<encoded>
    if "google.com/aclk" not in link:
        return None
    try:
        params = parse_qs(urlsplit(link).query)
    except ValueError:
        return None
    values = params.get("adurl")
    if not values or not values[0]:
        return None
    return unquote(values[0])


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def direct_url(hit: RawSearchHit) -> str:
    link = _text(hit.link)

    if "amazon.com/" in link and "/dp/" in link:
        return link

    if link:
        target = _ad_redirect_target(link)
        if target:
            return target

    return _text(hit.product_link) or link or MANUAL_VALIDATION


def extract_candidate(hit: RawSearchHit) -> Candidate | None:
    price = parse_price(hit.price)
    if price is None:
        return None

    domain = resolve_source(hit.source)
    if domain is None:
        return None

    return Candidate(
        price=price,
        domain=domain,
        url=direct_url(hit),
        description=_text(hit.title),
    )


def extract_candidates(hits: Iterable[RawSearchHit], *, limit: int | None = None) -> list[Candidate]:
    out: list[Candidate] = []
    for hit in hits:
        if limit is not None and len(out) >= limit:
            break
        c = extract_candidate(hit)
        if c is None:
            logger.debug("dropped hit source=%r price=%r", hit.source, hit.price)
            continue
        logger.debug("candidate %s $%.2f %.50r", c.domain, c.price, c.description)
        out.append(c)
    return out

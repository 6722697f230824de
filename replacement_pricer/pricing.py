"""Acceptance window and closeness score for a target replacement price.

Scoring (smaller is better):

- target set, price inside the window: ``abs(price - target)``
- target set, price outside the window: ``OUT_OF_RANGE_SCORE``
- no target: the price itself

The score never outranks price in selection (see match.py); it is kept on
each candidate so ties and reports are reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .models import Candidate

NO_TARGET_CEILING = 99999.0
OUT_OF_RANGE_SCORE = 999999.0


@dataclass(frozen=True)
class PriceWindow:
    min: float
    max: float
    target: float | None = None
    tolerance: float = 0.0

    @property
    def has_target(self) -> bool:
        return self.target is not None

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.max

    def describe(self) -> str:
        if self.target is None:
            return "any price"
        return (
            f"within ±{self.tolerance:g}% of ${self.target:.2f} "
            f"(${self.min:.2f} - ${self.max:.2f})"
        )


def normalize_target(target: float | None) -> float | None:
    if target is None or isinstance(target, bool):
        return None
    try:
        value = float(target)
    except (TypeError, ValueError):
        return None
    # NaN fails the comparison.
    if not value > 0:
        return None
    return value


def price_window(target: float | None, tolerance: float = 10.0) -> PriceWindow:
    if tolerance < 0:
        raise ValueError(f"tolerance must be non-negative, got {tolerance}")

    target = normalize_target(target)
    if target is None:
        return PriceWindow(min=0.0, max=NO_TARGET_CEILING, tolerance=tolerance)

    t = tolerance / 100
    return PriceWindow(
        min=max(0.0, target * (1 - t)),
        max=target * (1 + t),
        target=target,
        tolerance=tolerance,
    )


def in_range(price: float, window: PriceWindow) -> bool:
    return window.contains(price)


def score(price: float, window: PriceWindow) -> float:
    if window.target is None:
        return price
    if not window.contains(price):
        return OUT_OF_RANGE_SCORE
    return abs(price - window.target)


def evaluate(candidate: Candidate, window: PriceWindow) -> Candidate:
    """Return the candidate with in_range/score derived for this window."""
    return replace(
        candidate,
        in_range=in_range(candidate.price, window),
        score=score(candidate.price, window),
    )


def evaluate_all(candidates: list[Candidate], window: PriceWindow) -> list[Candidate]:
    return [evaluate(c, window) for c in candidates]

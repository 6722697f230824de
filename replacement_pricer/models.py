from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any


MANUAL_VALIDATION = "Manual Validation Required"
CATEGORY = "HSW"


class ConfigError(RuntimeError):
    """Raised when the engine is missing a credential it cannot work without."""


class ProviderError(RuntimeError):
    """Raised by a search provider when a call cannot produce hits."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.message = message


@dataclass(frozen=True)
class RawSearchHit:
    """A single shopping result as returned by the search provider."""

    title: str = ""
    price: Any = None               # number or string, e.g. 12.99 / "12.99"
    source: str | None = None       # retailer display string, e.g. "Walmart - RRX"
    link: str | None = None
    product_link: str | None = None


@dataclass(frozen=True)
class Candidate:
    price: float
    domain: str
    url: str
    description: str

    # Derived by the price evaluator for one window; see pricing.evaluate().
    in_range: bool = True
    score: float = 0.0

    @property
    def is_amazon(self) -> bool:
        return self.domain == "amazon.com"


@dataclass(frozen=True)
class ResolutionResult:
    found: bool
    price: float | None = None
    source: str | None = None
    url: str | None = None
    category: str | None = None
    subcategory: str | None = None
    description: str | None = None
    tier: str | None = None         # selector tier that produced the match

    # Set when found is False.
    message: str | None = None
    error: str | None = None

    @classmethod
    def not_found(cls, message: str) -> "ResolutionResult":
        return cls(found=False, message=message)

    @classmethod
    def failure(cls, error: str) -> "ResolutionResult":
        return cls(found=False, message="Pricing failed", error=error)

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

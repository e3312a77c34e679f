# noonsync/scrapers/base_strategy.py

"""Shared types for extraction strategies and their precedence chain."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from bs4 import BeautifulSoup

from noonsync.config.settings import Settings
from noonsync.models.product import Product

logger = logging.getLogger("noonsync.strategies")

# Cloudflare challenge page markers (checked before keyword scan)
_CF_CHALLENGE_MARKERS: list[str] = [
    "challenges.cloudflare.com",
    "cdn-cgi/challenge-platform",
    "just a moment",
    "cf-turnstile",
    "cf_chl_opt",
]


class MissReason(str, Enum):
    """Why a strategy produced no products."""

    NO_PAYLOAD = "no_payload"
    UNPARSABLE = "unparsable"
    EMPTY = "empty"
    NO_MATCHES = "no_matches"


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one strategy: a hit with products, or a typed miss."""

    strategy: str
    products: tuple[Product, ...] = field(default_factory=tuple)
    reason: MissReason | None = None
    message: str = ""

    @property
    def found(self) -> bool:
        return bool(self.products)

    @classmethod
    def hit(
        cls, strategy: str, products: Sequence[Product],
    ) -> "ExtractionResult":
        return cls(strategy=strategy, products=tuple(products))

    @classmethod
    def miss(
        cls, strategy: str, reason: MissReason, message: str,
    ) -> "ExtractionResult":
        return cls(strategy=strategy, reason=reason, message=message)


class ExtractionStrategy(Protocol):
    """A self-contained extraction algorithm over a parsed document."""

    name: str

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        ...


def parse_document(html: str) -> BeautifulSoup:
    """Parse raw HTML with the lxml backend."""
    return BeautifulSoup(html, "lxml")


def run_strategies(
    strategies: Sequence[ExtractionStrategy],
    soup: BeautifulSoup,
) -> ExtractionResult:
    """Evaluate strategies in order and return the first hit.

    When every strategy misses, the last miss is returned so the
    caller can report the most specific empty state.
    """
    result = ExtractionResult.miss(
        "none", MissReason.NO_MATCHES, "No extraction strategy configured."
    )
    for strategy in strategies:
        result = strategy.extract(soup)
        if result.found:
            logger.info(
                "Strategy '%s' produced %d products",
                strategy.name,
                len(result.products),
            )
            return result
        logger.info(
            "Strategy '%s' missed (%s): %s",
            strategy.name,
            result.reason.value if result.reason else "?",
            result.message,
        )
    return result


def detect_challenge(text: str) -> str | None:
    """Return the marker of an anti-bot page, or None for real content."""
    if text.lstrip().startswith(("{", "[")):
        return None
    lower = text.lower()
    for marker in _CF_CHALLENGE_MARKERS:
        if marker in lower:
            return marker

    # Skip the keyword scan on pages with real content to avoid
    # false positives from product copy.
    has_body_content = "<body" in lower and len(text) > 5000
    if not has_body_content:
        for keyword in Settings.CAPTCHA_KEYWORDS:
            if keyword in lower:
                return keyword
    return None


def first_present(item: dict[str, Any], keys: Sequence[str]) -> Any:
    """Value of the first key holding something other than None/""."""
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None

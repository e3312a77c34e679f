# noonsync/scrapers/dom_extractor.py

"""Heuristic product extraction from a rendered storefront DOM.

Used only where a live page is available (the capture path): the
server-side handler never sees rendered markup.
"""

import logging
import re
from typing import Any
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from noonsync.config.settings import Settings
from noonsync.models.normalizer import normalize_batch
from noonsync.models.product import Product, SourceKind
from noonsync.scrapers.base_strategy import (
    ExtractionResult,
    MissReason,
    parse_document,
)

logger = logging.getLogger("noonsync.dom")

PRODUCT_LINK_SELECTOR = 'a[href*="/p/"]'
PLACEHOLDER_ALTS: frozenset[str] = frozenset({"product", "image"})
NO_PRODUCTS_MESSAGE = (
    "No products found. Please ensure you are on a page "
    "showing products grid."
)

_NUMBER = r"\d[\d,]*(?:\.\d{1,2})?"
_SKU_RE = re.compile(r"^(?=.*\d)[A-Z0-9]{6,}$")


def _price_pattern(currency: str) -> re.Pattern[str]:
    code = re.escape(currency)
    return re.compile(
        rf"({_NUMBER})\s*{code}|{code}\s*({_NUMBER})", re.IGNORECASE
    )


def extract_price(text: str, currency: str) -> float:
    """Return the first number adjacent to the currency code in *text*."""
    match = _price_pattern(currency).search(text)
    if not match:
        return 0.0
    number = match.group(1) or match.group(2)
    return float(number.replace(",", ""))


def slug_and_sku(url: str) -> tuple[str, str]:
    """Split a ``/{slug}/{SKU}/p/`` product URL into slug and SKU.

    Either part is ``""`` when the URL does not carry it.
    """
    segments = [s for s in urlparse(url).path.split("/") if s]
    if "p" not in segments:
        return "", ""
    marker = len(segments) - 1 - segments[::-1].index("p")
    before = segments[:marker]
    if len(before) >= 2 and _SKU_RE.match(before[-1]):
        return before[-2], before[-1]
    return (before[-1] if before else ""), ""


def _display_name(img: Tag, slug: str) -> str:
    alt = str(img.get("alt") or "").strip()
    if alt and alt.lower() not in PLACEHOLDER_ALTS:
        return alt
    return slug.replace("-", " ").strip()


class HeuristicDomExtractor:
    """Strategy scanning product-link anchors of a rendered page."""

    name = "heuristic_dom"

    def __init__(
        self,
        page_url: str = "",
        currency: str | None = None,
    ) -> None:
        self.page_url = page_url or Settings.STORE_URL
        self.currency = currency or Settings.STORE_CURRENCY

    def _card_fields(self, link: Tag, img: Tag, url: str) -> dict[str, Any]:
        slug, sku = slug_and_sku(url)
        image_src = img.get("src") or img.get("data-src") or ""
        return {
            "id": sku or None,
            "sku": sku or None,
            "name": _display_name(img, slug),
            "description": "Imported via Visual Scraper",
            "price": extract_price(
                link.get_text(" ", strip=True), self.currency
            ),
            "stock": Settings.SCRAPED_STOCK_PLACEHOLDER,
            "category": "Imported",
            "tags": ["Scraped"],
            "imageUrl": (
                urljoin(self.page_url, str(image_src)) if image_src else None
            ),
            "sourceUrl": url,
        }

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        cards: dict[str, dict[str, Any]] = {}
        links = soup.select(PRODUCT_LINK_SELECTOR)
        for link in links:
            img = link.find("img")
            if not isinstance(img, Tag):
                continue
            url = urljoin(self.page_url, str(link.get("href", "")))
            # Same product appears in grid and rails with one URL
            if url in cards:
                continue
            cards[url] = self._card_fields(link, img, url)

        logger.debug(
            "%d product links, %d unique cards", len(links), len(cards)
        )
        if not cards:
            return ExtractionResult.miss(
                self.name, MissReason.NO_MATCHES, NO_PRODUCTS_MESSAGE
            )

        products: list[Product] = normalize_batch(
            list(cards.values()), SourceKind.DOM, currency=self.currency
        )
        return ExtractionResult.hit(self.name, products)

    def extract_html(self, html: str) -> ExtractionResult:
        """Convenience wrapper parsing raw HTML first."""
        return self.extract(parse_document(html))

# noonsync/scrapers/structured_extractor.py

"""Extract products from the storefront's embedded Next.js hydration JSON.

Noon is a Next.js SPA: the server-rendered page carries its catalog in a
``<script id="__NEXT_DATA__">`` block. The location of the hit list has
moved between storefront versions, so several known paths are probed in
order and the first non-empty list wins.
"""

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from noonsync.config.settings import Settings
from noonsync.models.normalizer import normalize_batch
from noonsync.models.product import Product, SourceKind
from noonsync.scrapers.base_strategy import (
    ExtractionResult,
    MissReason,
    first_present,
    parse_document,
)

logger = logging.getLogger("noonsync.structured")

HYDRATION_SCRIPT_ID = "__NEXT_DATA__"

# Probed in order; later paths are only used when earlier ones are empty.
STRUCTURED_PATHS: tuple[tuple[str, ...], ...] = (
    ("props", "pageProps", "catalog", "hits"),
    ("props", "pageProps", "initialState", "catalog", "hits"),
    ("props", "pageProps", "initialState", "products"),
)

PRICE_KEYS: tuple[str, ...] = ("price", "offer_price", "sale_price")


def _walk(data: Any, path: tuple[str, ...]) -> Any:
    node = data
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def find_hits(data: Any) -> list[dict[str, Any]]:
    """Return the first non-empty hit list among STRUCTURED_PATHS."""
    for path in STRUCTURED_PATHS:
        hits = _walk(data, path)
        if isinstance(hits, list) and hits:
            logger.debug("Hits found at %s", ".".join(path))
            return hits
    return []


def _source_url(hit: dict[str, Any]) -> str:
    url_key = hit.get("url_key")
    if url_key:
        return Settings.PRODUCT_URL_TEMPLATE.format(
            url_key=url_key, offer_code=hit.get("offer_code") or ""
        )
    sku = hit.get("sku")
    if sku:
        return Settings.SKU_URL_TEMPLATE.format(sku=sku)
    return Settings.STORE_URL


def map_hit(hit: dict[str, Any]) -> dict[str, Any]:
    """Translate a storefront hit into wire-shaped product fields."""
    stock = hit.get("stock_gross")
    if stock is None:
        stock = Settings.LIVE_STOCK_PLACEHOLDER if hit.get("is_live") else 0
    image_key = hit.get("image_key")
    return {
        "id": hit.get("sku") or hit.get("offer_code"),
        "sku": hit.get("sku"),
        "name": hit.get("name"),
        "description": first_present(
            hit, ("long_description_en", "meta_description", "brand")
        ),
        "price": first_present(hit, PRICE_KEYS),
        "stock": stock,
        "category": hit.get("brand"),
        "tags": ["Express", "Live"] if hit.get("is_express") else ["Live"],
        "imageUrl": (
            Settings.IMAGE_URL_TEMPLATE.format(image_key=image_key)
            if image_key
            else None
        ),
        "sourceUrl": _source_url(hit),
    }


class StructuredDataExtractor:
    """Strategy reading the hydration JSON block of a storefront page."""

    name = "structured"

    def __init__(self, currency: str | None = None) -> None:
        self.currency = currency or Settings.STORE_CURRENCY

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        script = soup.find("script", id=HYDRATION_SCRIPT_ID)
        if script is None or not script.string:
            return ExtractionResult.miss(
                self.name,
                MissReason.NO_PAYLOAD,
                "Could not find store data in page HTML",
            )

        try:
            data = json.loads(script.string)
        except json.JSONDecodeError as exc:
            logger.warning("Hydration block is not valid JSON: %s", exc)
            return ExtractionResult.miss(
                self.name,
                MissReason.UNPARSABLE,
                f"Store data is not valid JSON: {exc}",
            )

        hits = find_hits(data)
        if not hits:
            return ExtractionResult.miss(
                self.name,
                MissReason.EMPTY,
                "Store data contains no products",
            )

        products: list[Product] = normalize_batch(
            [map_hit(hit) if isinstance(hit, dict) else hit for hit in hits],
            SourceKind.STOREFRONT,
            currency=self.currency,
        )
        return ExtractionResult.hit(self.name, products)

    def extract_html(self, html: str) -> ExtractionResult:
        """Convenience wrapper parsing raw HTML first."""
        return self.extract(parse_document(html))

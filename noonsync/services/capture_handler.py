# noonsync/services/capture_handler.py

"""Manual capture of a rendered storefront page.

Mirrors the browser-extension flow: run the structured strategy first,
fall back to heuristic DOM scraping, then hand the product list to the
clipboard as JSON for a paste-based import.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass

import pyperclip  # type: ignore[import-untyped]

from noonsync.models.product import Product
from noonsync.scrapers.base_strategy import (
    ExtractionStrategy,
    parse_document,
    run_strategies,
)
from noonsync.scrapers.dom_extractor import (
    NO_PRODUCTS_MESSAGE,
    HeuristicDomExtractor,
)
from noonsync.scrapers.structured_extractor import StructuredDataExtractor

logger = logging.getLogger("noonsync.capture")

Clipboard = Callable[[str], None]


@dataclass(frozen=True)
class CaptureResult:
    """Reply of one capture request: ``{success, count?, message?}``."""

    success: bool
    count: int = 0
    message: str = ""
    products: tuple[Product, ...] = ()

    def to_dict(self) -> dict[str, object]:
        reply: dict[str, object] = {"success": self.success}
        if self.success:
            reply["count"] = self.count
        if self.message:
            reply["message"] = self.message
        return reply


def capture_strategies(
    page_url: str = "",
    currency: str | None = None,
) -> tuple[ExtractionStrategy, ...]:
    """Strategy precedence for a rendered page."""
    return (
        StructuredDataExtractor(currency=currency),
        HeuristicDomExtractor(page_url=page_url, currency=currency),
    )


def encode_products(products: tuple[Product, ...] | list[Product]) -> str:
    """Encode products as the JSON string placed on the clipboard."""
    return json.dumps([p.to_dict() for p in products], ensure_ascii=False)


def capture_page(
    html: str,
    page_url: str = "",
    clipboard: Clipboard | None = None,
    currency: str | None = None,
) -> CaptureResult:
    """Extract products from a rendered page and copy them as JSON.

    Args:
        html: Markup of the page as rendered in the browser.
        page_url: Address of the page, used to absolutise links.
        clipboard: Transfer function receiving the JSON text. Defaults
            to ``pyperclip.copy``.
        currency: Store currency used for prices and defaults.
    """
    copy = clipboard or pyperclip.copy
    result = run_strategies(
        capture_strategies(page_url, currency), parse_document(html)
    )
    if not result.found:
        logger.info("Capture found no products: %s", result.message)
        return CaptureResult(success=False, message=NO_PRODUCTS_MESSAGE)

    try:
        copy(encode_products(result.products))
    except (pyperclip.PyperclipException, OSError) as exc:
        logger.error("Clipboard transfer failed: %s", exc, exc_info=True)
        return CaptureResult(
            success=False,
            message=f"Found {len(result.products)} products but "
            f"could not copy them: {exc}",
        )

    logger.info(
        "Captured %d products via '%s'",
        len(result.products),
        result.strategy,
    )
    return CaptureResult(
        success=True,
        count=len(result.products),
        products=result.products,
    )

# noonsync/services/sync_handlers.py

"""Server-side sync handlers exposing one JSON contract.

Both handlers answer with a :class:`SyncResponse`: ``200`` and a JSON
array of products on success, or a non-200 status with an
``{"error", "message", "details"}`` object on failure. Neither handler
substitutes fallback data; that is the client orchestrator's job.
"""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from curl_cffi import requests as curl_requests

from noonsync.config.settings import Settings
from noonsync.models.errors import (
    ConfigurationError,
    SyncError,
    TransportFailure,
    UpstreamRejection,
)
from noonsync.models.product import Product
from noonsync.scrapers.base_strategy import (
    MissReason,
    detect_challenge,
    parse_document,
)
from noonsync.scrapers.seller_client import (
    SellerCatalogClient,
    SellerCredentials,
)
from noonsync.scrapers.structured_extractor import StructuredDataExtractor

logger = logging.getLogger("noonsync.handlers")

STOREFRONT_FAILURE_HINT = "Could not retrieve live store data."
FIREWALL_HINT = (
    "The storefront answered with a bot-protection page; "
    "use the browser extension capture instead."
)


@dataclass(frozen=True)
class SyncResponse:
    """Framework-neutral HTTP response of a sync endpoint."""

    status_code: int
    body: Any
    headers: dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )

    @property
    def text(self) -> str:
        return json.dumps(self.body, ensure_ascii=False)

    @classmethod
    def success(cls, products: Sequence[Product]) -> "SyncResponse":
        return cls(
            status_code=200,
            body=[p.to_dict() for p in products],
            headers={
                "Content-Type": "application/json",
                "Cache-Control": Settings.CACHE_CONTROL,
            },
        )

    @classmethod
    def failure(
        cls, status_code: int, payload: dict[str, Any],
    ) -> "SyncResponse":
        return cls(status_code=status_code, body=payload)


def _sync_failed(
    details: str, message: str = STOREFRONT_FAILURE_HINT,
) -> SyncResponse:
    return SyncResponse.failure(
        500,
        {"error": "Sync Failed", "message": message, "details": details},
    )


def handle_storefront_sync(
    session: curl_requests.Session | None = None,
    store_url: str | None = None,
) -> SyncResponse:
    """Fetch the public storefront page and extract its hydration data.

    Only the structured strategy runs here: there is no rendered DOM
    server-side, so the heuristic extractor is not an option.
    """
    url = store_url or Settings.STORE_URL
    session = session or curl_requests.Session(
        impersonate=Settings.IMPERSONATE_BROWSER
    )
    logger.info("Starting public sync for store: %s", url)

    try:
        resp = session.get(
            url,
            headers=dict(Settings.DEFAULT_HEADERS),
            timeout=Settings.REQUEST_TIMEOUT,
        )
    except Exception as exc:
        logger.error("Storefront request failed: %s", exc, exc_info=True)
        return _sync_failed(f"Failed to fetch store page: {exc}")

    if resp.status_code != 200:
        logger.warning("Storefront answered HTTP %d", resp.status_code)
        return _sync_failed(
            f"Failed to fetch store page: HTTP {resp.status_code}"
        )

    html = resp.text
    result = StructuredDataExtractor().extract(parse_document(html))
    if result.found:
        logger.info("Storefront sync produced %d products", len(result.products))
        return SyncResponse.success(result.products)
    if result.reason is MissReason.EMPTY:
        # The store is reachable but lists nothing: a distinct state
        logger.info("Storefront lists no products")
        return SyncResponse.success([])

    # Challenge markers are only checked once extraction has missed
    marker = detect_challenge(html)
    if marker:
        logger.warning("Bot protection page detected (marker: '%s')", marker)
        return _sync_failed(
            f"Bot protection detected (marker: '{marker}')", FIREWALL_HINT
        )

    logger.error(
        "Structured extraction failed: %s (page starts: %r)",
        result.message,
        html[:500],
    )
    return _sync_failed(result.message)


def _status_for(error: SyncError) -> int:
    if isinstance(error, UpstreamRejection):
        return error.status_code if error.status_code != 200 else 502
    if isinstance(error, TransportFailure):
        return 502
    return 500


def handle_seller_sync(
    credentials: SellerCredentials | None = None,
    session: curl_requests.Session | None = None,
) -> SyncResponse:
    """Run the authenticated catalog client behind the sync contract."""
    credentials = credentials or SellerCredentials.from_env()
    try:
        products = SellerCatalogClient(credentials, session).fetch_catalog()
    except ConfigurationError as exc:
        logger.error("Seller sync misconfigured: %s", exc.message)
        return SyncResponse.failure(500, exc.to_payload())
    except SyncError as exc:
        logger.error("Seller sync failed: %s (%s)", exc.message, exc.details)
        return SyncResponse.failure(_status_for(exc), exc.to_payload())
    return SyncResponse.success(products)


def handle_sync(source: str | None = None) -> SyncResponse:
    """Dispatch to the handler selected by ``NOON_SYNC_SOURCE``."""
    selected = (source or Settings.SYNC_SOURCE).strip().lower()
    if selected == "seller":
        return handle_seller_sync()
    if selected != "storefront":
        logger.warning(
            "Unknown sync source '%s', using storefront", selected
        )
    return handle_storefront_sync()

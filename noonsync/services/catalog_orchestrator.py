# noonsync/services/catalog_orchestrator.py

"""Client-side sync with fallback to the bundled catalog.

The orchestrator never lets a sync failure reach its caller: a non-200
status, a transport error, or a 200 whose body is an error object all
lead to the same substitution of the fallback set. The substitution and
the error behind it stay visible through :class:`SyncOutcome`.
"""

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from curl_cffi import requests as curl_requests

from noonsync.config.settings import Settings
from noonsync.models.errors import (
    SyncError,
    TransportFailure,
    UpstreamRejection,
)
from noonsync.models.normalizer import normalize_batch
from noonsync.models.product import Product, SourceKind
from noonsync.services.sync_handlers import SyncResponse
from noonsync.storage.fallback_catalog import FALLBACK_PRODUCTS

logger = logging.getLogger("noonsync.orchestrator")


class SyncEndpoint(Protocol):
    """One configured sync resource, local or remote."""

    def fetch(self) -> SyncResponse:
        ...


class HttpSyncEndpoint:
    """Sync endpoint reached over HTTP with a single GET."""

    def __init__(
        self,
        url: str,
        session: curl_requests.Session | None = None,
        timeout: int | None = None,
    ) -> None:
        self.url = url
        self.session = session or curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self.timeout = timeout or Settings.REQUEST_TIMEOUT

    def fetch(self) -> SyncResponse:
        try:
            resp = self.session.get(
                self.url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except Exception as exc:
            raise TransportFailure(
                f"Could not reach sync endpoint {self.url}", str(exc)
            ) from exc

        try:
            body = json.loads(resp.text)
        except ValueError:
            body = resp.text
        return SyncResponse(
            status_code=resp.status_code,
            body=body,
            headers=dict(resp.headers or {}),
        )


class LocalSyncEndpoint:
    """Sync endpoint served by an in-process handler."""

    def __init__(self, handler: Callable[[], SyncResponse]) -> None:
        self.handler = handler

    def fetch(self) -> SyncResponse:
        return self.handler()


@dataclass(frozen=True)
class SyncOutcome:
    """Products to show, and whether they came from the fallback set."""

    products: tuple[Product, ...]
    used_fallback: bool = False
    error: SyncError | None = None


def _raise_for_payload(response: SyncResponse) -> list[object]:
    """Return the product list, or raise for any failure signal."""
    body = response.body
    if response.status_code != 200:
        if isinstance(body, dict):
            raise UpstreamRejection(
                response.status_code,
                str(body.get("message") or body.get("error")),
                details=str(body.get("details", "")),
            )
        raise UpstreamRejection(
            response.status_code, f"HTTP {response.status_code}"
        )
    if isinstance(body, dict) and "error" in body:
        raise UpstreamRejection(
            200,
            str(body.get("message") or body["error"]),
            details=str(body.get("details", "")),
        )
    if not isinstance(body, list):
        raise UpstreamRejection(
            200, "Sync endpoint did not return a product list."
        )
    return body


class CatalogOrchestrator:
    """Fetch the catalog from one endpoint, substituting on failure."""

    def __init__(
        self,
        endpoint: SyncEndpoint,
        fallback: Sequence[Product] = FALLBACK_PRODUCTS,
    ) -> None:
        self.endpoint = endpoint
        self.fallback: tuple[Product, ...] = tuple(fallback)

    def sync(self) -> SyncOutcome:
        """Run one sync attempt; never raises for sync failures."""
        try:
            items = _raise_for_payload(self.endpoint.fetch())
        except SyncError as exc:
            logger.warning(
                "Sync failed, showing fallback catalog: %s (%s)",
                exc.message,
                exc.details,
            )
            return SyncOutcome(
                products=self.fallback, used_fallback=True, error=exc
            )
        except Exception as exc:
            logger.error(
                "Unexpected sync error, showing fallback catalog: %s",
                exc,
                exc_info=True,
            )
            return SyncOutcome(
                products=self.fallback,
                used_fallback=True,
                error=TransportFailure(
                    "Sync endpoint failed unexpectedly.", str(exc)
                ),
            )

        products = tuple(normalize_batch(items, SourceKind.SYNC))
        logger.info("Sync returned %d products", len(products))
        return SyncOutcome(products=products)

    def get_products(self) -> list[Product]:
        """Return the synced catalog, or the fallback set on failure."""
        return list(self.sync().products)

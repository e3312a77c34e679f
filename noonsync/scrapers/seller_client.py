# noonsync/scrapers/seller_client.py

"""Client for the credentialed Noon seller catalog API."""

import base64
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from curl_cffi import requests as curl_requests

from noonsync.config.settings import Settings
from noonsync.models.errors import (
    ConfigurationError,
    TransportFailure,
    UpstreamRejection,
)
from noonsync.models.normalizer import normalize_batch
from noonsync.models.product import Product, SourceKind
from noonsync.scrapers.base_strategy import first_present

logger = logging.getLogger("noonsync.seller")

# Wrapper keys under which the API may nest the item list
_ITEM_CONTAINER_KEYS: tuple[str, ...] = ("items", "data", "products")


class BusinessUnit(str, Enum):
    """Catalog partitions exposed by the seller API."""

    NOON = "noon"
    NOON_MINUTES = "noon_minutes"
    NOON_FOOD = "noon_food"


DEFAULT_BUSINESS_UNIT = BusinessUnit.NOON


def resolve_business_unit(code: str | None) -> BusinessUnit:
    """Map a configured code to a BusinessUnit, defaulting on unknowns."""
    normalized = (code or "").strip().lower()
    for unit in BusinessUnit:
        if unit.value == normalized:
            return unit
    if normalized:
        logger.warning(
            "Unknown business unit '%s', using '%s'",
            code,
            DEFAULT_BUSINESS_UNIT.value,
        )
    return DEFAULT_BUSINESS_UNIT


@dataclass(frozen=True)
class SellerCredentials:
    """Application credentials plus the target business unit."""

    app_id: str
    app_secret: str
    business_unit: BusinessUnit = DEFAULT_BUSINESS_UNIT

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None,
    ) -> "SellerCredentials":
        """Read ``NOON_APP_ID``, ``NOON_APP_SECRET`` and ``NOON_BUSINESS_UNIT``."""
        env = os.environ if environ is None else environ
        return cls(
            app_id=env.get("NOON_APP_ID", "").strip(),
            app_secret=env.get("NOON_APP_SECRET", "").strip(),
            business_unit=resolve_business_unit(
                env.get("NOON_BUSINESS_UNIT")
            ),
        )

    def validate(self) -> None:
        """Raise ConfigurationError when the id or secret is missing."""
        missing = [
            name
            for name, value in (
                ("NOON_APP_ID", self.app_id),
                ("NOON_APP_SECRET", self.app_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Missing Credentials: set "
                f"{' and '.join(missing)} in the environment.",
                details=f"missing={','.join(missing)}",
            )

    def auth_header(self) -> str:
        token = base64.b64encode(
            f"{self.app_id}:{self.app_secret}".encode("utf-8")
        ).decode("ascii")
        return f"Basic {token}"


def map_seller_item(item: dict[str, Any]) -> dict[str, Any]:
    """Translate a seller API item into wire-shaped product fields."""
    sku = first_present(item, ("partner_sku", "sku"))
    images = item.get("images")
    image_url = item.get("image_url") or (
        images[0] if isinstance(images, list) and images else None
    )
    return {
        "id": first_present(item, ("partner_sku", "sku", "psku_code")),
        "sku": sku,
        "name": first_present(item, ("title", "name")),
        "description": item.get("description"),
        "price": first_present(item, ("sale_price", "price")),
        "currency": item.get("currency_code"),
        "stock": first_present(item, ("quantity", "stock")),
        "category": first_present(item, ("brand", "family")),
        "tags": ["Active"] if item.get("is_active") else ["Inactive"],
        "imageUrl": image_url,
        "sourceUrl": item.get("url") or (
            Settings.SKU_URL_TEMPLATE.format(sku=sku) if sku else None
        ),
        "performance": item.get("performance"),
    }


def _upstream_message(text: str) -> str:
    try:
        body = json.loads(text)
    except ValueError:
        return text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or "")
    return ""


def _unwrap_items(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _ITEM_CONTAINER_KEYS:
            items = payload.get(key)
            if isinstance(items, list):
                return items
    return []


class SellerCatalogClient:
    """Fetch and normalize the seller's catalog for one business unit.

    Stateless apart from the HTTP session: each call performs a single
    request, with no retries.
    """

    def __init__(
        self,
        credentials: SellerCredentials,
        session: curl_requests.Session | None = None,
        timeout: int | None = None,
    ) -> None:
        self.credentials = credentials
        self.session = session or curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self.timeout = timeout or Settings.REQUEST_TIMEOUT

    def catalog_url(self) -> str:
        base = Settings.SELLER_API_BASE.rstrip("/")
        return f"{base}/{self.credentials.business_unit.value}/catalog/items"

    def fetch_catalog(self) -> list[Product]:
        """Return the normalized catalog.

        Raises:
            ConfigurationError: id or secret missing (no request is made).
            UpstreamRejection: the API answered with a non-200 status.
            TransportFailure: the request could not be completed.
        """
        self.credentials.validate()
        url = self.catalog_url()
        headers: dict[str, str] = {
            "Authorization": self.credentials.auth_header(),
            "Accept": "application/json",
        }

        logger.info(
            "[seller] Fetching catalog for business unit '%s'",
            self.credentials.business_unit.value,
        )
        try:
            resp = self.session.get(
                url, headers=headers, timeout=self.timeout
            )
        except Exception as exc:
            logger.error(
                "[seller] Request error: %s", exc, exc_info=True
            )
            raise TransportFailure(
                "Could not connect to the seller API.", str(exc)
            ) from exc

        if resp.status_code != 200:
            upstream = _upstream_message(resp.text)
            logger.warning(
                "[seller] HTTP %d: %s", resp.status_code, upstream
            )
            raise UpstreamRejection(
                resp.status_code,
                upstream or f"Seller API returned HTTP {resp.status_code}",
                details=f"HTTP {resp.status_code} from {url}",
            )

        try:
            payload = json.loads(resp.text)
        except ValueError as exc:
            raise UpstreamRejection(
                resp.status_code,
                "Seller API returned a non-JSON body.",
                details=str(exc),
            ) from exc

        products: list[Product] = normalize_batch(
            [
                map_seller_item(item) if isinstance(item, dict) else item
                for item in _unwrap_items(payload)
            ],
            SourceKind.SELLER_API,
        )
        logger.info("[seller] %d products normalized", len(products))
        return products

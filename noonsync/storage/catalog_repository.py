# noonsync/storage/catalog_repository.py

"""Caller-owned catalog holding the current sync batch."""

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from noonsync.config.settings import Settings
from noonsync.models.errors import MalformedImport, ProductNotFound
from noonsync.models.normalizer import normalize, normalize_batch
from noonsync.models.product import Product, SourceKind
from noonsync.services.catalog_orchestrator import SyncOutcome

logger = logging.getLogger("noonsync.catalog")

ALL_CATEGORIES = "All"


class CatalogRepository:
    """The catalog a consumer renders, replaced whole on every load.

    Records are never edited in place: an update builds a new Product
    and swaps it into a fresh tuple.
    """

    def __init__(self, products: Sequence[Product] = ()) -> None:
        self._products: tuple[Product, ...] = tuple(products)
        self.last_sync: str = "Pending..."

    @property
    def products(self) -> tuple[Product, ...]:
        return self._products

    def __len__(self) -> int:
        return len(self._products)

    def replace_all(self, products: Sequence[Product], label: str) -> None:
        self._products = tuple(products)
        self.last_sync = label
        logger.info("Catalog replaced: %d products (%s)", len(products), label)

    def load(self, outcome: SyncOutcome) -> None:
        """Install the products of a sync attempt."""
        stamp = datetime.now().strftime("%H:%M:%S")
        label = f"Fallback: {stamp}" if outcome.used_fallback else stamp
        self.replace_all(outcome.products, label)

    def import_json(self, text: str) -> tuple[Product, ...]:
        """Replace the catalog with a pasted JSON array of products.

        Raises:
            MalformedImport: the text is not JSON or not an array. The
                current catalog is left untouched.
        """
        try:
            payload: Any = json.loads(text)
        except ValueError as exc:
            raise MalformedImport(
                "Invalid JSON. Please ensure you copied the data "
                "correctly from the extension.",
                details=str(exc),
            ) from exc
        if not isinstance(payload, list):
            raise MalformedImport(
                "Invalid data format: Expected an array of products "
                "(payload is not an array).",
                details=type(payload).__name__,
            )

        products = normalize_batch(payload, SourceKind.IMPORT)
        stamp = datetime.now().strftime("%H:%M:%S")
        self.replace_all(products, f"Manual Import: {stamp}")
        return self._products

    def get(self, product_id: str) -> Product:
        for product in self._products:
            if product.id == product_id:
                return product
        raise ProductNotFound(f"Product not found: {product_id}")

    def update_product(
        self, product_id: str, updates: Mapping[str, Any],
    ) -> Product:
        """Apply wire-keyed *updates* and return the new record.

        The id and sync timestamp of the original record are kept;
        everything else goes back through the normalizer.
        """
        current = self.get(product_id)
        merged = {**current.to_dict(), **updates, "id": current.id}
        updated = normalize(
            merged,
            SourceKind.IMPORT,
            currency=current.currency,
            synced_at=current.synced_at,
        )
        self._products = tuple(
            updated if p.id == product_id else p for p in self._products
        )
        logger.info("Product %s updated", product_id)
        return updated

    def categories(self) -> list[str]:
        """Distinct categories in catalog order, with ``"All"`` first."""
        seen: dict[str, None] = {}
        for product in self._products:
            seen.setdefault(product.category, None)
        return [ALL_CATEGORIES, *seen]

    def by_category(self, category: str) -> list[Product]:
        if category == ALL_CATEGORIES:
            return list(self._products)
        return [p for p in self._products if p.category == category]

    def low_stock(self, threshold: int | None = None) -> list[Product]:
        """Products with fewer units than *threshold* in stock."""
        limit = Settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
        return [p for p in self._products if p.stock < limit]

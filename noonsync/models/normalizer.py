# noonsync/models/normalizer.py

"""Map any upstream item shape onto the canonical Product record."""

import hashlib
import json
import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from noonsync.config.settings import Settings
from noonsync.models.product import Performance, Product, SourceKind

logger = logging.getLogger("noonsync.normalizer")

IdFactory = Callable[[Mapping[str, Any]], str]

UNKNOWN_NAME = "Unknown Product"
UNKNOWN_SKU = "N/A"

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

_DEFAULT_CATEGORY: dict[SourceKind, str] = {
    SourceKind.DOM: "Imported",
}


def content_id(item: Mapping[str, Any]) -> str:
    """Derive a reproducible id from the item's content."""
    blob = json.dumps(item, sort_keys=True, default=str)
    digest = hashlib.sha1(blob.encode("utf-8")).hexdigest()
    return f"gen-{digest[:12]}"


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def _number(value: Any) -> float:
    """Coerce to a finite, non-negative float (0.0 otherwise)."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).replace(",", ""))
    except ValueError:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _count(value: Any) -> int:
    return int(_number(value))


def _tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return ()
    seen: dict[str, None] = {}
    for tag in value:
        label = _text(tag)
        if label:
            seen.setdefault(label, None)
    return tuple(seen)


def _currency(value: Any, default: str) -> str:
    code = _text(value).upper()
    return code if _CURRENCY_RE.match(code) else default


def _performance(value: Any) -> Performance:
    metrics: Mapping[str, Any] = (
        value if isinstance(value, Mapping) else {}
    )
    # Upstream ctr is never trusted
    return Performance.derive(
        _count(metrics.get("views")), _count(metrics.get("clicks"))
    )


def normalize(
    raw_item: Any,
    source_kind: SourceKind,
    *,
    currency: str | None = None,
    synced_at: datetime | None = None,
    id_factory: IdFactory | None = None,
) -> Product:
    """Build a Product from a wire-shaped mapping, filling defaults.

    Never raises: anything unresolvable falls back to the documented
    default so that one malformed item cannot abort a sync.

    Args:
        raw_item: Mapping using the camelCase wire keys. Non-mapping
            values are treated as an empty item.
        source_kind: Origin of the item; selects source-specific defaults.
        currency: Store currency used when the item has no valid code.
        synced_at: Timestamp to stamp on the record (defaults to now, UTC).
        id_factory: Generator for ids when the item carries neither an
            ``id`` nor a usable ``sku``. Defaults to :func:`content_id`.
    """
    item: Mapping[str, Any] = (
        raw_item if isinstance(raw_item, Mapping) else {}
    )
    if not isinstance(raw_item, Mapping):
        logger.debug(
            "Non-mapping %s item replaced by defaults: %r",
            source_kind.value,
            raw_item,
        )

    sku = _text(item.get("sku")) or UNKNOWN_SKU
    product_id = _text(item.get("id"))
    if not product_id:
        product_id = (
            sku if sku != UNKNOWN_SKU
            else (id_factory or content_id)(item)
        )

    return Product(
        id=product_id,
        sku=sku,
        name=_text(item.get("name")) or UNKNOWN_NAME,
        description=_text(item.get("description")),
        price=_number(item.get("price")),
        currency=_currency(
            item.get("currency"), currency or Settings.STORE_CURRENCY
        ),
        stock=_count(item.get("stock")),
        category=(
            _text(item.get("category"))
            or _DEFAULT_CATEGORY.get(source_kind, "General")
        ),
        tags=_tags(item.get("tags")),
        image_url=(
            _text(item.get("imageUrl")) or Settings.PLACEHOLDER_IMAGE_URL
        ),
        source_url=(
            _text(item.get("sourceUrl") or item.get("noonUrl"))
            or Settings.STORE_URL
        ),
        synced_at=synced_at or datetime.now(timezone.utc),
        performance=_performance(item.get("performance")),
    )


def normalize_batch(
    raw_items: Any,
    source_kind: SourceKind,
    **kwargs: Any,
) -> list[Product]:
    """Normalize a sequence of items with a shared sync timestamp.

    Ids are made unique within the batch with :func:`unique_ids`.
    """
    if not isinstance(raw_items, (list, tuple)):
        return []
    kwargs.setdefault("synced_at", datetime.now(timezone.utc))
    return unique_ids(
        normalize(item, source_kind, **kwargs) for item in raw_items
    )


def unique_ids(products: Iterable[Product]) -> list[Product]:
    """Return *products* with ids unique within the batch.

    The first record keeps its id. A later record reusing it (the same
    SKU under another offer or URL) gets the id suffixed with a hash of
    its source URL, plus a counter if that is taken as well.
    """
    taken: set[str] = set()
    result: list[Product] = []
    for product in products:
        if product.id in taken:
            digest = hashlib.sha1(
                product.source_url.encode("utf-8")
            ).hexdigest()[:6]
            candidate = f"{product.id}-{digest}"
            counter = 2
            while candidate in taken:
                candidate = f"{product.id}-{digest}-{counter}"
                counter += 1
            logger.debug(
                "Duplicate id %s in batch renamed to %s", product.id, candidate
            )
            product = replace(product, id=candidate)
        taken.add(product.id)
        result.append(product)
    return result

# noonsync/models/product.py

"""Canonical product record shared by every sync path."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SourceKind(str, Enum):
    """Where a raw item came from before normalization."""

    STOREFRONT = "storefront"
    SELLER_API = "seller_api"
    DOM = "dom"
    IMPORT = "import"
    SYNC = "sync"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Performance:
    """Engagement metrics for a product listing."""

    views: int = 0
    clicks: int = 0
    ctr: float = 0.0

    @classmethod
    def derive(cls, views: int, clicks: int) -> "Performance":
        """Build metrics with ``ctr`` recomputed from views and clicks."""
        ctr = clicks / views if views > 0 else 0.0
        return cls(views=views, clicks=clicks, ctr=ctr)


@dataclass(frozen=True)
class Product:
    """A single normalized catalog entry.

    Instances are only built by :func:`noonsync.models.normalizer.normalize`
    and are never mutated; an update produces a new record.
    """

    id: str
    sku: str
    name: str
    description: str
    price: float
    currency: str
    stock: int
    category: str
    tags: tuple[str, ...]
    image_url: str
    source_url: str
    synced_at: datetime
    performance: Performance = field(default_factory=Performance)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON wire shape (camelCase keys)."""
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "currency": self.currency,
            "stock": self.stock,
            "category": self.category,
            "tags": list(self.tags),
            "imageUrl": self.image_url,
            "sourceUrl": self.source_url,
            "syncedAt": self.synced_at.isoformat(),
            "performance": {
                "views": self.performance.views,
                "clicks": self.performance.clicks,
                "ctr": self.performance.ctr,
            },
        }

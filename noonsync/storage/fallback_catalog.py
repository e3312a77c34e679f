# noonsync/storage/fallback_catalog.py

"""Bundled catalog shown when every live source fails. Read-only."""

from datetime import datetime, timezone

from noonsync.models.normalizer import normalize
from noonsync.models.product import Product, SourceKind

FALLBACK_SYNCED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)

_FALLBACK_ITEMS: tuple[dict[str, object], ...] = (
    {
        "id": "1",
        "sku": "NOON-001",
        "name": "Ultra-HD Smart Camera Pro",
        "description": (
            "4K Resolution, Night Vision, and AI motion detection "
            "for home security."
        ),
        "price": 299.00,
        "currency": "AED",
        "stock": 45,
        "category": "Electronics",
        "tags": ["New", "Security"],
        "imageUrl": "https://picsum.photos/seed/camera/400/400",
        "sourceUrl": "https://noon.com/uae-en/p-12345",
        "performance": {"views": 1200, "clicks": 150},
    },
    {
        "id": "2",
        "sku": "NOON-002",
        "name": "Ergonomic Mesh Office Chair",
        "description": (
            "High-back desk chair with lumbar support and "
            "adjustable armrests."
        ),
        "price": 549.00,
        "currency": "AED",
        "stock": 8,
        "category": "Home & Office",
        "tags": ["Best Seller"],
        "imageUrl": "https://picsum.photos/seed/chair/400/400",
        "sourceUrl": "https://noon.com/uae-en/p-67890",
        "performance": {"views": 800, "clicks": 80},
    },
    {
        "id": "3",
        "sku": "NOON-003",
        "name": "Wireless Noise Cancelling Earbuds",
        "description": (
            "Crystal clear sound with active noise cancellation and "
            "24-hour battery life."
        ),
        "price": 199.00,
        "currency": "AED",
        "stock": 120,
        "category": "Electronics",
        "tags": ["Audio", "Premium"],
        "imageUrl": "https://picsum.photos/seed/audio/400/400",
        "sourceUrl": "https://noon.com/uae-en/p-11223",
        "performance": {"views": 2500, "clicks": 400},
    },
)

FALLBACK_PRODUCTS: tuple[Product, ...] = tuple(
    normalize(item, SourceKind.FALLBACK, synced_at=FALLBACK_SYNCED_AT)
    for item in _FALLBACK_ITEMS
)

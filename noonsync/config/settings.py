# noonsync/config/settings.py

"""Central configuration for the noonsync pipeline."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the noonsync pipeline."""

    # --- Store ---
    STORE_URL: str = os.getenv(
        "NOON_STORE_URL", "https://www.noon.com/uae-en/p-476641/"
    )
    STORE_CURRENCY: str = os.getenv("NOON_STORE_CURRENCY", "AED")
    PRODUCT_URL_TEMPLATE: str = (
        "https://www.noon.com/uae-en/{url_key}/p?o={offer_code}"
    )
    SKU_URL_TEMPLATE: str = "https://www.noon.com/uae-en/{sku}/p/"
    IMAGE_URL_TEMPLATE: str = (
        "https://f.nooncdn.com/products/tr:n-t_400/{image_key}.jpg"
    )
    PLACEHOLDER_IMAGE_URL: str = (
        "https://via.placeholder.com/400?text=No+Image"
    )

    # --- Sync ---
    SYNC_SOURCE: str = os.getenv("NOON_SYNC_SOURCE", "storefront")
    SYNC_ENDPOINT: str = os.getenv("NOON_SYNC_ENDPOINT", "")
    SELLER_API_BASE: str = os.getenv(
        "NOON_SELLER_API_BASE", "https://api.noon.com/seller/v1"
    )
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    CACHE_CONTROL: str = "public, s-maxage=60, stale-while-revalidate=300"

    # --- Placeholders ---
    LIVE_STOCK_PLACEHOLDER: int = 50    # Stock for "is_live" hits w/o count
    SCRAPED_STOCK_PLACEHOLDER: int = 10  # Stock for DOM-scraped cards
    LOW_STOCK_THRESHOLD: int = 10

    # --- Anti-bot ---
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "max-age=0",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"

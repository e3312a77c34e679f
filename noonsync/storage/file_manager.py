# noonsync/storage/file_manager.py

"""Handles saving sync batches to disk."""

import csv
import json
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from noonsync.config.settings import Settings
from noonsync.models.product import Product

logger = logging.getLogger("noonsync.storage")


class FileManager:
    """Handles saving sync batches to disk."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, results_dir=%s", self.results_dir)

    def save_catalog(
        self, products: Sequence[Product], source: str
    ) -> Path:
        """Save a batch to a timestamped JSON file in wire format."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"catalog_{source}_{timestamp}.json"

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(
                [p.to_dict() for p in products],
                f,
                ensure_ascii=False,
                indent=2,
            )

        logger.info(
            "Saved %d %s products to %s", len(products), source, filepath
        )
        return filepath

    def export_csv(
        self, products: Sequence[Product], source: str
    ) -> Path:
        """Export a batch to a human-readable CSV file sorted by price."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"export_{source}_{timestamp}.csv"

        sorted_products = sorted(
            products,
            key=lambda p: p.price if p.price > 0 else float("inf"),
        )

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["SKU", "Name", "Price", "Currency", "Stock",
                 "Category", "Tags", "URL"]
            )
            for p in sorted_products:
                writer.writerow(
                    [p.sku, p.name, p.price, p.currency, p.stock,
                     p.category, "|".join(p.tags), p.source_url]
                )

        logger.info(
            "Exported %d %s products to %s", len(products), source, filepath
        )
        return filepath

"""Product catalog loaded from the CSV feed"""

import csv
import logging
import os
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..core.config import settings
from ..models.product import Product

logger = logging.getLogger(__name__)

FEED_COLUMNS = (
    "id",
    "item_group_id",
    "title",
    "description",
    "link",
    "image_link",
    "price",
    "availability",
)


class CatalogLoadError(Exception):
    """Raised when the product feed cannot be read"""
    pass


def parse_price(price_field: Optional[str]) -> str:
    """
    Extract the numeric part of a feed price.

    The feed stores prices as "24.99 USD"; the currency suffix is discarded.
    """
    if not price_field:
        return "0.00"
    amount = price_field.split(" ")[0]
    Decimal(amount)  # raises InvalidOperation for malformed values
    return amount


class CatalogStore:
    """
    In-memory product lookup keyed by variant id.

    The mapping is replaced in a single assignment once a feed has been
    fully parsed, so readers never observe a half-built catalog.
    """

    def __init__(self, csv_path: str):
        self._csv_path = csv_path
        self._products: Optional[dict[str, Product]] = None

    @property
    def csv_path(self) -> str:
        return self._csv_path

    @property
    def is_loaded(self) -> bool:
        return self._products is not None

    def load(self) -> dict[str, Product]:
        """
        Parse the feed file and swap in the new catalog.

        Raises:
            CatalogLoadError: If the file cannot be read
        """
        try:
            with open(self._csv_path, "r", encoding="utf-8", newline="") as f:
                lines = [line for line in f.read().splitlines() if line.strip()]
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogLoadError(f"Unable to read product feed {self._csv_path}: {e}") from e

        products: dict[str, Product] = {}
        # Skip header row
        for row in csv.reader(lines[1:], skipinitialspace=True):
            fields = [field.strip() for field in row]
            fields += [""] * (len(FEED_COLUMNS) - len(fields))
            record = dict(zip(FEED_COLUMNS, fields))

            if not record["id"]:
                continue

            try:
                record["price"] = parse_price(record["price"])
            except InvalidOperation:
                logger.warning(
                    f"Skipping variant {record['id']}: unparseable price {record['price']!r}"
                )
                continue

            products[record["id"]] = Product(
                id=record["id"],
                item_group_id=record["item_group_id"] or None,
                title=record["title"],
                description=record["description"],
                link=record["link"] or None,
                image_link=record["image_link"] or None,
                price=record["price"],
                availability=record["availability"],
            )

        self._products = products
        logger.info(
            f"Loaded {len(products)} product variants from {os.path.basename(self._csv_path)}"
        )
        return products

    def _catalog(self) -> dict[str, Product]:
        # Empty until load() runs at application startup
        return self._products or {}

    def get_product(self, variant_id: str) -> Optional[Product]:
        """Get a product variant by id"""
        return self._catalog().get(variant_id)

    def get_all_products(self) -> list[Product]:
        """Get all product variants"""
        return list(self._catalog().values())


# Singleton instance
product_db = CatalogStore(settings.catalog_path)

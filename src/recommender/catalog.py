"""Product catalog for QR Studio add-ons and plans.

This module defines the immutable ``Product`` record, the enumerated product
categories, and the read-only ``ProductCatalog`` registry that every
recommendation generator reads from. The default catalog is seeded from
``DEFAULT_PRODUCTS``; an alternative catalog can be loaded from CSV.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

# Configure module logger
logger = logging.getLogger(__name__)

# Separator for list-valued CSV columns
LIST_SEPARATOR = "|"

CATALOG_COLUMNS = [
    "id",
    "name",
    "category",
    "price",
    "features",
    "target_users",
    "description",
    "compatibility",
    "rating",
    "popularity",
]


class ProductCategory(str, Enum):
    """Categories a catalog product can belong to."""

    SUBSCRIPTION = "subscription"
    ADDON = "addon"
    ENTERPRISE = "enterprise"
    MOBILE = "mobile"
    TEMPLATES = "templates"
    DEVELOPER = "developer"


@dataclass(frozen=True)
class Product:
    """A recommendable product or add-on.

    Attributes:
        id: Unique product identifier.
        name: Display name.
        category: Product category.
        price: Non-negative list price.
        features: Feature tags in display order. Never empty.
        target_users: Persona tags (informational only).
        description: Display description.
        compatibility: Feature tags used for complementary-product lookup.
        rating: Average user rating in [0, 5].
        popularity: Prior relevance weight in [0, 1].
    """

    KIND: ClassVar[str] = "product"

    id: str
    name: str
    category: ProductCategory
    price: float
    features: Tuple[str, ...]
    target_users: Tuple[str, ...]
    description: str
    compatibility: Tuple[str, ...]
    rating: float
    popularity: float

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Product id must be a non-empty string")
        if self.price < 0:
            raise ValueError(f"Product {self.id}: price must be non-negative")
        if not self.features:
            raise ValueError(f"Product {self.id}: features must not be empty")
        if not 0 <= self.rating <= 5:
            raise ValueError(f"Product {self.id}: rating must be in [0, 5]")
        if not 0 <= self.popularity <= 1:
            raise ValueError(f"Product {self.id}: popularity must be in [0, 1]")


DEFAULT_PRODUCTS: Tuple[Product, ...] = (
    Product(
        id="qr-pro-plus",
        name="QR Pro Plus",
        category=ProductCategory.SUBSCRIPTION,
        price=29.99,
        features=("unlimited_qr", "advanced_analytics", "custom_branding", "api_access"),
        target_users=("business", "enterprise"),
        description="Advanced QR code management for businesses",
        compatibility=("bulk_generation", "team_collaboration"),
        rating=4.8,
        popularity=0.85,
    ),
    Product(
        id="analytics-dashboard",
        name="Advanced Analytics Dashboard",
        category=ProductCategory.ADDON,
        price=9.99,
        features=("real_time_analytics", "custom_reports", "data_export"),
        target_users=("marketer", "analyst"),
        description="Deep insights into your QR code performance",
        compatibility=("qr_generation",),
        rating=4.6,
        popularity=0.72,
    ),
    Product(
        id="white-label-solution",
        name="White Label Solution",
        category=ProductCategory.ENTERPRISE,
        price=199.99,
        features=("custom_branding", "domain_mapping", "api_integration"),
        target_users=("agency", "enterprise"),
        description="Complete white-label QR solution for agencies",
        compatibility=("team_collaboration", "api_access"),
        rating=4.9,
        popularity=0.45,
    ),
    Product(
        id="mobile-app",
        name="QR Studio Mobile App",
        category=ProductCategory.MOBILE,
        price=4.99,
        features=("mobile_scanning", "offline_mode", "camera_integration"),
        target_users=("individual", "business"),
        description="Scan and manage QR codes on the go",
        compatibility=("qr_generation", "analytics"),
        rating=4.4,
        popularity=0.68,
    ),
    Product(
        id="design-templates",
        name="Premium Design Templates",
        category=ProductCategory.TEMPLATES,
        price=14.99,
        features=("premium_designs", "custom_styles", "brand_templates"),
        target_users=("designer", "marketer"),
        description="Professional QR code design templates",
        compatibility=("qr_generation",),
        rating=4.7,
        popularity=0.59,
    ),
    Product(
        id="api-integration",
        name="API Integration Package",
        category=ProductCategory.DEVELOPER,
        price=39.99,
        features=("rest_api", "webhooks", "sdk_access"),
        target_users=("developer", "enterprise"),
        description="Complete API access for developers",
        compatibility=("bulk_generation", "analytics"),
        rating=4.5,
        popularity=0.41,
    ),
)


class ProductCatalog:
    """Read-only registry of products keyed by id.

    The catalog is built once and never mutated afterwards, so it can be
    shared between threads without locking.
    """

    def __init__(self, products: Iterable[Product] = DEFAULT_PRODUCTS):
        by_id: Dict[str, Product] = {}
        for product in products:
            if product.id in by_id:
                raise ValueError(f"Duplicate product id in catalog: {product.id}")
            by_id[product.id] = product

        self._products: Dict[str, Product] = by_id
        self._ordered: Tuple[Product, ...] = tuple(by_id.values())

        logger.info(
            "Product catalog initialized",
            extra={"num_products": len(self._ordered)},
        )

    def get(self, product_id: str) -> Optional[Product]:
        """Return the product with ``product_id``, or None if unknown."""
        return self._products.get(product_id)

    def all(self) -> Tuple[Product, ...]:
        """Return every product in insertion order."""
        return self._ordered

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._ordered)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products


def _split_list(value: object) -> Tuple[str, ...]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ()
    return tuple(
        part.strip() for part in str(value).split(LIST_SEPARATOR) if part.strip()
    )


def load_catalog_csv(csv_path: str) -> ProductCatalog:
    """Build a catalog from a CSV file.

    List-valued columns (``features``, ``target_users``, ``compatibility``)
    hold ``|``-separated tags.

    Args:
        csv_path: Path to the catalog CSV.

    Returns:
        ProductCatalog with one product per row, in file order.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If required columns are missing, the file is empty, or a
            row holds an invalid value.
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"Catalog CSV not found: {csv_path}")

    logger.info(f"Loading catalog from {csv_path}")
    df = pd.read_csv(csv_file, dtype={"id": str})

    missing = set(CATALOG_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Catalog CSV missing required columns: {sorted(missing)}")

    if df.empty:
        raise ValueError("Cannot build catalog from empty CSV")

    products: List[Product] = []
    for row in df.to_dict(orient="records"):
        products.append(
            Product(
                id=str(row["id"]),
                name=str(row["name"]),
                category=ProductCategory(str(row["category"])),
                price=float(row["price"]),
                features=_split_list(row["features"]),
                target_users=_split_list(row["target_users"]),
                description=str(row["description"]),
                compatibility=_split_list(row["compatibility"]),
                rating=float(row["rating"]),
                popularity=float(row["popularity"]),
            )
        )

    logger.info(f"Loaded {len(products)} products from {csv_path}")
    return ProductCatalog(products)

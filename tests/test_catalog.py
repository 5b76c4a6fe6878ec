"""Tests for the product catalog."""

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.recommender.catalog import (
    DEFAULT_PRODUCTS,
    Product,
    ProductCatalog,
    ProductCategory,
    load_catalog_csv,
)
from src.recommender.config import ServiceConfig, load_config
from src.recommender.service import RecommendationService


def make_product(product_id="p1", **overrides):
    fields = dict(
        id=product_id,
        name="Product",
        category=ProductCategory.ADDON,
        price=1.0,
        features=("a",),
        target_users=(),
        description="",
        compatibility=(),
        rating=4.0,
        popularity=0.5,
    )
    fields.update(overrides)
    return Product(**fields)


def test_default_catalog_is_seeded(catalog):
    """Test that the default catalog holds the six seeded products in order."""
    assert len(catalog) == 6
    assert [p.id for p in catalog.all()] == [p.id for p in DEFAULT_PRODUCTS]
    assert "qr-pro-plus" in catalog


def test_get_returns_product_or_none(catalog):
    product = catalog.get("analytics-dashboard")

    assert product is not None
    assert product.category == ProductCategory.ADDON
    assert product.features == ("real_time_analytics", "custom_reports", "data_export")
    assert catalog.get("does-not-exist") is None


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError, match="Duplicate"):
        ProductCatalog([make_product("dup"), make_product("dup")])


@pytest.mark.parametrize(
    "overrides",
    [
        {"price": -1.0},
        {"features": ()},
        {"rating": 5.5},
        {"popularity": 1.2},
    ],
)
def test_invalid_product_attributes_rejected(overrides):
    with pytest.raises(ValueError):
        make_product(**overrides)


def test_products_are_immutable(catalog):
    product = catalog.get("qr-pro-plus")

    with pytest.raises(Exception):
        product.popularity = 0.1


def test_load_catalog_csv(tmp_path):
    """Test building a catalog from CSV with pipe-separated list columns."""
    csv_path = tmp_path / "catalog.csv"
    pd.DataFrame(
        [
            {
                "id": "starter",
                "name": "Starter",
                "category": "subscription",
                "price": 5.0,
                "features": "unlimited_qr|custom_branding",
                "target_users": "individual",
                "description": "Entry plan",
                "compatibility": "qr_generation",
                "rating": 4.1,
                "popularity": 0.3,
            },
            {
                "id": "scanner",
                "name": "Scanner",
                "category": "mobile",
                "price": 0.0,
                "features": "mobile_scanning",
                "target_users": "",
                "description": "Scan codes",
                "compatibility": "",
                "rating": 3.9,
                "popularity": 0.6,
            },
        ]
    ).to_csv(csv_path, index=False)

    loaded = load_catalog_csv(str(csv_path))

    assert [p.id for p in loaded.all()] == ["starter", "scanner"]
    starter = loaded.get("starter")
    assert starter.features == ("unlimited_qr", "custom_branding")
    assert starter.category == ProductCategory.SUBSCRIPTION
    assert loaded.get("scanner").compatibility == ()


def test_load_catalog_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog_csv(str(tmp_path / "missing.csv"))


def test_load_catalog_csv_missing_columns(tmp_path):
    csv_path = tmp_path / "catalog.csv"
    pd.DataFrame([{"id": "x", "name": "X"}]).to_csv(csv_path, index=False)

    with pytest.raises(ValueError, match="missing required columns"):
        load_catalog_csv(str(csv_path))


def write_catalog(csv_path):
    pd.DataFrame(
        [
            {
                "id": "team-plan",
                "name": "Team Plan",
                "category": "subscription",
                "price": 49.0,
                "features": "team_collaboration|custom_branding",
                "target_users": "business",
                "description": "Shared workspaces",
                "compatibility": "qr_generation",
                "rating": 4.3,
                "popularity": 0.9,
            },
            {
                "id": "print-kit",
                "name": "Print Kit",
                "category": "templates",
                "price": 12.0,
                "features": "print_layouts",
                "target_users": "",
                "description": "Print-ready layouts",
                "compatibility": "custom_branding",
                "rating": 4.8,
                "popularity": 0.2,
            },
        ]
    ).to_csv(csv_path, index=False)


def test_service_loads_configured_catalog(tmp_path, clock):
    """Test that a service configured with a catalog CSV recommends from it."""
    csv_path = tmp_path / "catalog.csv"
    write_catalog(csv_path)
    config = load_config({"QRREC_CATALOG_PATH": str(csv_path)})

    service = RecommendationService(config=config, clock=clock)
    service.start()

    assert [p.id for p in service.catalog.all()] == ["team-plan", "print-kit"]
    assert service.get_product("qr-pro-plus") is None
    assert [rec.product.id for rec in service.get_personalized("nobody")] == [
        "team-plan",
        "print-kit",
    ]
    assert [p.id for p in service.get_complementary("team-plan")] == ["print-kit"]


def test_explicit_catalog_wins_over_configured_path(tmp_path, clock):
    config = ServiceConfig(catalog_path=str(tmp_path / "missing.csv"))

    service = RecommendationService(config=config, catalog=ProductCatalog(), clock=clock)

    assert len(service.catalog) == 6


def test_service_with_missing_catalog_file(tmp_path, clock):
    config = ServiceConfig(catalog_path=str(tmp_path / "missing.csv"))

    with pytest.raises(FileNotFoundError):
        RecommendationService(config=config, clock=clock)


def test_api_serves_configured_catalog(tmp_path, clock):
    csv_path = tmp_path / "catalog.csv"
    write_catalog(csv_path)
    service = RecommendationService(config=ServiceConfig(catalog_path=str(csv_path)), clock=clock)

    with TestClient(create_app(service)) as client:
        products = client.get("/products").json()["products"]

    assert [p["id"] for p in products] == ["team-plan", "print-kit"]

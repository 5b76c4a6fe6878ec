"""Catalog endpoints for the QRRec API."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_service
from src.api.exceptions import ProductNotFoundError
from src.api.schemas import ProductListResponse, ProductModel
from src.recommender.service import RecommendationService

router = APIRouter(
    prefix="/products",
    tags=["products"],
)


@router.get("", response_model=ProductListResponse)
def list_products(
    service: RecommendationService = Depends(get_service),
) -> ProductListResponse:
    """Every catalog product in catalog order."""
    return ProductListResponse(
        products=[ProductModel.from_product(p) for p in service.catalog.all()]
    )


@router.get("/{product_id}", response_model=ProductModel)
def get_product(
    product_id: str,
    service: RecommendationService = Depends(get_service),
) -> ProductModel:
    """Look up one product.

    Raises:
        ProductNotFoundError: If ``product_id`` is not in the catalog.
    """
    product = service.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ProductModel.from_product(product)

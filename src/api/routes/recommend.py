"""Recommendation endpoints for the QRRec API.

This module exposes every recommendation generator over HTTP. Static paths
are declared before the ``/{user_id}`` routes so they are matched first.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_metrics, get_service, timed_query
from src.api.metrics import MetricsService
from src.api.schemas import (
    PersonalizedResponse,
    ProductListResponse,
    ProductModel,
    RecordListResponse,
    ScoredProductModel,
)
from src.recommender import feeds
from src.recommender.engine import FREE_PLAN
from src.recommender.models import serialize_record
from src.recommender.service import RecommendationService

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)

MAX_LIMIT = 50


@router.get("/promotions", response_model=RecordListResponse)
def get_promotions(
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> RecordListResponse:
    """Current seasonal promotions."""
    with timed_query(metrics, "promotional"):
        promotions = service.get_promotional_recommendations()
    return RecordListResponse(recommendations=[serialize_record(p) for p in promotions])


@router.get("/category/{category}", response_model=ProductListResponse)
def get_category(
    category: str,
    limit: int = Query(3, ge=1, le=MAX_LIMIT),
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> ProductListResponse:
    """Best-rated products in a category. Unknown categories give an empty list."""
    with timed_query(metrics, "category"):
        products = service.get_category(category, limit)
    return ProductListResponse(products=[ProductModel.from_product(p) for p in products])


@router.get("/complementary/{product_id}", response_model=ProductListResponse)
def get_complementary(
    product_id: str,
    limit: int = Query(3, ge=1, le=MAX_LIMIT),
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> ProductListResponse:
    """Products that work well with ``product_id``. Unknown ids give an empty list."""
    with timed_query(metrics, "complementary"):
        products = service.get_complementary(product_id, limit)
    return ProductListResponse(products=[ProductModel.from_product(p) for p in products])


@router.get("/{user_id}", response_model=PersonalizedResponse)
def get_recommendations(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, le=MAX_LIMIT),
    variant: str = "A",
    explain: bool = False,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> PersonalizedResponse:
    """Get personalized product recommendations for a user.

    Args:
        user_id: User to rank the catalog for.
        limit: Number of recommendations (service default when omitted).
        variant: Experiment variant; ``B`` highlights each recommendation.
        explain: Include the score breakdown per product.

    Example:
        GET /recommend/u-42?limit=3&explain=true
    """
    logger.info(
        "Personalized recommendations requested",
        extra={"user_id": user_id, "limit": limit, "variant": variant},
    )

    with timed_query(metrics, "personalized"):
        recommendations = service.get_test_variant(user_id, variant, limit)

    scores = service.explain(user_id, recommendations=recommendations) if explain else None
    return PersonalizedResponse(
        user_id=user_id,
        recommendations=[ScoredProductModel.from_scored(rec) for rec in recommendations],
        scores=scores,
    )


@router.get("/{user_id}/content", response_model=RecordListResponse)
def get_content(
    user_id: str,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> RecordListResponse:
    with timed_query(metrics, "content"):
        records = service.get_content_recommendations(user_id)
    return RecordListResponse(
        user_id=user_id, recommendations=[serialize_record(r) for r in records]
    )


@router.get("/{user_id}/upsell", response_model=RecordListResponse)
def get_upsell(
    user_id: str,
    plan: str = FREE_PLAN,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> RecordListResponse:
    with timed_query(metrics, "upsell"):
        records = service.get_upsell_recommendations(user_id, plan)
    return RecordListResponse(
        user_id=user_id, recommendations=[serialize_record(r) for r in records]
    )


@router.get("/{user_id}/predictive", response_model=RecordListResponse)
def get_predictive(
    user_id: str,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> RecordListResponse:
    with timed_query(metrics, "predictive"):
        records = service.get_predictive_recommendations(user_id)
    return RecordListResponse(
        user_id=user_id, recommendations=[serialize_record(r) for r in records]
    )


@router.get("/{user_id}/personalized-content", response_model=RecordListResponse)
def get_personalized_content(
    user_id: str,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> RecordListResponse:
    """Content suggestions followed by predictive prompts."""
    with timed_query(metrics, "personalized_content"):
        records = feeds.personalized_content(service, user_id)
    return RecordListResponse(
        user_id=user_id, recommendations=[serialize_record(r) for r in records]
    )


@router.get("/{user_id}/feed", response_model=RecordListResponse)
def get_feed(
    user_id: str,
    context: str = feeds.GENERAL,
    plan: str = FREE_PLAN,
    limit: Optional[int] = Query(None, ge=1, le=MAX_LIMIT),
    include_promotions: bool = True,
    include_upsells: bool = True,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> RecordListResponse:
    """Combined, de-duplicated and capped list for a dashboard context.

    ``limit`` defaults to the service's configured default limit.
    """
    if limit is None:
        limit = service.config.default_limit
    with timed_query(metrics, "feed"):
        records = feeds.build_feed(
            service,
            user_id,
            plan=plan,
            context=context,
            limit=limit,
            include_promotions=include_promotions,
            include_upsells=include_upsells,
        )
    return RecordListResponse(
        user_id=user_id, recommendations=[serialize_record(r) for r in records]
    )

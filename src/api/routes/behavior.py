"""Behavior tracking and user-data endpoints for the QRRec API.

Tracking is fire-and-forget: every call is accepted, including the first one
for a user that has never been seen.
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_metrics, get_service
from src.api.metrics import MetricsService
from src.api.schemas import (
    ExportResponse,
    InteractionRequest,
    ScoredProductModel,
    StatusResponse,
    TrackRequest,
)
from src.recommender import feeds
from src.recommender.service import RecommendationService

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/behavior",
    tags=["behavior"],
)


@router.post(
    "/{user_id}",
    response_model=StatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def track_behavior(
    user_id: str,
    request: TrackRequest,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> StatusResponse:
    """Record one user action.

    Example:
        POST /behavior/u-42 {"action": "qr_created", "data": {"type": "url"}}
    """
    service.track_behavior(user_id, request.action, request.data, timestamp=request.timestamp)
    metrics.record_event()
    return StatusResponse(status="accepted")


@router.post(
    "/{user_id}/interactions",
    response_model=StatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def track_interaction(
    user_id: str,
    request: InteractionRequest,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> StatusResponse:
    """Record that a user accepted or dismissed a recommendation."""
    handler = (
        feeds.accept_recommendation
        if request.event == "accepted"
        else feeds.dismiss_recommendation
    )
    handler(
        service,
        user_id,
        request.recommendation_id,
        request.recommendation_type,
        request.context,
    )
    metrics.record_event()
    return StatusResponse(status="accepted")


@router.get("/{user_id}/export", response_model=ExportResponse)
def export_user_data(
    user_id: str,
    service: RecommendationService = Depends(get_service),
) -> ExportResponse:
    """Data-portability export. Users without history export ``profile: null``."""
    export = service.export_user_data(user_id)
    return ExportResponse(
        user_id=export.user_id,
        profile=export.profile,
        recommendations=[ScoredProductModel.from_scored(rec) for rec in export.recommendations],
        export_date=export.export_date,
    )


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def clear_user_data(
    user_id: str,
    service: RecommendationService = Depends(get_service),
) -> Response:
    """Delete everything tracked for a user. Succeeds for unknown users too."""
    removed = service.clear_user_data(user_id)
    logger.info("User data cleared", extra={"user_id": user_id, "removed": removed})
    return Response(status_code=status.HTTP_204_NO_CONTENT)

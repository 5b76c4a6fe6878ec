"""Smart suggestion endpoints for the QR code editor."""

from typing import List

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_metrics, get_service
from src.api.metrics import MetricsService
from src.api.schemas import ApplySuggestionRequest, StatusResponse, SuggestionRequest
from src.recommender import feeds
from src.recommender.models import serialize_record
from src.recommender.service import RecommendationService

router = APIRouter(
    prefix="/suggestions",
    tags=["suggestions"],
)


@router.post("", response_model=List[dict])
def get_suggestions(request: SuggestionRequest) -> List[dict]:
    """Suggestions for the QR code being edited in ``context``."""
    return [
        serialize_record(suggestion)
        for suggestion in feeds.smart_suggestions(request.context, request.data)
    ]


@router.post(
    "/{suggestion_id}/apply",
    response_model=StatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def apply_suggestion(
    suggestion_id: str,
    request: ApplySuggestionRequest,
    service: RecommendationService = Depends(get_service),
    metrics: MetricsService = Depends(get_metrics),
) -> StatusResponse:
    feeds.apply_suggestion(service, request.user_id, suggestion_id, request.context)
    metrics.record_event()
    return StatusResponse(status="accepted")

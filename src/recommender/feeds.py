"""Context feeds, smart suggestions and interaction tracking.

Dashboard widgets ask for a single bounded list per context. This module
combines generator outputs for each context, drops duplicates, caps the
result, and records accept/dismiss/apply interactions back into the
behavior store.
"""

import logging
from typing import Any, List, Mapping, Optional

from src.recommender.config import DEFAULT_LIMIT
from src.recommender.engine import FREE_PLAN
from src.recommender.models import HIGH, MEDIUM, SmartSuggestion, record_key
from src.recommender.service import RecommendationService

# Configure module logger
logger = logging.getLogger(__name__)

DASHBOARD = "dashboard"
GENERATOR = "generator"
ANALYTICS = "analytics"
UPSELL = "upsell"
PROMOTIONAL = "promotional"
GENERAL = "general"

QR_GENERATOR_CONTEXT = "qr_generator"

RECOMMENDATION_ACCEPTED = "recommendation_accepted"
RECOMMENDATION_DISMISSED = "recommendation_dismissed"
SUGGESTION_APPLIED = "suggestion_applied"


def dedupe(records: List[Any]) -> List[Any]:
    """Drop records whose identity was already seen, keeping the first."""
    seen = set()
    unique = []
    for record in records:
        key = record_key(record)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def build_feed(
    service: RecommendationService,
    user_id: str,
    plan: str = FREE_PLAN,
    context: str = GENERAL,
    limit: int = DEFAULT_LIMIT,
    include_promotions: bool = True,
    include_upsells: bool = True,
) -> List[Any]:
    """Recommendation list for one dashboard context.

    Contexts:
        dashboard: personalized, then upsells and promotions (if enabled).
        generator: top two templates, then content suggestions.
        analytics: best-rated add-ons.
        upsell: upsell offers only.
        promotional: current promotions only.
        anything else: personalized.

    Returns:
        At most ``limit`` de-duplicated records.
    """
    if context == DASHBOARD:
        records: List[Any] = list(service.get_personalized(user_id, limit))
        if include_upsells:
            records += service.get_upsell_recommendations(user_id, plan)
        if include_promotions:
            records += service.get_promotional_recommendations()
    elif context == GENERATOR:
        records = list(service.get_category("templates", 2))
        records += service.get_content_recommendations(user_id)
    elif context == ANALYTICS:
        records = list(service.get_category("addon", limit))
    elif context == UPSELL:
        records = list(service.get_upsell_recommendations(user_id, plan))
    elif context == PROMOTIONAL:
        records = list(service.get_promotional_recommendations())
    else:
        records = list(service.get_personalized(user_id, limit))

    feed = dedupe(records)[: max(limit, 0)]
    logger.debug(
        "Built feed",
        extra={"user_id": user_id, "context": context, "num_records": len(feed)},
    )
    return feed


def personalized_content(service: RecommendationService, user_id: str) -> List[Any]:
    """Content suggestions followed by predictive prompts."""
    return [
        *service.get_content_recommendations(user_id),
        *service.get_predictive_recommendations(user_id),
    ]


def smart_suggestions(
    context: str,
    data: Optional[Mapping[str, Any]] = None,
) -> List[SmartSuggestion]:
    """Suggestions for the QR code currently being edited.

    Only the ``qr_generator`` context produces suggestions.
    """
    if context != QR_GENERATOR_CONTEXT or not data:
        return []

    suggestions = []
    if data.get("type") == "url" and not data.get("analytics"):
        suggestions.append(
            SmartSuggestion(
                id="enable_analytics",
                title="Enable Analytics",
                description="Track scans and user behavior",
                action="analytics",
                priority=HIGH,
            )
        )

    if not data.get("isDynamic"):
        suggestions.append(
            SmartSuggestion(
                id="make_dynamic",
                title="Make Dynamic",
                description="Edit content without reprinting",
                action="dynamic",
                priority=MEDIUM,
            )
        )

    return suggestions


def track_interaction(
    service: RecommendationService,
    user_id: str,
    action: str,
    recommendation_id: Optional[str],
    recommendation_type: Optional[str],
    context: str = GENERAL,
) -> None:
    """Record a user's reaction to a recommendation as tracked behavior."""
    service.track_behavior(
        user_id,
        action,
        {
            "recommendationId": recommendation_id,
            "type": recommendation_type,
            "context": context,
        },
    )


def accept_recommendation(
    service: RecommendationService,
    user_id: str,
    recommendation_id: Optional[str],
    recommendation_type: Optional[str],
    context: str = GENERAL,
) -> None:
    track_interaction(
        service, user_id, RECOMMENDATION_ACCEPTED, recommendation_id, recommendation_type, context
    )


def dismiss_recommendation(
    service: RecommendationService,
    user_id: str,
    recommendation_id: Optional[str],
    recommendation_type: Optional[str],
    context: str = GENERAL,
) -> None:
    track_interaction(
        service, user_id, RECOMMENDATION_DISMISSED, recommendation_id, recommendation_type, context
    )


def apply_suggestion(
    service: RecommendationService,
    user_id: str,
    suggestion_id: str,
    context: str = QR_GENERATOR_CONTEXT,
) -> None:
    service.track_behavior(
        user_id,
        SUGGESTION_APPLIED,
        {"suggestionId": suggestion_id, "context": context},
    )

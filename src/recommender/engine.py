"""Recommendation generators.

Turns catalog + behavior state into recommendation lists. Ranked generators
(personalized, category, complementary) order catalog products; rule-based
generators (content, upsell, promotional, predictive) emit fixed offers when
their conditions hold.

Every generator is total: unknown users, unknown products and empty
profiles degrade to a documented fallback instead of raising.
"""

import logging
import time
from dataclasses import replace
from datetime import date, timedelta
from typing import Any, List, Optional

from src.recommender.behavior import QR_CREATED, UserBehaviorProfile, UserBehaviorStore
from src.recommender.catalog import Product, ProductCatalog
from src.recommender.clock import SystemClock
from src.recommender.config import DEFAULT_INACTIVITY_DAYS, DEFAULT_LIMIT
from src.recommender.models import (
    HIGH,
    MEDIUM,
    ContentRecommendation,
    PredictiveRecommendation,
    PromotionalRecommendation,
    ScoredProduct,
    UpsellRecommendation,
)
from src.recommender.scoring import (
    REASON_POPULAR,
    compute_score,
    rank_descending,
    select_reason,
)

# Configure module logger
logger = logging.getLogger(__name__)

FREE_PLAN = "free"
PRO_PRODUCT_ID = "qr-pro-plus"
ANALYTICS_PRODUCT_ID = "analytics-dashboard"

# Upsell thresholds
UPGRADE_QR_COUNT = 10
ANALYTICS_ADDON_USES = 5
TEAM_COLLABORATION_USES = 3

# Predictive thresholds
POWER_USER_ACTIONS = 20

# Promotion months
HOLIDAY_MONTHS = (11, 12)
BACK_TO_SCHOOL_MONTHS = (8, 9)
STUDENT_CODE = "STUDENT30"

VARIANT_HIGHLIGHT = "B"
HIGHLIGHT_PREFIX = "✨ "


def _top(products: List[Product], key: str, limit: int) -> List[Product]:
    order = rank_descending([getattr(product, key) for product in products])
    return [products[idx] for idx in order[: max(limit, 0)]]


class RecommendationEngine:
    """Recommendation generators over a catalog and a behavior store.

    Args:
        catalog: Product catalog to recommend from.
        store: Behavior store holding user profiles.
        clock: Time source for promotions and inactivity checks.
        inactivity_days: Days without activity before a retention prompt.
    """

    def __init__(
        self,
        catalog: ProductCatalog,
        store: UserBehaviorStore,
        clock: Optional[Any] = None,
        inactivity_days: int = DEFAULT_INACTIVITY_DAYS,
    ):
        self.catalog = catalog
        self.store = store
        self.clock = clock or SystemClock()
        self.inactivity_days = inactivity_days

    # ----- ranked generators -----

    def popular(self, limit: int = DEFAULT_LIMIT) -> List[ScoredProduct]:
        """Most popular products; the fallback for users without a profile."""
        products = _top(list(self.catalog.all()), "popularity", limit)
        return [
            ScoredProduct(
                product=product,
                score=compute_score(product, None).total,
                reason=REASON_POPULAR,
                method="popular",
            )
            for product in products
        ]

    def personalized(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[ScoredProduct]:
        """Score every catalog product for a user and return the top ``limit``.

        Users without a profile get the popularity ranking instead.
        """
        start_time = time.time()
        profile = self.store.get(user_id)

        if profile is None:
            logger.info(
                "No behavior profile, using popularity fallback",
                extra={"user_id": user_id, "strategy": "popular"},
            )
            return self.popular(limit)

        return self._rank_for_profile(profile, limit, start_time)

    def _rank_for_profile(
        self,
        profile: UserBehaviorProfile,
        limit: int,
        start_time: float,
    ) -> List[ScoredProduct]:
        products = list(self.catalog.all())
        scores = [compute_score(product, profile).total for product in products]
        order = rank_descending(scores)[: max(limit, 0)]

        recommendations = [
            ScoredProduct(
                product=products[idx],
                score=scores[idx],
                reason=select_reason(products[idx], profile),
            )
            for idx in order
        ]

        logger.info(
            "Personalized recommendations generated",
            extra={
                "user_id": profile.user_id,
                "num_recommendations": len(recommendations),
                "total_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return recommendations

    def category(self, category: str, limit: int = 3) -> List[Product]:
        """Products in ``category``, best rated first."""
        category_value = getattr(category, "value", category)
        matches = [
            product
            for product in self.catalog.all()
            if product.category.value == category_value
        ]
        return _top(matches, "rating", limit)

    def complementary(self, product_id: str, limit: int = 3) -> List[Product]:
        """Products whose compatibility tags overlap the base product's features.

        Returns an empty list when ``product_id`` is not in the catalog.
        """
        base = self.catalog.get(product_id)
        if base is None:
            logger.debug("Unknown base product", extra={"product_id": product_id})
            return []

        base_features = set(base.features)
        matches = [
            product
            for product in self.catalog.all()
            if product.id != product_id and base_features.intersection(product.compatibility)
        ]
        return _top(matches, "rating", limit)

    def test_variant(
        self,
        user_id: str,
        variant: str = "A",
        limit: int = DEFAULT_LIMIT,
    ) -> List[ScoredProduct]:
        """Personalized list as shown to an experiment variant.

        Variant ``B`` prefixes each reason and sets ``highlight``; any other
        variant gets the base list.
        """
        base = self.personalized(user_id, limit)
        if variant != VARIANT_HIGHLIGHT:
            return base
        return [
            replace(rec, reason=f"{HIGHLIGHT_PREFIX}{rec.reason}", highlight=True)
            for rec in base
        ]

    # ----- rule-based generators -----

    def content(self, user_id: str) -> List[ContentRecommendation]:
        """Tutorials for features the user has not discovered yet."""
        profile = self.store.get(user_id)
        recommendations: List[ContentRecommendation] = []

        if profile is not None and profile.preferences.features:
            features = profile.preferences.features

            if features.get("qr_generation") and not features.get("analytics"):
                recommendations.append(
                    ContentRecommendation(
                        type="tutorial",
                        title="Understanding QR Code Analytics",
                        description="Learn how to track and analyze your QR code performance",
                        url="/tutorials/analytics-basics",
                        priority=HIGH,
                    )
                )

            if features.get("qr_generation") and not features.get("bulk_generation"):
                recommendations.append(
                    ContentRecommendation(
                        type="tutorial",
                        title="Bulk QR Code Generation",
                        description="Save time by creating multiple QR codes at once",
                        url="/tutorials/bulk-generation",
                        priority=MEDIUM,
                    )
                )

        recommendations.append(
            ContentRecommendation(
                type="feature",
                title="Try Dynamic QR Codes",
                description="Edit your QR code content without reprinting",
                action="create_dynamic_qr",
                priority=HIGH,
            )
        )
        return recommendations

    def upsell(self, user_id: str, plan: str = FREE_PLAN) -> List[UpsellRecommendation]:
        """Upgrade offers driven by plan tier and usage counters."""
        profile = self.store.get(user_id)
        recommendations: List[UpsellRecommendation] = []
        if profile is None:
            return recommendations

        qr_count = profile.count(QR_CREATED)
        analytics_usage = profile.preferences.features.get("analytics", 0)
        team_usage = profile.preferences.features.get("team_collaboration", 0)

        if plan == FREE_PLAN:
            if qr_count >= UPGRADE_QR_COUNT:
                recommendations.append(
                    UpsellRecommendation(
                        type="upgrade",
                        title="Upgrade to Pro",
                        description="You've created many QR codes! Upgrade for unlimited generation",
                        product=PRO_PRODUCT_ID,
                        urgency=HIGH,
                        savings="Save 20% on your first month",
                    )
                )

            if analytics_usage >= ANALYTICS_ADDON_USES:
                recommendations.append(
                    UpsellRecommendation(
                        type="addon",
                        title="Advanced Analytics",
                        description="Get deeper insights with our analytics dashboard",
                        product=ANALYTICS_PRODUCT_ID,
                        urgency=MEDIUM,
                    )
                )

        if team_usage >= TEAM_COLLABORATION_USES:
            recommendations.append(
                UpsellRecommendation(
                    type="upgrade",
                    title="Team Collaboration",
                    description="Upgrade to enable team features and shared workspaces",
                    product=PRO_PRODUCT_ID,
                    urgency=MEDIUM,
                )
            )

        logger.debug(
            "Upsell evaluation",
            extra={
                "user_id": user_id,
                "plan": plan,
                "qr_count": qr_count,
                "num_recommendations": len(recommendations),
            },
        )
        return recommendations

    def promotional(self) -> List[PromotionalRecommendation]:
        """Seasonal promotions for the current month."""
        now = self.clock.now()
        recommendations: List[PromotionalRecommendation] = []

        if now.month in HOLIDAY_MONTHS:
            recommendations.append(
                PromotionalRecommendation(
                    type="promotion",
                    title="Holiday Special: 50% Off Pro Plans",
                    description="Limited time offer for the holiday season",
                    product=PRO_PRODUCT_ID,
                    discount=50,
                    expires=date(now.year, 12, 31),
                )
            )

        if now.month in BACK_TO_SCHOOL_MONTHS:
            recommendations.append(
                PromotionalRecommendation(
                    type="promotion",
                    title="Back to School: Student Discount",
                    description="30% off for students and educators",
                    product=PRO_PRODUCT_ID,
                    discount=30,
                    code=STUDENT_CODE,
                )
            )

        return recommendations

    def predictive(self, user_id: str) -> List[PredictiveRecommendation]:
        """Retention and feature-adoption prompts. Empty without a profile."""
        profile = self.store.get(user_id)
        if profile is None:
            return []

        predictions: List[PredictiveRecommendation] = []

        inactive_for = self.clock.now() - profile.last_active
        if inactive_for > timedelta(days=self.inactivity_days):
            predictions.append(
                PredictiveRecommendation(
                    type="retention",
                    title="Welcome Back!",
                    description="Check out what's new since your last visit",
                    action="show_recent_features",
                    priority=HIGH,
                )
            )

        if (
            profile.total_actions >= POWER_USER_ACTIONS
            and not profile.preferences.features.get("analytics")
        ):
            predictions.append(
                PredictiveRecommendation(
                    type="feature_adoption",
                    title="Unlock Analytics",
                    description="You're a power user! See how your QR codes perform",
                    action="enable_analytics",
                    priority=MEDIUM,
                )
            )

        return predictions

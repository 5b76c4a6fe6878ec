"""Recommendation service.

``RecommendationService`` owns one catalog, one behavior store and one
engine for the lifetime of a process. It is built explicitly (usually from a
``ServiceConfig``) and handed to whatever serves requests; ``start()`` and
``shutdown()`` restore and persist behavior snapshots when one is configured.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from src.recommender.behavior import ActionRecord, UserBehaviorProfile, UserBehaviorStore
from src.recommender.catalog import Product, ProductCatalog, load_catalog_csv
from src.recommender.clock import SystemClock
from src.recommender.config import ServiceConfig
from src.recommender.engine import FREE_PLAN, RecommendationEngine
from src.recommender.models import (
    ContentRecommendation,
    PredictiveRecommendation,
    PromotionalRecommendation,
    ScoredProduct,
    UpsellRecommendation,
    UserDataExport,
)
from src.recommender.persistence import check_snapshot_exists, load_snapshot, save_snapshot
from src.recommender.scoring import compute_score

# Configure module logger
logger = logging.getLogger(__name__)


class RecommendationService:
    """Facade over the catalog, behavior store and recommendation engine."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        catalog: Optional[ProductCatalog] = None,
        clock: Optional[Any] = None,
    ):
        self.config = config or ServiceConfig()
        self.clock = clock or SystemClock()
        if catalog is None and self.config.catalog_path:
            catalog = load_catalog_csv(self.config.catalog_path)
        self.catalog = catalog if catalog is not None else ProductCatalog()
        self.store = UserBehaviorStore(
            clock=self.clock,
            max_actions_per_user=self.config.max_actions_per_user,
        )
        self.engine = RecommendationEngine(
            catalog=self.catalog,
            store=self.store,
            clock=self.clock,
            inactivity_days=self.config.inactivity_days,
        )
        self.started = False

    # ----- lifecycle -----

    def start(self) -> None:
        """Restore the configured behavior snapshot, if there is one.

        Calling ``start`` on a running service does nothing.
        """
        if self.started:
            logger.debug("Recommendation service already started")
            return

        snapshot_path = self.config.snapshot_path
        if snapshot_path and check_snapshot_exists(snapshot_path):
            self.store.restore(load_snapshot(snapshot_path))
        elif snapshot_path:
            logger.info(f"No behavior snapshot at {snapshot_path}, starting empty")

        self.started = True
        logger.info(
            "Recommendation service started",
            extra={"num_products": len(self.catalog), "num_users": len(self.store)},
        )

    def shutdown(self) -> None:
        """Persist behavior state to the configured snapshot, if any.

        Does nothing unless the service was started.
        """
        if not self.started:
            return

        if self.config.snapshot_path:
            save_snapshot(self.store, self.config.snapshot_path)
        self.started = False
        logger.info("Recommendation service stopped")

    def save_snapshot(self, snapshot_path: Optional[str] = None) -> int:
        path = snapshot_path or self.config.snapshot_path
        if not path:
            raise ValueError("No snapshot path configured")
        return save_snapshot(self.store, path)

    def load_snapshot(self, snapshot_path: Optional[str] = None) -> int:
        path = snapshot_path or self.config.snapshot_path
        if not path:
            raise ValueError("No snapshot path configured")
        profiles = load_snapshot(path)
        self.store.restore(profiles)
        return len(profiles)

    # ----- tracking -----

    def track_behavior(
        self,
        user_id: str,
        action: str,
        data: Optional[Mapping[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> ActionRecord:
        return self.store.track(user_id, action, data, timestamp=timestamp)

    def get_profile(self, user_id: str) -> Optional[UserBehaviorProfile]:
        return self.store.get(user_id)

    def clear_user_data(self, user_id: str) -> bool:
        return self.store.clear(user_id)

    def export_user_data(self, user_id: str, limit: Optional[int] = None) -> UserDataExport:
        """Profile snapshot plus current recommendations for a user.

        Users without tracked history export with ``profile=None``.
        """
        profile = self.store.get(user_id)
        export = UserDataExport(
            user_id=user_id,
            profile=profile.to_dict() if profile is not None else None,
            recommendations=self.get_personalized(user_id, limit),
            export_date=self.clock.now(),
        )
        logger.info(
            "Exported user data",
            extra={"user_id": user_id, "has_profile": profile is not None},
        )
        return export

    # ----- recommendations -----

    def _limit(self, limit: Optional[int]) -> int:
        return self.config.default_limit if limit is None else limit

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.catalog.get(product_id)

    def get_personalized(self, user_id: str, limit: Optional[int] = None) -> List[ScoredProduct]:
        return self.engine.personalized(user_id, self._limit(limit))

    def get_test_variant(
        self,
        user_id: str,
        variant: str = "A",
        limit: Optional[int] = None,
    ) -> List[ScoredProduct]:
        return self.engine.test_variant(user_id, variant, self._limit(limit))

    def get_category(self, category: str, limit: int = 3) -> List[Product]:
        return self.engine.category(category, limit)

    def get_complementary(self, product_id: str, limit: int = 3) -> List[Product]:
        return self.engine.complementary(product_id, limit)

    def get_content_recommendations(self, user_id: str) -> List[ContentRecommendation]:
        return self.engine.content(user_id)

    def get_upsell_recommendations(
        self,
        user_id: str,
        plan: str = FREE_PLAN,
    ) -> List[UpsellRecommendation]:
        return self.engine.upsell(user_id, plan)

    def get_promotional_recommendations(self) -> List[PromotionalRecommendation]:
        return self.engine.promotional()

    def get_predictive_recommendations(self, user_id: str) -> List[PredictiveRecommendation]:
        return self.engine.predictive(user_id)

    def explain(
        self,
        user_id: str,
        limit: Optional[int] = None,
        recommendations: Optional[List[ScoredProduct]] = None,
    ) -> Dict[str, Dict[str, float]]:
        """Score breakdown for the user's personalized list.

        Pass ``recommendations`` to explain a list that was already returned;
        the breakdown then covers exactly those products.
        """
        if recommendations is None:
            recommendations = self.get_personalized(user_id, limit)
        profile = self.store.get(user_id)
        return {
            rec.product.id: compute_score(rec.product, profile).to_dict()
            for rec in recommendations
        }

"""Relevance scoring for (product, behavior profile) pairs.

Score formula (weighted sum, approximate range 0-1)
--------------------------------------------------
    total = (
        popularity              * 0.30   # catalog prior
        + feature_overlap       * 0.40   # product features the user already uses
        + qr_type_compatibility * 0.20   # QR types that map to the product category
        + activity_level        * 0.10   # how much the user does overall
    )

feature_overlap (0-1):
    Product features present as keys of the user's feature counters, divided
    by the number of product features.

qr_type_compatibility (0-1):
    For each QR type the user has created whose entry in
    ``QR_TYPE_CATEGORY_COMPATIBILITY`` contains the product category, add
    usage_count / 10. Clamped to 1.0.

activity_level (0-1):
    total tracked actions / 100, clamped to 1.0.

Without a profile every behavioral term is zero, so the score is exactly
``popularity * 0.3``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence

import numpy as np

from src.recommender.behavior import UserBehaviorProfile
from src.recommender.catalog import Product

# Configure module logger
logger = logging.getLogger(__name__)

POPULARITY_WEIGHT = 0.30
FEATURE_WEIGHT = 0.40
QR_TYPE_WEIGHT = 0.20
ACTIVITY_WEIGHT = 0.10

QR_TYPE_USAGE_NORMALIZER = 10
ACTIVITY_NORMALIZER = 100

# QR type -> product categories it suggests. "analytics", "white-label" and
# "api" match no seeded category; kept as-is.
QR_TYPE_CATEGORY_COMPATIBILITY: Dict[str, FrozenSet[str]] = {
    "url": frozenset({"subscription", "analytics", "templates"}),
    "business": frozenset({"enterprise", "white-label", "api"}),
    "bulk": frozenset({"subscription", "api", "enterprise"}),
}

# Categories treated as analytics products for the URL tracking reason
ANALYTICS_LIKE_CATEGORIES: FrozenSet[str] = frozenset({"analytics", "addon"})

HIGH_RATING_THRESHOLD = 4.5
POPULAR_THRESHOLD = 0.7

REASON_FEATURE = "Based on your use of {feature}"
REASON_URL_TRACKING = "Perfect for tracking URL QR codes"
REASON_HIGHLY_RATED = "Highly rated by users"
REASON_POPULAR = "Popular choice"
REASON_DEFAULT = "Recommended for you"


@dataclass(frozen=True)
class ScoreComponents:
    """All components of a relevance score.

    Attributes:
        popularity:            Catalog prior, 0-1.
        feature_overlap:       Share of product features the user uses, 0-1.
        qr_type_compatibility: Clamped QR type affinity, 0-1.
        activity_level:        Clamped activity, 0-1.
    """

    popularity: float
    feature_overlap: float
    qr_type_compatibility: float
    activity_level: float

    @property
    def total(self) -> float:
        """Weighted total score."""
        return (
            self.popularity * POPULARITY_WEIGHT
            + self.feature_overlap * FEATURE_WEIGHT
            + self.qr_type_compatibility * QR_TYPE_WEIGHT
            + self.activity_level * ACTIVITY_WEIGHT
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "popularity": self.popularity,
            "feature_overlap": self.feature_overlap,
            "qr_type_compatibility": self.qr_type_compatibility,
            "activity_level": self.activity_level,
            "total": self.total,
        }


def _category_value(product: Product) -> str:
    return getattr(product.category, "value", product.category)


def matching_features(product: Product, profile: UserBehaviorProfile) -> List[str]:
    """Product features the user has used, in the product's listed order."""
    used = profile.preferences.features
    return [feature for feature in product.features if used.get(feature)]


def feature_overlap_ratio(product: Product, profile: Optional[UserBehaviorProfile]) -> float:
    if profile is None or not profile.preferences.features or not product.features:
        return 0.0
    return len(matching_features(product, profile)) / len(product.features)


def qr_type_compatibility(product: Product, qr_types: Dict[str, int]) -> float:
    """QR type affinity for a product category, clamped to [0, 1]."""
    category = _category_value(product)
    compatibility = 0.0
    for qr_type, usage_count in qr_types.items():
        categories = QR_TYPE_CATEGORY_COMPATIBILITY.get(qr_type)
        if categories is not None and category in categories:
            compatibility += usage_count / QR_TYPE_USAGE_NORMALIZER
    return min(max(compatibility, 0.0), 1.0)


def activity_level(profile: Optional[UserBehaviorProfile]) -> float:
    if profile is None:
        return 0.0
    return min(profile.total_actions / ACTIVITY_NORMALIZER, 1.0)


def compute_score(
    product: Product,
    profile: Optional[UserBehaviorProfile],
) -> ScoreComponents:
    """Compute all score components for one product.

    Args:
        product: Catalog product to score.
        profile: The user's behavior profile, or None for an unknown user.

    Returns:
        ScoreComponents; ``.total`` is the ranking score.
    """
    if profile is None:
        return ScoreComponents(
            popularity=product.popularity,
            feature_overlap=0.0,
            qr_type_compatibility=0.0,
            activity_level=0.0,
        )

    return ScoreComponents(
        popularity=product.popularity,
        feature_overlap=feature_overlap_ratio(product, profile),
        qr_type_compatibility=qr_type_compatibility(product, profile.preferences.qr_types),
        activity_level=activity_level(profile),
    )


def select_reason(product: Product, profile: Optional[UserBehaviorProfile]) -> str:
    """Pick the single best justification for recommending ``product``."""
    if profile is not None:
        matches = matching_features(product, profile)
        if matches:
            return REASON_FEATURE.format(feature=matches[0].replace("_", " "))

        if (
            profile.preferences.top_qr_type() == "url"
            and _category_value(product) in ANALYTICS_LIKE_CATEGORIES
        ):
            return REASON_URL_TRACKING

    if product.rating >= HIGH_RATING_THRESHOLD:
        return REASON_HIGHLY_RATED
    if product.popularity >= POPULAR_THRESHOLD:
        return REASON_POPULAR
    return REASON_DEFAULT


def rank_descending(values: Sequence[float]) -> List[int]:
    """Indices of ``values`` from highest to lowest.

    Equal values keep their input order, so catalog order breaks ties.
    """
    if len(values) == 0:
        return []
    order = np.argsort(-np.asarray(values, dtype=float), kind="stable")
    return [int(idx) for idx in order]

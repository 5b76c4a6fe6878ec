"""Tests for relevance scoring.

Covers the score components, the weighted total, reason selection and the
stable ranking helper.
"""

from dataclasses import replace

import pytest

from src.recommender.scoring import (
    REASON_DEFAULT,
    REASON_HIGHLY_RATED,
    REASON_URL_TRACKING,
    ScoreComponents,
    activity_level,
    compute_score,
    feature_overlap_ratio,
    qr_type_compatibility,
    rank_descending,
    select_reason,
)


def test_score_without_profile_is_popularity_prior(catalog):
    """Test that an unknown user is scored on popularity alone."""
    for product in catalog:
        components = compute_score(product, None)
        assert components.total == pytest.approx(product.popularity * 0.3)
        assert components.feature_overlap == 0.0
        assert components.qr_type_compatibility == 0.0
        assert components.activity_level == 0.0


def test_weights_sum_to_one():
    assert ScoreComponents(1.0, 1.0, 1.0, 1.0).total == pytest.approx(1.0)


def test_url_creator_scores(catalog, store, track_many):
    """Test the weighted total for a user who created ten URL codes."""
    track_many("u1", "qr_created", {"type": "url"}, 10)
    profile = store.get("u1")

    expected = {
        "qr-pro-plus": 0.465,
        "design-templates": 0.387,
        "analytics-dashboard": 0.226,
        "mobile-app": 0.214,
        "white-label-solution": 0.145,
        "api-integration": 0.133,
    }
    for product_id, score in expected.items():
        assert compute_score(catalog.get(product_id), profile).total == pytest.approx(score)


def test_feature_overlap_ratio(catalog, store):
    store.track("u1", "feature_used", {"feature": "custom_branding"})
    store.track("u1", "feature_used", {"feature": "api_access"})
    profile = store.get("u1")

    assert feature_overlap_ratio(catalog.get("qr-pro-plus"), profile) == pytest.approx(0.5)
    assert feature_overlap_ratio(catalog.get("white-label-solution"), profile) == pytest.approx(
        1 / 3
    )
    assert feature_overlap_ratio(catalog.get("mobile-app"), profile) == 0.0


def test_qr_type_compatibility_is_clamped(catalog):
    assert qr_type_compatibility(catalog.get("qr-pro-plus"), {"url": 25}) == 1.0
    assert qr_type_compatibility(catalog.get("qr-pro-plus"), {"url": 3}) == pytest.approx(0.3)


def test_qr_type_compatibility_sums_types(catalog):
    # Both url and bulk map to subscription
    score = qr_type_compatibility(catalog.get("qr-pro-plus"), {"url": 2, "bulk": 3})
    assert score == pytest.approx(0.5)


def test_business_codes_match_enterprise_only(catalog):
    """Test that the business mapping reaches enterprise but not developer products."""
    qr_types = {"business": 10}

    assert qr_type_compatibility(catalog.get("white-label-solution"), qr_types) == 1.0
    assert qr_type_compatibility(catalog.get("api-integration"), qr_types) == 0.0


def test_unknown_qr_type_contributes_nothing(catalog):
    assert qr_type_compatibility(catalog.get("qr-pro-plus"), {"wifi": 50}) == 0.0


def test_activity_level_clamped(store, track_many):
    assert activity_level(None) == 0.0

    track_many("u1", "page_visited", {"page": "home"}, 150)
    assert activity_level(store.get("u1")) == 1.0


def test_reason_uses_first_matching_feature(catalog, store):
    store.track("u1", "feature_used", {"feature": "api_access"})
    store.track("u1", "feature_used", {"feature": "custom_branding"})
    profile = store.get("u1")

    # Product feature order decides, not tracking order
    assert (
        select_reason(catalog.get("qr-pro-plus"), profile)
        == "Based on your use of custom branding"
    )


def test_reason_replaces_every_underscore(catalog, store):
    store.track("u1", "feature_used", {"feature": "real_time_analytics"})

    reason = select_reason(catalog.get("analytics-dashboard"), store.get("u1"))

    assert reason == "Based on your use of real time analytics"


def test_reason_for_url_creators(catalog, store, track_many):
    track_many("u1", "qr_created", {"type": "url"}, 3)
    profile = store.get("u1")

    assert select_reason(catalog.get("analytics-dashboard"), profile) == REASON_URL_TRACKING
    assert select_reason(catalog.get("qr-pro-plus"), profile) == REASON_HIGHLY_RATED


def test_reason_fallbacks(catalog):
    assert select_reason(catalog.get("white-label-solution"), None) == REASON_HIGHLY_RATED
    assert select_reason(catalog.get("mobile-app"), None) == REASON_DEFAULT


def test_reason_popular_choice(catalog):
    product = replace(catalog.get("mobile-app"), rating=3.0, popularity=0.75)
    assert select_reason(product, None) == "Popular choice"


def test_rank_descending_keeps_input_order_for_ties():
    assert rank_descending([0.2, 0.5, 0.2, 0.5]) == [1, 3, 0, 2]
    assert rank_descending([]) == []

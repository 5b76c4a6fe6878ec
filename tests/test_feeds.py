"""Tests for context feeds, smart suggestions and interaction tracking."""

from datetime import datetime, timezone

import pytest

from src.recommender import feeds
from src.recommender.catalog import Product
from src.recommender.clock import FixedClock
from src.recommender.config import ServiceConfig
from src.recommender.models import ContentRecommendation, ScoredProduct, UpsellRecommendation
from src.recommender.service import RecommendationService


def december_service():
    clock = FixedClock(datetime(2025, 12, 10, tzinfo=timezone.utc))
    return RecommendationService(config=ServiceConfig(), clock=clock)


def test_dashboard_feed_combines_generators():
    service = december_service()
    for _ in range(10):
        service.track_behavior("u1", "qr_created", {"type": "url"})

    feed = feeds.build_feed(service, "u1", plan="free", context="dashboard", limit=10)

    kinds = [type(record).KIND for record in feed]
    assert kinds == ["scored_product"] * 6 + ["upsell", "promotion"]
    assert feed[6].title == "Upgrade to Pro"
    assert feed[7].discount == 50


def test_dashboard_feed_is_capped():
    service = december_service()

    feed = feeds.build_feed(service, "u1", context="dashboard", limit=3)

    assert len(feed) == 3
    assert all(isinstance(record, ScoredProduct) for record in feed)


def test_dashboard_feed_can_skip_promotions_and_upsells():
    service = december_service()
    for _ in range(10):
        service.track_behavior("u1", "qr_created", {"type": "url"})

    feed = feeds.build_feed(
        service,
        "u1",
        context="dashboard",
        limit=10,
        include_promotions=False,
        include_upsells=False,
    )

    assert all(isinstance(record, ScoredProduct) for record in feed)


def test_generator_feed(service):
    feed = feeds.build_feed(service, "nobody", context="generator", limit=5)

    assert isinstance(feed[0], Product)
    assert feed[0].id == "design-templates"
    assert isinstance(feed[1], ContentRecommendation)
    assert feed[1].title == "Try Dynamic QR Codes"


def test_analytics_feed_lists_addons(service):
    feed = feeds.build_feed(service, "nobody", context="analytics")

    assert [product.id for product in feed] == ["analytics-dashboard"]


def test_upsell_feed(service):
    for _ in range(5):
        service.track_behavior("u1", "feature_used", {"feature": "analytics"})

    feed = feeds.build_feed(service, "u1", context="upsell")

    assert len(feed) == 1
    assert isinstance(feed[0], UpsellRecommendation)


def test_promotional_feed_outside_season_is_empty(service):
    assert feeds.build_feed(service, "u1", context="promotional") == []


def test_unknown_context_falls_back_to_personalized(service):
    feed = feeds.build_feed(service, "nobody", context="sidebar", limit=2)

    assert [rec.product.id for rec in feed] == ["qr-pro-plus", "analytics-dashboard"]


def test_dedupe_keeps_first_occurrence(service):
    first = service.get_personalized("nobody", 2)
    again = service.get_personalized("nobody", 3)

    unique = feeds.dedupe(first + again)

    assert [rec.product.id for rec in unique] == [
        "qr-pro-plus",
        "analytics-dashboard",
        "mobile-app",
    ]


def test_personalized_content_appends_predictions(service, clock):
    service.track_behavior("u1", "feature_used", {"feature": "qr_generation"})
    clock.advance(days=10)

    titles = [record.title for record in feeds.personalized_content(service, "u1")]

    assert titles == [
        "Understanding QR Code Analytics",
        "Bulk QR Code Generation",
        "Try Dynamic QR Codes",
        "Welcome Back!",
    ]


def test_smart_suggestions_for_static_url_code():
    suggestions = feeds.smart_suggestions("qr_generator", {"type": "url", "analytics": False})

    assert [s.id for s in suggestions] == ["enable_analytics", "make_dynamic"]
    assert suggestions[0].priority == "high"
    assert suggestions[1].priority == "medium"


def test_smart_suggestions_for_dynamic_code_with_analytics():
    data = {"type": "url", "analytics": True, "isDynamic": True}

    assert feeds.smart_suggestions("qr_generator", data) == []


@pytest.mark.parametrize(
    "context, data",
    [
        ("dashboard", {"type": "url"}),
        ("qr_generator", None),
        ("qr_generator", {}),
    ],
)
def test_smart_suggestions_need_generator_context_and_data(context, data):
    assert feeds.smart_suggestions(context, data) == []


def test_accept_and_dismiss_are_tracked(service):
    feeds.accept_recommendation(service, "u1", "qr-pro-plus", "product", "dashboard")
    feeds.dismiss_recommendation(service, "u1", "analytics-dashboard", "product")

    profile = service.get_profile("u1")
    assert profile.count("recommendation_accepted") == 1
    assert profile.count("recommendation_dismissed") == 1
    accepted = profile.actions[0]
    assert accepted.data == {
        "recommendationId": "qr-pro-plus",
        "type": "product",
        "context": "dashboard",
    }
    assert profile.actions[1].data["context"] == "general"


def test_apply_suggestion_is_tracked(service):
    feeds.apply_suggestion(service, "u1", "make_dynamic")

    record = service.get_profile("u1").actions[0]
    assert record.action == "suggestion_applied"
    assert record.data == {"suggestionId": "make_dynamic", "context": "qr_generator"}

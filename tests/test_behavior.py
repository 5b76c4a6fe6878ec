"""Tests for user behavior tracking."""

import threading
from datetime import datetime, timedelta, timezone

from src.recommender.behavior import UserBehaviorStore
from src.recommender.clock import FixedClock


def test_get_unknown_user_returns_none(store):
    assert store.get("nobody") is None
    assert "nobody" not in store


def test_first_track_creates_profile(store, clock):
    store.track("u1", "page_visited", {"page": "dashboard"})

    profile = store.get("u1")
    assert profile is not None
    assert profile.total_actions == 1
    assert profile.last_active == clock.now()
    assert profile.preferences.pages == {"dashboard": 1}


def test_preference_counters_follow_actions(store):
    store.track("u1", "qr_created", {"type": "url"})
    store.track("u1", "qr_created", {"type": "url"})
    store.track("u1", "qr_created", {"type": "business"})
    store.track("u1", "feature_used", {"feature": "analytics"})
    store.track("u1", "page_visited", {"page": "templates"})
    store.track("u1", "something_else", {"foo": "bar"})

    profile = store.get("u1")
    assert profile.preferences.qr_types == {"url": 2, "business": 1}
    assert profile.preferences.features == {"analytics": 1}
    assert profile.preferences.pages == {"templates": 1}
    assert profile.count("qr_created") == 3
    assert profile.count("something_else") == 1
    assert profile.total_actions == 6


def test_viewed_products_are_deduplicated(store):
    for product_id in ["mobile-app", "qr-pro-plus", "mobile-app"]:
        store.track("u1", "product_viewed", {"productId": product_id})

    profile = store.get("u1")
    assert profile.preferences.viewed_products == ["mobile-app", "qr-pro-plus"]
    # Every call is still logged
    assert len(profile.actions) == 3


def test_missing_data_key_still_logs_action(store):
    store.track("u1", "qr_created", {})
    store.track("u1", "feature_used")

    profile = store.get("u1")
    assert profile.total_actions == 2
    assert profile.preferences.qr_types == {}
    assert profile.preferences.features == {}


def test_get_returns_independent_copy(store):
    store.track("u1", "feature_used", {"feature": "analytics"})

    snapshot = store.get("u1")
    snapshot.preferences.features["analytics"] = 99
    snapshot.actions.clear()

    fresh = store.get("u1")
    assert fresh.preferences.features == {"analytics": 1}
    assert len(fresh.actions) == 1


def test_tracked_data_is_copied(store):
    data = {"type": "url"}
    store.track("u1", "qr_created", data)
    data["type"] = "bulk"

    assert store.get("u1").actions[0].data == {"type": "url"}


def test_caller_supplied_timestamp(store, clock):
    earlier = clock.now() - timedelta(days=3)
    store.track("u1", "page_visited", {"page": "x"}, timestamp=earlier)

    profile = store.get("u1")
    assert profile.actions[0].timestamp == earlier
    assert profile.last_active == earlier

    # Each tracked action overwrites last_active, back-dated ones included
    older = earlier - timedelta(days=1)
    store.track("u1", "page_visited", {"page": "x"}, timestamp=older)
    assert store.get("u1").last_active == older


def test_naive_timestamp_treated_as_utc(store):
    store.track("u1", "page_visited", {"page": "x"}, timestamp=datetime(2025, 1, 1, 8, 0))

    assert store.get("u1").last_active == datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


def test_clear_removes_profile(store):
    store.track("u1", "page_visited", {"page": "x"})

    assert store.clear("u1") is True
    assert store.get("u1") is None
    assert store.clear("u1") is False


def test_track_after_clear_starts_fresh(store):
    store.track("u1", "qr_created", {"type": "url"})
    store.clear("u1")
    store.track("u1", "qr_created", {"type": "bulk"})

    profile = store.get("u1")
    assert profile.preferences.qr_types == {"bulk": 1}
    assert profile.total_actions == 1


def test_action_log_is_bounded_but_counters_are_not():
    """Test that evicted records keep counting towards the preference counters."""
    store = UserBehaviorStore(clock=FixedClock(), max_actions_per_user=5)
    for _ in range(8):
        store.track("u1", "qr_created", {"type": "url"})

    profile = store.get("u1")
    assert len(profile.actions) == 5
    assert profile.total_actions == 8
    assert profile.count("qr_created") == 8
    assert profile.preferences.qr_types == {"url": 8}


def test_unbounded_action_log():
    store = UserBehaviorStore(clock=FixedClock(), max_actions_per_user=None)
    for _ in range(1500):
        store.track("u1", "page_visited", {"page": "x"})

    assert len(store.get("u1").actions) == 1500


def test_concurrent_tracking_same_user_loses_no_updates(store):
    """Test that parallel writers for one user are serialized."""
    num_threads = 8
    per_thread = 200

    def worker():
        for _ in range(per_thread):
            store.track("shared", "feature_used", {"feature": "analytics"})

    threads = [threading.Thread(target=worker) for _ in range(num_threads)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    profile = store.get("shared")
    assert profile.total_actions == num_threads * per_thread
    assert profile.preferences.features["analytics"] == num_threads * per_thread


def test_concurrent_tracking_different_users(store):
    def worker(user_id):
        for _ in range(100):
            store.track(user_id, "qr_created", {"type": "url"})

    threads = [threading.Thread(target=worker, args=(f"u{i}",)) for i in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(store.user_ids()) == [f"u{i}" for i in range(5)]
    assert all(store.get(f"u{i}").count("qr_created") == 100 for i in range(5))


def test_snapshot_and_restore(store):
    store.track("u1", "qr_created", {"type": "url"})
    store.track("u2", "feature_used", {"feature": "analytics"})

    other = UserBehaviorStore(clock=FixedClock(), max_actions_per_user=10)
    other.restore(store.snapshot())

    assert len(other) == 2
    assert other.get("u1").preferences.qr_types == {"url": 1}
    assert other.get("u2").actions.maxlen == 10


def test_profile_to_dict_is_json_friendly(store):
    store.track("u1", "qr_created", {"type": "url"})

    exported = store.get("u1").to_dict()

    assert exported["user_id"] == "u1"
    assert exported["preferences"]["qr_types"] == {"url": 1}
    assert exported["actions"][0]["action"] == "qr_created"
    assert isinstance(exported["actions"][0]["timestamp"], str)
    assert isinstance(exported["last_active"], str)

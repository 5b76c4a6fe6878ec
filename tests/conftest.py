"""Shared fixtures for QRRec tests."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.recommender.behavior import UserBehaviorStore
from src.recommender.catalog import ProductCatalog
from src.recommender.clock import FixedClock
from src.recommender.config import ServiceConfig
from src.recommender.engine import RecommendationEngine
from src.recommender.service import RecommendationService

# A month with no active promotion
DEFAULT_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(DEFAULT_NOW)


@pytest.fixture
def catalog():
    return ProductCatalog()


@pytest.fixture
def store(clock):
    return UserBehaviorStore(clock=clock)


@pytest.fixture
def engine(catalog, store, clock):
    return RecommendationEngine(catalog=catalog, store=store, clock=clock)


@pytest.fixture
def service(clock):
    return RecommendationService(config=ServiceConfig(), clock=clock)


@pytest.fixture
def client(service):
    """Test client serving ``service``; runs app startup and shutdown."""
    with TestClient(create_app(service)) as test_client:
        yield test_client


@pytest.fixture
def track_many(store):
    """Track the same action ``times`` times on the ``store`` fixture."""

    def _track_many(user_id, action, data, times):
        for _ in range(times):
            store.track(user_id, action, data)

    return _track_many

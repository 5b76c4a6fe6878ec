"""Tests for service configuration."""

import pytest
from pydantic import ValidationError

from src.recommender.config import ServiceConfig, load_config
from src.recommender.service import RecommendationService


def test_defaults():
    config = load_config({})

    assert config == ServiceConfig()
    assert config.max_actions_per_user == 1000
    assert config.inactivity_days == 7
    assert config.default_limit == 5
    assert config.snapshot_path is None
    assert config.catalog_path is None


def test_environment_overrides():
    config = load_config(
        {
            "QRREC_MAX_ACTIONS_PER_USER": "250",
            "QRREC_INACTIVITY_DAYS": "14",
            "QRREC_DEFAULT_LIMIT": "3",
            "QRREC_SNAPSHOT_PATH": "/tmp/behavior.joblib",
            "QRREC_CATALOG_PATH": "/tmp/catalog.csv",
            "QRREC_LOG_LEVEL": "debug",
        }
    )

    assert config.max_actions_per_user == 250
    assert config.inactivity_days == 14
    assert config.default_limit == 3
    assert config.snapshot_path == "/tmp/behavior.joblib"
    assert config.catalog_path == "/tmp/catalog.csv"
    assert config.log_level == "DEBUG"


def test_unbounded_action_log_from_environment():
    assert load_config({"QRREC_MAX_ACTIONS_PER_USER": "none"}).max_actions_per_user is None


def test_non_integer_override_rejected():
    with pytest.raises(ValidationError, match="default_limit"):
        load_config({"QRREC_DEFAULT_LIMIT": "five"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_actions_per_user": 0},
        {"inactivity_days": -1},
        {"default_limit": 0},
        {"log_level": "LOUD"},
        {"log_level": None},
        {"inactivity_days": "soon"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        ServiceConfig(**overrides)


def test_service_uses_default_limit(clock):
    service = RecommendationService(config=ServiceConfig(default_limit=2), clock=clock)

    assert len(service.get_personalized("nobody")) == 2
    assert len(service.get_personalized("nobody", 4)) == 4


def test_numeric_strings_are_coerced():
    config = ServiceConfig(inactivity_days="7", default_limit="4", max_actions_per_user="None")

    assert config.inactivity_days == 7
    assert config.default_limit == 4
    assert config.max_actions_per_user is None


def test_config_is_frozen():
    config = ServiceConfig()

    with pytest.raises(ValidationError):
        config.default_limit = 10

"""Service configuration.

Defaults live in ``ServiceConfig``; ``load_config()`` overlays ``QRREC_*``
environment variables on top of them:

    QRREC_MAX_ACTIONS_PER_USER   int, or "none" for an unbounded action log
    QRREC_INACTIVITY_DAYS        int
    QRREC_DEFAULT_LIMIT          int
    QRREC_SNAPSHOT_PATH          path of the joblib behavior snapshot
    QRREC_CATALOG_PATH           product catalog CSV; the seeded catalog when unset
    QRREC_LOG_LEVEL              DEBUG, INFO, WARNING, ERROR, CRITICAL

Environment values are plain strings; pydantic coerces and validates them.
"""

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

ENV_PREFIX = "QRREC_"

DEFAULT_MAX_ACTIONS_PER_USER = 1000
DEFAULT_INACTIVITY_DAYS = 7
DEFAULT_LIMIT = 5
DEFAULT_LOG_LEVEL = "INFO"

# Setting name -> environment variable suffix
_ENV_FIELDS = {
    "max_actions_per_user": "MAX_ACTIONS_PER_USER",
    "inactivity_days": "INACTIVITY_DAYS",
    "default_limit": "DEFAULT_LIMIT",
    "snapshot_path": "SNAPSHOT_PATH",
    "catalog_path": "CATALOG_PATH",
    "log_level": "LOG_LEVEL",
}


class ServiceConfig(BaseModel):
    """Configuration for a RecommendationService.

    Attributes:
        max_actions_per_user: Raw action records retained per user. Older
            records are evicted; preference counters keep summarising them.
            None keeps the full history.
        inactivity_days: Days without activity before a retention prompt.
        default_limit: List length used when a caller gives no limit.
        snapshot_path: Optional joblib file restored on start and written on
            shutdown.
        catalog_path: Optional catalog CSV loaded instead of the seeded
            products.
        log_level: Root log level for the API process.
    """

    model_config = ConfigDict(frozen=True)

    max_actions_per_user: Optional[int] = DEFAULT_MAX_ACTIONS_PER_USER
    inactivity_days: int = DEFAULT_INACTIVITY_DAYS
    default_limit: int = DEFAULT_LIMIT
    snapshot_path: Optional[str] = None
    catalog_path: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("max_actions_per_user", mode="before")
    @classmethod
    def parse_unbounded(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() == "none":
            return None
        return v

    @field_validator("max_actions_per_user")
    @classmethod
    def validate_max_actions(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError(f"max_actions_per_user must be positive or None, got {v}.")
        return v

    @field_validator("inactivity_days")
    @classmethod
    def validate_inactivity_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"inactivity_days must be non-negative, got {v}.")
        return v

    @field_validator("default_limit")
    @classmethod
    def validate_default_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"default_limit must be positive, got {v}.")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


def load_config(environ: Optional[Mapping[str, str]] = None) -> ServiceConfig:
    """Build a ServiceConfig from defaults plus environment overrides.

    Args:
        environ: Mapping to read overrides from. Defaults to ``os.environ``.

    Returns:
        Validated ServiceConfig.

    Raises:
        pydantic.ValidationError: If an override cannot be parsed or fails
            validation.
    """
    env = os.environ if environ is None else environ
    overrides = {}
    for field_name, suffix in _ENV_FIELDS.items():
        if raw := env.get(f"{ENV_PREFIX}{suffix}"):
            overrides[field_name] = raw
    return ServiceConfig(**overrides)

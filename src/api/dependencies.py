"""Request-scoped accessors for objects living on the app state."""

import time
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request

from src.api.metrics import MetricsService
from src.recommender.service import RecommendationService


def get_service(request: Request) -> RecommendationService:
    """The RecommendationService injected into the application."""
    return request.app.state.service


def get_metrics(request: Request) -> MetricsService:
    return request.app.state.metrics


@contextmanager
def timed_query(metrics: MetricsService, generator: str) -> Iterator[None]:
    """Record the latency of the enclosed generator call."""
    start_time = time.time()
    try:
        yield
    finally:
        metrics.record_query(generator, (time.time() - start_time) * 1000)

"""Metrics for the recommendation API.

Thread-safe counters for tracked behavior events, per-generator query
latency and overall request latency. One instance lives on the app state.
"""

import threading
from typing import Dict


class _LatencyStats:
    def __init__(self):
        self.count = 0
        self.total_ms = 0.0
        self.min_ms = float("inf")
        self.max_ms = 0.0

    def add(self, latency_ms: float) -> None:
        self.count += 1
        self.total_ms += latency_ms
        self.min_ms = min(self.min_ms, latency_ms)
        self.max_ms = max(self.max_ms, latency_ms)

    def to_dict(self) -> Dict:
        return {
            "count": self.count,
            "average_latency_ms": round(self.total_ms / self.count, 2) if self.count else 0.0,
            "min_latency_ms": round(self.min_ms, 2) if self.count else 0.0,
            "max_latency_ms": round(self.max_ms, 2),
        }


class MetricsService:
    """Tracks API activity.

    Counts tracked behavior events and records latency per recommendation
    generator and per HTTP request.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._events_tracked = 0
        self._queries: Dict[str, _LatencyStats] = {}
        self._requests = _LatencyStats()

    def record_event(self) -> None:
        """Count one tracked behavior event."""
        with self._lock:
            self._events_tracked += 1

    def record_query(self, generator: str, latency_ms: float) -> None:
        """Record one recommendation query.

        Args:
            generator: Generator name, e.g. ``personalized``
            latency_ms: Latency in milliseconds
        """
        with self._lock:
            self._queries.setdefault(generator, _LatencyStats()).add(latency_ms)

    def record_request(self, latency_ms: float) -> None:
        with self._lock:
            self._requests.add(latency_ms)

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with:
            - events_tracked: Total behavior events tracked
            - queries: Per-generator count and latency statistics
            - requests: Count and latency statistics over all requests
        """
        with self._lock:
            return {
                "events_tracked": self._events_tracked,
                "queries": {name: stats.to_dict() for name, stats in self._queries.items()},
                "requests": self._requests.to_dict(),
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._events_tracked = 0
            self._queries = {}
            self._requests = _LatencyStats()

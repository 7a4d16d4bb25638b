"""Prometheus metrics for Stowage writers.

Records:
- Commits by backend and outcome (committed, failed, unverified, aborted)
- Aborts by phase
- Bytes transferred by backend
- Commit duration histogram

Usage:
    from stowage.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.commits_total.labels(backend="s3", outcome="committed").inc()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import REGISTRY, Counter, Histogram
from prometheus_client import generate_latest as prometheus_generate_latest

from stowage.config import settings

logger = logging.getLogger(__name__)


class NoOpMetric:
    """No-op metric for when metrics are disabled."""

    def labels(self, **kwargs: Any) -> "NoOpMetric":
        """Return self for chaining."""
        return self

    def inc(self, amount: float = 1) -> None:
        """No-op."""
        pass

    def observe(self, value: float) -> None:
        """No-op."""
        pass


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    commits_total: Any = field(default_factory=NoOpMetric)
    aborts_total: Any = field(default_factory=NoOpMetric)
    bytes_committed_total: Any = field(default_factory=NoOpMetric)
    commit_duration_seconds: Any = field(default_factory=NoOpMetric)

    # Internal state
    _initialized: bool = field(default=False, repr=False)
    _registry: Any = field(default=None, repr=False)

    def initialize(self) -> None:
        """Initialize Prometheus metrics."""
        if self._initialized:
            return

        if not settings.enable_metrics:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = REGISTRY

        self.commits_total = Counter(
            "stowage_commits_total",
            "Writer commits by outcome",
            ["backend", "outcome"],
        )
        self.aborts_total = Counter(
            "stowage_aborts_total",
            "Writer aborts",
            ["backend", "phase"],
        )
        self.bytes_committed_total = Counter(
            "stowage_bytes_committed_total",
            "Bytes transferred to backends",
            ["backend"],
        )
        self.commit_duration_seconds = Histogram(
            "stowage_commit_duration_seconds",
            "Commit latency in seconds (transfer and stat)",
            ["backend"],
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if self._registry is None:
            return b"# Metrics disabled\n"
        return prometheus_generate_latest(self._registry)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry

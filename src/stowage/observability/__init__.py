"""Observability module for Stowage.

Provides metrics and structured logging:
- Prometheus metrics for commits, aborts and transferred bytes
- JSON structured logging with destination and writer context
"""

from stowage.observability.logging import (
    LogContext,
    configure_logging,
    destination_var,
    writer_id_var,
)
from stowage.observability.metrics import (
    get_metrics,
    metrics_registry,
)

__all__ = [
    # Logging
    "configure_logging",
    "LogContext",
    "destination_var",
    "writer_id_var",
    # Metrics
    "metrics_registry",
    "get_metrics",
]

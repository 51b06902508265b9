"""Observability layer - logging and metrics."""

from skillswap.observability.logging import setup_logging
from skillswap.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]

"""
Prometheus metrics for the scoring pipeline and its collaborators.

Defines and exposes metrics for:
- Skill and credibility recomputations (count, latency, outcome)
- Best-effort scoring side effects that failed after a primary action
- Question generation and its cache

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from skillswap.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)


class MetricsCollector:
    """
    Prometheus metrics collector for skillswap.

    Usage:
        metrics = get_metrics()
        metrics.record_recompute("skill", success=True, latency=0.02)
    """

    def __init__(self):
        self.score_recomputations = Counter(
            "skillswap_score_recomputations_total",
            "Total score recomputations",
            ["kind", "status"],  # kind: skill, credibility, view; status: success, error
        )

        self.recompute_latency = Histogram(
            "skillswap_score_recompute_latency_seconds",
            "Time to recompute and persist a score",
            ["kind"],
            buckets=LATENCY_BUCKETS,
        )

        self.side_effect_failures = Counter(
            "skillswap_scoring_side_effect_failures_total",
            "Scoring steps that failed after the primary action succeeded",
            ["event"],
        )

        self.question_cache_requests = Counter(
            "skillswap_question_cache_requests_total",
            "Question cache lookups",
            ["result"],  # hit, miss
        )

        self.question_generation = Counter(
            "skillswap_question_generation_total",
            "Assignment question sets generated",
            ["source"],  # api, fallback
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    # Convenience methods

    def record_recompute(
        self,
        kind: str,
        success: bool,
        latency: float | None = None,
    ) -> None:
        """Record one skill or credibility recomputation."""
        status = "success" if success else "error"
        self.score_recomputations.labels(kind=kind, status=status).inc()
        if latency is not None:
            self.recompute_latency.labels(kind=kind).observe(latency)

    def record_side_effect_failure(self, event: str) -> None:
        """Record a scoring step that failed after its primary action."""
        self.side_effect_failures.labels(event=event).inc()

    def record_cache_lookup(self, hit: bool) -> None:
        """Record a question cache hit or miss."""
        self.question_cache_requests.labels(result="hit" if hit else "miss").inc()

    def record_question_generation(self, source: str) -> None:
        """Record where a question set came from (api or fallback)."""
        self.question_generation.labels(source=source).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics

"""
Prometheus Metrics for the Validation Engine

Metric families are created on a dedicated CollectorRegistry per engine instance
rather than on the process-wide default registry, so independent engines (and
tests) can each own a complete set of metrics without duplicate-registration
errors.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


class EngineMetrics:
    """
    Metric families recorded by the request pipeline and the processor registry.

    Attributes:
        registry: CollectorRegistry owning every metric below
        channel_calls: channel calls by channel and outcome (ok, error)
        channel_duration: channel call duration in seconds
        slow_calls: channel calls slower than the configured threshold
        rate_limit_rejections: calls rejected by the rate limiter
        validation_executions: processor executions by id and outcome
            (passed, failed, error)
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.channel_calls = Counter(
            "validation_channel_calls_total",
            "Total channel calls by channel and outcome",
            ["channel", "outcome"],
            registry=self.registry,
        )
        self.channel_duration = Histogram(
            "validation_channel_duration_seconds",
            "Channel call duration in seconds",
            ["channel"],
            buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self.registry,
        )
        self.slow_calls = Counter(
            "validation_channel_slow_calls_total",
            "Channel calls exceeding the slow-call threshold",
            ["channel"],
            registry=self.registry,
        )
        self.rate_limit_rejections = Counter(
            "validation_rate_limit_rejections_total",
            "Channel calls rejected by the rate limiter",
            ["channel"],
            registry=self.registry,
        )
        self.validation_executions = Counter(
            "validation_executions_total",
            "Validation processor executions by outcome",
            ["validation_id", "outcome"],
            registry=self.registry,
        )

    def sample(self, name: str, **labels: str) -> float:
        """Return the current value of a sample, 0.0 when it was never recorded."""
        value = self.registry.get_sample_value(name, labels)
        return value if value is not None else 0.0

    def export(self) -> bytes:
        """Render every metric in the Prometheus text exposition format."""
        return generate_latest(self.registry)


__all__ = ["EngineMetrics"]

"""
Shared metrics configuration for the rollout engine.
"""

from typing import Dict, Any, Optional
import threading

from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest


class MetricsCollector:
    """Prometheus metrics for feature evaluation and persistence."""

    def __init__(self, service_name: str = "rollout", registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # A private registry keeps several engines in one process from colliding
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up engine metrics."""
        self._metrics["rollout_feature_checks_total"] = Counter(
            "rollout_feature_checks_total",
            "Total feature activation checks",
            ["feature", "decision"],
            registry=self.registry
        )

        self._metrics["rollout_feature_check_duration_seconds"] = Histogram(
            "rollout_feature_check_duration_seconds",
            "Feature activation check duration in seconds",
            registry=self.registry
        )

        self._metrics["rollout_store_writes_total"] = Counter(
            "rollout_store_writes_total",
            "Total writes issued to the key-value store",
            ["kind"],
            registry=self.registry
        )

        self._metrics["rollout_legacy_migrations_total"] = Counter(
            "rollout_legacy_migrations_total",
            "Total features migrated from the legacy layout",
            registry=self.registry
        )

    def get_sample_value(self, name: str, **labels) -> Optional[float]:
        """Read the current value of a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels)

    def export(self) -> bytes:
        """Render all metrics in the Prometheus text format."""
        return generate_latest(self.registry)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        metric = self._metrics.get(metric_name)
        if metric is None:
            return
        with self._lock:
            if labels:
                metric.labels(**labels).inc()
            else:
                metric.inc()

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        metric = self._metrics.get(metric_name)
        if metric is None:
            return
        if labels:
            metric.labels(**labels).observe(value)
        else:
            metric.observe(value)


def get_metrics_collector(service_name: str = "rollout", registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)

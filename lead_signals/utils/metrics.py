"""
Prometheus Metrics Collector

Lightweight in-process metrics for the signal pipeline.
Generates Prometheus text exposition format (text/plain; version=0.0.4).
"""
import time
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class MetricValue:
    """Single metric value with optional labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


def _label_key(labels: Dict[str, str]) -> tuple:
    return tuple(sorted(labels.items()))


class Counter:
    """
    Monotonic counter.
    Used for: processed messages, persisted events, alerts by outcome.
    """

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        key = _label_key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def get(self, **labels: str) -> float:
        """Current value for a label combination (0 if never incremented)."""
        with self._lock:
            return self._values.get(_label_key(labels), 0.0)

    def collect(self) -> List[MetricValue]:
        with self._lock:
            return [
                MetricValue(value=v, labels=dict(k))
                for k, v in self._values.items()
            ]


class Histogram:
    """
    Bucketed observations (cumulative buckets, plus sum and count).
    Used for: end-to-end message processing latency.
    """

    DEFAULT_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)

    def __init__(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self.buckets = tuple(sorted(buckets or self.DEFAULT_BUCKETS))
        self._values: Dict[tuple, Dict] = {}
        self._lock = threading.Lock()

    def observe(self, value: float, **labels: str) -> None:
        key = _label_key(labels)
        with self._lock:
            data = self._values.setdefault(key, {
                "buckets": {b: 0 for b in self.buckets},
                "sum": 0.0,
                "count": 0
            })
            data["sum"] += value
            data["count"] += 1
            for bucket in self.buckets:
                if value <= bucket:
                    data["buckets"][bucket] += 1

    def time(self, **labels: str) -> "Timer":
        return Timer(self, **labels)

    def collect(self) -> List[MetricValue]:
        result = []
        with self._lock:
            for key, data in self._values.items():
                base_labels = dict(key)
                for bucket in self.buckets:
                    result.append(MetricValue(
                        value=data["buckets"][bucket],
                        labels={**base_labels, "le": str(bucket)}
                    ))
                result.append(MetricValue(value=data["count"], labels={**base_labels, "le": "+Inf"}))
                result.append(MetricValue(value=data["sum"], labels={**base_labels, "_metric": "sum"}))
                result.append(MetricValue(value=data["count"], labels={**base_labels, "_metric": "count"}))
        return result


class Timer:
    """Context manager for timing code blocks."""

    def __init__(self, histogram: Histogram, **labels: str):
        self.histogram = histogram
        self.labels = labels
        self.start_time: Optional[float] = None
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        if self.start_time is not None:
            self.elapsed = time.perf_counter() - self.start_time
            self.histogram.observe(self.elapsed, **self.labels)


class MetricsRegistry:
    """
    Central registry for all application metrics.
    Singleton; exports Prometheus text format.
    """

    _instance: Optional["MetricsRegistry"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "MetricsRegistry":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._metrics: Dict[str, Counter | Histogram] = {}
        self._initialized = True
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        # ============================================
        # PIPELINE
        # ============================================
        self.messages_processed = self.counter(
            "ls_messages_processed_total",
            "Message pairs processed by channel",
            ["channel"]
        )
        self.process_duration = self.histogram(
            "ls_process_duration_seconds",
            "End-to-end message pair processing duration"
        )
        self.signals_detected = self.counter(
            "ls_signals_detected_total",
            "Behavior signals detected by kind",
            ["kind"]
        )
        self.hot_leads = self.counter(
            "ls_hot_leads_total",
            "Message pairs scored at or above the hot lead threshold"
        )

        # ============================================
        # PERSISTENCE
        # ============================================
        self.events_persisted = self.counter(
            "ls_events_persisted_total",
            "Behavior events written"
        )
        self.event_write_failures = self.counter(
            "ls_event_write_failures_total",
            "Behavior event writes that failed"
        )
        self.summary_refresh_failures = self.counter(
            "ls_summary_refresh_failures_total",
            "Monthly summary refreshes that failed"
        )

        # ============================================
        # ALERTING
        # ============================================
        self.alerts = self.counter(
            "ls_alerts_total",
            "Alert decisions by outcome",
            ["outcome"]
        )

    def counter(self, name: str, description: str, labels: Optional[List[str]] = None) -> Counter:
        metric = Counter(name, description, labels)
        self._metrics[name] = metric
        return metric

    def histogram(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ) -> Histogram:
        metric = Histogram(name, description, labels, buckets)
        self._metrics[name] = metric
        return metric

    def export(self) -> str:
        """
        Export all metrics in Prometheus text exposition format.
        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []

        for name, metric in self._metrics.items():
            kind = "histogram" if isinstance(metric, Histogram) else "counter"
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {kind}")

            for mv in metric.collect():
                metric_name = name
                if isinstance(metric, Histogram):
                    if "_metric" in mv.labels:
                        metric_name = f"{name}_{mv.labels.pop('_metric')}"
                    else:
                        metric_name = f"{name}_bucket"
                lines.append(f"{metric_name}{self._format_labels(mv.labels)} {mv.value}")

            lines.append("")

        return "\n".join(lines)

    def _format_labels(self, labels: Dict[str, str]) -> str:
        if not labels:
            return ""
        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        self._metrics.clear()
        self._setup_metrics()


# Global metrics instance
metrics = MetricsRegistry()

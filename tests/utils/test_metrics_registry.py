"""
Metrics registry tests.
"""
import pytest

from lead_signals.utils.metrics import Counter, Histogram, MetricsRegistry, metrics


class TestCounter:

    def test_labels_are_tracked_separately(self):
        counter = Counter("test_total", "test counter", ["outcome"])
        counter.inc(outcome="sent")
        counter.inc(outcome="sent")
        counter.inc(outcome="failed")

        assert counter.get(outcome="sent") == 2
        assert counter.get(outcome="failed") == 1
        assert counter.get(outcome="suppressed") == 0


class TestHistogram:

    def test_buckets_are_cumulative(self):
        histogram = Histogram("test_seconds", "test histogram", buckets=(0.1, 1.0))
        histogram.observe(0.05)
        histogram.observe(0.5)

        values = {v.labels.get("le", v.labels.get("_metric")): v.value for v in histogram.collect()}

        assert values["0.1"] == 1
        assert values["1.0"] == 2
        assert values["+Inf"] == 2
        assert values["count"] == 2

    def test_timer_records_elapsed(self):
        histogram = Histogram("timer_seconds", "timer")
        with histogram.time() as timer:
            pass

        assert timer.elapsed >= 0
        assert histogram.collect()[-1].value == 1


class TestRegistry:

    def test_singleton(self):
        assert MetricsRegistry() is metrics

    def test_export_format(self):
        metrics.alerts.inc(outcome="sent")

        text = metrics.export()

        assert "# HELP ls_alerts_total Alert decisions by outcome" in text
        assert 'ls_alerts_total{outcome="sent"}' in text
        assert "ls_process_duration_seconds" in text

"""Tests for the metric primitives and Prometheus export."""

from __future__ import annotations

import pytest

from learnlens.observability.metrics import MetricsRegistry, RequestMetrics, SpecialistMetrics


class TestCounter:
    def test_labels_accumulate(self, registry):
        counter = registry.counter("attempts_total", labels=["specialist"])
        counter.labels(specialist="rating").inc()
        counter.labels(specialist="rating").inc(2)
        counter.labels(specialist="market").inc()
        assert counter.labels(specialist="rating").value == 3
        assert counter.labels(specialist="market").value == 1

    def test_cannot_decrease(self, registry):
        with pytest.raises(ValueError):
            registry.counter("c").labels().inc(-1)

    def test_get_or_create_returns_same_metric(self, registry):
        assert registry.counter("c") is registry.counter("c")


class TestHistogram:
    def test_buckets_are_cumulative(self, registry):
        hist = registry.histogram("latency_ms", buckets=(10.0, 100.0, float("inf")))
        hist.observe(5)
        hist.observe(50)
        hist.observe(500)
        data = hist.labels().data
        assert data["count"] == 3
        assert data["sum"] == 555
        assert data["buckets"] == {10.0: 1, 100.0: 2, float("inf"): 3}


class TestRegistry:
    def test_clear_keeps_registrations(self, registry):
        counter = registry.counter("c")
        counter.inc()
        registry.clear()
        assert registry.collect() == []
        assert registry.counter("c") is counter

    def test_export_prometheus(self):
        registry = MetricsRegistry()
        SpecialistMetrics(registry).record_attempt("rating", True, 12.0)
        text = registry.export_prometheus()
        assert 'learnlens_specialist_attempts_total{outcome="success",specialist="rating"} 1.0' in text
        assert 'learnlens_specialist_attempt_duration_ms_bucket{specialist="rating",le="25.0"} 1' in text
        assert 'learnlens_specialist_attempt_duration_ms_bucket{specialist="rating",le="+Inf"} 1' in text
        assert 'learnlens_specialist_attempt_duration_ms_count{specialist="rating"} 1' in text

    def test_request_metrics(self, registry):
        metrics = RequestMetrics(registry)
        metrics.record_request("/analyze", 200, 8.5)
        assert metrics.requests.labels(path="/analyze", status="200").value == 1

    def test_export_headers(self, registry):
        registry.counter("unused_total", "Never incremented")
        SpecialistMetrics(registry).record_attempt("rating", False, 3.0)
        text = registry.export_prometheus()
        assert "# TYPE learnlens_specialist_attempts_total counter" in text
        assert "# HELP learnlens_specialist_attempt_duration_ms Specialist attempt duration" in text
        assert "unused_total" not in text

    def test_kind_conflict(self, registry):
        registry.counter("x")
        with pytest.raises(ValueError, match="already registered"):
            registry.histogram("x")

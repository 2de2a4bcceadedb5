"""Prometheus-style metrics for observability.

Counters and histograms keyed by label sets, collected by an explicitly
owned :class:`MetricsRegistry` and exported in the Prometheus text format
at ``GET /metrics/prometheus``.

Example:
    >>> registry = MetricsRegistry()
    >>> attempts = registry.counter("attempts_total", labels=["specialist"])
    >>> attempts.labels(specialist="rating").inc()
    >>> registry.histogram("latency_ms").observe(12.5)
    >>> print(registry.export_prometheus())
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Any

LabelKey = tuple[tuple[str, str], ...]

# Milliseconds: specialist calls range from instant local scorers to remote
# calls that run into the 30s deadline.
DEFAULT_BUCKETS_MS: tuple[float, ...] = (
    5.0, 10.0, 25.0, 50.0, 100.0, 250.0, 500.0,
    1000.0, 2500.0, 5000.0, 10000.0, 30000.0, math.inf,
)


def _key(labels: dict[str, Any]) -> LabelKey:
    return tuple(sorted((name, str(value)) for name, value in labels.items()))


def _render_labels(key: LabelKey, *extra: tuple[str, str]) -> str:
    pairs = (*key, *extra)
    if not pairs:
        return ""
    return "{" + ",".join(f'{name}="{value}"' for name, value in pairs) + "}"


class Counter:
    """Monotonically increasing value per label set.

    Used for specialist attempts by outcome and HTTP requests by status.
    """

    kind = "counter"

    def __init__(self, name: str, description: str = "", labels: list[str] | None = None):
        self.name = name
        self.description = description
        self.label_names = tuple(labels or ())
        self._values: dict[LabelKey, float] = {}
        self._lock = threading.Lock()

    def labels(self, **labels: Any) -> BoundCounter:
        return BoundCounter(self, _key(labels))

    def inc(self, value: float = 1.0) -> None:
        self.labels().inc(value)

    def _add(self, key: LabelKey, value: float) -> None:
        if value < 0:
            raise ValueError(f"counter {self.name} can only increase")
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + value

    def _value(self, key: LabelKey) -> float:
        with self._lock:
            return self._values.get(key, 0.0)

    def collect(self) -> list[dict[str, Any]]:
        with self._lock:
            items = list(self._values.items())
        return [
            {"name": self.name, "type": self.kind, "labels": dict(key), "value": value}
            for key, value in items
        ]

    def render(self) -> list[str]:
        with self._lock:
            items = list(self._values.items())
        return [f"{self.name}{_render_labels(key)} {value}" for key, value in items]

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


@dataclass(frozen=True)
class BoundCounter:
    counter: Counter
    key: LabelKey

    def inc(self, value: float = 1.0) -> None:
        self.counter._add(self.key, value)

    @property
    def value(self) -> float:
        return self.counter._value(self.key)


class Histogram:
    """Cumulative bucket counts, sum and count per label set.

    Used for attempt durations and request latency.
    """

    kind = "histogram"

    def __init__(
        self,
        name: str,
        description: str = "",
        labels: list[str] | None = None,
        buckets: tuple[float, ...] | None = None,
    ):
        self.name = name
        self.description = description
        self.label_names = tuple(labels or ())
        self.buckets = tuple(sorted(buckets or DEFAULT_BUCKETS_MS))
        self._series: dict[LabelKey, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def labels(self, **labels: Any) -> BoundHistogram:
        return BoundHistogram(self, _key(labels))

    def observe(self, value: float) -> None:
        self.labels().observe(value)

    def _new_series(self) -> dict[str, Any]:
        return {"buckets": dict.fromkeys(self.buckets, 0), "sum": 0.0, "count": 0}

    def _observe(self, key: LabelKey, value: float) -> None:
        with self._lock:
            series = self._series.setdefault(key, self._new_series())
            series["sum"] += value
            series["count"] += 1
            for bound in self.buckets:
                if value <= bound:
                    series["buckets"][bound] += 1

    def _snapshot(self, key: LabelKey) -> dict[str, Any]:
        with self._lock:
            series = self._series.get(key) or self._new_series()
            return {"buckets": dict(series["buckets"]), "sum": series["sum"], "count": series["count"]}

    def collect(self) -> list[dict[str, Any]]:
        with self._lock:
            keys = list(self._series)
        return [
            {"name": self.name, "type": self.kind, "labels": dict(key), **self._snapshot(key)}
            for key in keys
        ]

    def render(self) -> list[str]:
        lines: list[str] = []
        for sample in self.collect():
            key = _key(sample["labels"])
            for bound, count in sample["buckets"].items():
                le = "+Inf" if math.isinf(bound) else str(bound)
                lines.append(f"{self.name}_bucket{_render_labels(key, ('le', le))} {count}")
            lines.append(f"{self.name}_sum{_render_labels(key)} {sample['sum']}")
            lines.append(f"{self.name}_count{_render_labels(key)} {sample['count']}")
        return lines

    def clear(self) -> None:
        with self._lock:
            self._series.clear()


@dataclass(frozen=True)
class BoundHistogram:
    histogram: Histogram
    key: LabelKey

    def observe(self, value: float) -> None:
        self.histogram._observe(self.key, value)

    @property
    def data(self) -> dict[str, Any]:
        return self.histogram._snapshot(self.key)


Metric = Counter | Histogram


class MetricsRegistry:
    """Get-or-create registry of counters and histograms.

    Owned by whoever composes the application (the analysis service);
    there is no module-level default instance.
    """

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.Lock()

    def _get_or_create(self, cls: type, name: str, *args: Any) -> Any:
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = self._metrics[name] = cls(name, *args)
            elif not isinstance(metric, cls):
                raise ValueError(f"metric {name} is already registered as a {metric.kind}")
            return metric

    def counter(self, name: str, description: str = "", labels: list[str] | None = None) -> Counter:
        return self._get_or_create(Counter, name, description, labels)

    def histogram(
        self,
        name: str,
        description: str = "",
        labels: list[str] | None = None,
        buckets: tuple[float, ...] | None = None,
    ) -> Histogram:
        return self._get_or_create(Histogram, name, description, labels, buckets)

    def _all(self) -> list[Metric]:
        with self._lock:
            return list(self._metrics.values())

    def collect(self) -> list[dict[str, Any]]:
        """Every recorded sample, as plain dicts."""
        return [sample for metric in self._all() for sample in metric.collect()]

    def clear(self) -> None:
        """Reset every metric value, keeping registrations."""
        for metric in self._all():
            metric.clear()

    def export_prometheus(self) -> str:
        """Prometheus text exposition; metrics without samples are omitted."""
        lines: list[str] = []
        for metric in self._all():
            samples = metric.render()
            if not samples:
                continue
            if metric.description:
                lines.append(f"# HELP {metric.name} {metric.description}")
            lines.append(f"# TYPE {metric.name} {metric.kind}")
            lines.extend(samples)
        return "\n".join(lines)


class SpecialistMetrics:
    """Per-attempt specialist metrics."""

    def __init__(self, registry: MetricsRegistry):
        self.attempts = registry.counter(
            "learnlens_specialist_attempts_total",
            "Specialist attempts by outcome",
            ["specialist", "outcome"],
        )
        self.duration = registry.histogram(
            "learnlens_specialist_attempt_duration_ms",
            "Specialist attempt duration in milliseconds",
            ["specialist"],
        )

    def record_attempt(self, specialist: str, success: bool, duration_ms: float) -> None:
        outcome = "success" if success else "failure"
        self.attempts.labels(specialist=specialist, outcome=outcome).inc()
        self.duration.labels(specialist=specialist).observe(duration_ms)


class RequestMetrics:
    """Per-request HTTP metrics, recorded by the timing middleware."""

    def __init__(self, registry: MetricsRegistry):
        self.requests = registry.counter(
            "learnlens_http_requests_total",
            "HTTP requests by path and status",
            ["path", "status"],
        )
        self.latency = registry.histogram(
            "learnlens_http_request_duration_ms",
            "HTTP request latency in milliseconds",
            ["path"],
        )

    def record_request(self, path: str, status: int, duration_ms: float) -> None:
        self.requests.labels(path=path, status=status).inc()
        self.latency.labels(path=path).observe(duration_ms)


__all__ = [
    "Counter",
    "Histogram",
    "MetricsRegistry",
    "SpecialistMetrics",
    "RequestMetrics",
]

"""Execution recorder: cumulative per-specialist counters.

The recorder is the only state mutated by concurrently running specialist
tasks. It is an explicitly owned instance (injected into the orchestrator),
not a module global, and every mutation happens under one lock.

Two granularities are kept per specialist:

* **attempts** – ``record()`` is called once per guarded attempt, so a
  specialist that fails twice and then succeeds shows 1 success, 2 failures
  and ``attemptsTotal`` 3.
* **runs** – ``record_run()`` is called once per terminal result with the
  wall time of the whole attempt sequence.

Example:
    >>> recorder = ExecutionRecorder()
    >>> recorder.record("rating", success=False, duration_ms=12.0)
    >>> recorder.record("rating", success=True, duration_ms=8.0)
    >>> recorder.snapshot()["successRatePercent"]
    50.0
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from learnlens.observability.metrics import MetricsRegistry, SpecialistMetrics


@dataclass
class ExecutionRecord:
    """Counters for one specialist."""

    attempts_total: int = 0
    successes: int = 0
    failures: int = 0
    total_duration_ms: float = 0.0
    runs: int = 0
    runs_succeeded: int = 0
    total_run_duration_ms: float = 0.0

    @property
    def average_duration_ms(self) -> float:
        return self.total_duration_ms / self.attempts_total if self.attempts_total else 0.0

    @property
    def average_run_duration_ms(self) -> float:
        return self.total_run_duration_ms / self.runs if self.runs else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "attemptsTotal": self.attempts_total,
            "successes": self.successes,
            "failures": self.failures,
            "totalDurationMs": round(self.total_duration_ms, 3),
            "averageDurationMs": round(self.average_duration_ms, 3),
            "runs": self.runs,
            "runsSucceeded": self.runs_succeeded,
            "averageRunDurationMs": round(self.average_run_duration_ms, 3),
        }


class ExecutionRecorder:
    """Thread-safe accumulation of specialist execution outcomes.

    Parameters
    ----------
    registry : MetricsRegistry | None
        When given, each attempt is mirrored into Prometheus-style metrics.
    """

    def __init__(self, registry: MetricsRegistry | None = None) -> None:
        self._records: dict[str, ExecutionRecord] = {}
        self._lock = threading.Lock()
        self._metrics = SpecialistMetrics(registry) if registry is not None else None

    def record(self, specialist: str, success: bool, duration_ms: float) -> None:
        """Record one attempt."""
        with self._lock:
            rec = self._records.setdefault(specialist, ExecutionRecord())
            rec.attempts_total += 1
            if success:
                rec.successes += 1
            else:
                rec.failures += 1
            rec.total_duration_ms += duration_ms
        if self._metrics is not None:
            self._metrics.record_attempt(specialist, success, duration_ms)

    def record_run(self, specialist: str, success: bool, duration_ms: float) -> None:
        """Record the terminal result of one specialist in one run."""
        with self._lock:
            rec = self._records.setdefault(specialist, ExecutionRecord())
            rec.runs += 1
            if success:
                rec.runs_succeeded += 1
            rec.total_run_duration_ms += duration_ms

    def get(self, specialist: str) -> ExecutionRecord:
        """Copy of one specialist's counters (all zero if never seen)."""
        with self._lock:
            rec = self._records.get(specialist)
            return ExecutionRecord(**vars(rec)) if rec else ExecutionRecord()

    def snapshot(self) -> dict[str, Any]:
        """Point-in-time view for the metrics endpoint.

        Returns:
            ``{"perSpecialist": {...}, "totals": {...}, "successRatePercent": float}``
        """
        with self._lock:
            per_specialist = {name: rec.to_dict() for name, rec in sorted(self._records.items())}
            attempts = sum(r.attempts_total for r in self._records.values())
            successes = sum(r.successes for r in self._records.values())
            failures = sum(r.failures for r in self._records.values())
            runs = sum(r.runs for r in self._records.values())

        return {
            "perSpecialist": per_specialist,
            "totals": {
                "attemptsTotal": attempts,
                "successes": successes,
                "failures": failures,
                "runs": runs,
            },
            "successRatePercent": round(successes / attempts * 100, 2) if attempts else 0.0,
        }

    def reset(self) -> None:
        """Administrative reset of every counter."""
        with self._lock:
            self._records.clear()

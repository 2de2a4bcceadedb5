"""
Tagged outcomes for specialist invocations.

Two small sum types make every state of a specialist call explicit:

    AttemptOutcome   = Success(payload) | TimedOut(timeout) | Failed(error_kind, message)
    SpecialistResult = Succeeded(payload) | Unavailable(reason)

``AttemptOutcome`` describes one guarded attempt; ``SpecialistResult`` is the
terminal state of a specialist for one run, derived by the retry policy from
its attempts. Both are frozen: each attempt produces a new outcome and a
terminal result is never mutated or retried.

Manifesto:
    - **Explicit over Implicit:** A failed specialist is a value, not an
      exception propagating through ``asyncio.gather``
    - **Batch-friendly:** The orchestrator collects one terminal result per
      specialist and merges at the end

Examples:
    >>> outcome = Success({"engagementRate": 0.8})
    >>> outcome.is_success()
    True
    >>> Unavailable(TimedOut(timeout=30.0)).to_dict()["reason"]["kind"]
    'timed_out'

Tags:
    result-pattern, tagged-union, outcomes, learnlens
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from learnlens.core.errors import DeadlineExceeded


# ── Attempt outcomes ─────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Success:
    """The attempt returned a payload before its deadline."""

    payload: Mapping[str, Any]

    def is_success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "success", "payload": dict(self.payload)}


@dataclass(frozen=True, slots=True)
class TimedOut:
    """The deadline elapsed before the attempt finished."""

    timeout: float

    def is_success(self) -> bool:
        return False

    @property
    def error(self) -> DeadlineExceeded:
        """Equivalent exception, for classifiers that work on errors."""
        return DeadlineExceeded(f"attempt timed out after {self.timeout}s", timeout=self.timeout)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "timed_out", "timeout": self.timeout}


@dataclass(frozen=True, slots=True)
class Failed:
    """The attempt raised before the deadline.

    ``error`` keeps the original exception for classification; it is
    excluded from equality so outcomes compare by kind and message.
    """

    error_kind: str
    message: str
    error: BaseException | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> Failed:
        return cls(error_kind=type(exc).__name__, message=str(exc), error=exc)

    def is_success(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "failed", "error_kind": self.error_kind, "message": self.message}


AttemptOutcome = Union[Success, TimedOut, Failed]


# ── Terminal specialist results ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Succeeded:
    """Terminal success: the specialist's payload is used in the merge."""

    payload: Mapping[str, Any]
    attempts: int = 1

    def is_ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"status": "succeeded", "attempts": self.attempts, "payload": dict(self.payload)}


@dataclass(frozen=True, slots=True)
class Unavailable:
    """Terminal failure: the specialist's fields fall back to defaults."""

    reason: TimedOut | Failed
    attempts: int = 1

    def is_ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"status": "unavailable", "attempts": self.attempts, "reason": self.reason.to_dict()}


SpecialistResult = Union[Succeeded, Unavailable]


__all__ = [
    "Success",
    "TimedOut",
    "Failed",
    "AttemptOutcome",
    "Succeeded",
    "Unavailable",
    "SpecialistResult",
]

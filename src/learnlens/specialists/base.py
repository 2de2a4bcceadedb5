"""
Specialist contract.

A specialist is an opaque callable ``invoke(request_data) -> payload`` that
computes a subset of the report's metric fields. ``SpecialistCall`` pairs
the callable with the fields it owns, their bounds, its per-attempt
deadline and its retry budget. Rosters are tuples of ``SpecialistCall`` and
never change once built.

Guardrails applied around every attempt:
    - **input:** request data must be a sequence of learner records
      (``ValidationError``, permanent)
    - **output:** every declared field present, numeric and within bounds
      (``PayloadValidationError``, permanent); undeclared keys are dropped

Example:
    >>> call = SpecialistCall(
    ...     name="completion",
    ...     invoke=score_completion,
    ...     fields=(MetricField("completionRate"),),
    ... )
    >>> payload = await call.bind(records)()
"""

from __future__ import annotations

import asyncio
import inspect
import math
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

import pydantic

from learnlens.core.errors import PayloadValidationError, ValidationError
from learnlens.execution.retry import RetryConfig
from learnlens.ingest.schemas import LearnerRecord

SpecialistFn = Callable[[Any], Awaitable[Mapping[str, Any]]] | Callable[[Any], Mapping[str, Any]]


@dataclass(frozen=True)
class MetricField:
    """A report field owned by one specialist."""

    name: str
    lower: float = 0.0
    upper: float = 1.0
    default: float = 0.0

    def check(self, value: Any) -> float:
        """Return ``value`` as float or raise if it breaks the contract."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PayloadValidationError(f"{self.name} must be a number, got {type(value).__name__}")
        if not math.isfinite(value) or not self.lower <= value <= self.upper:
            raise PayloadValidationError(
                f"{self.name} must be between {self.lower:g} and {self.upper:g}, got {value!r}"
            )
        return float(value)


def _is_async(fn: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )


@dataclass(frozen=True)
class SpecialistCall:
    """One entry of the roster.

    Attributes:
        name: Specialist identity, used for logs and the execution recorder
        invoke: Sync or async callable taking the request data
        fields: Report fields this specialist owns
        deadline_s: Per-attempt deadline
        retry: Retry budget and backoff
    """

    name: str
    invoke: SpecialistFn
    fields: tuple[MetricField, ...]
    deadline_s: float = 30.0
    retry: RetryConfig = field(default_factory=RetryConfig)

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError(f"specialist {self.name!r} declares no fields")
        if self.deadline_s <= 0:
            raise ValueError(f"specialist {self.name!r} deadline must be positive")

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def hard_limit_s(self) -> float:
        """No attempt of this specialist may outlive deadline × max attempts."""
        return self.deadline_s * self.retry.max_attempts

    def with_policy(self, *, deadline_s: float | None = None, retry: RetryConfig | None = None) -> SpecialistCall:
        """Copy with a different deadline and/or retry budget."""
        return replace(
            self,
            deadline_s=self.deadline_s if deadline_s is None else deadline_s,
            retry=self.retry if retry is None else retry,
        )

    def validate_payload(self, payload: Any) -> dict[str, float]:
        """Output guardrail: keep declared fields, reject anything out of contract."""
        if not isinstance(payload, Mapping):
            raise PayloadValidationError(
                f"{self.name} returned {type(payload).__name__}, expected a mapping"
            ).with_context(specialist=self.name)
        checked = {}
        for metric in self.fields:
            if metric.name not in payload:
                raise PayloadValidationError(f"{self.name} payload is missing {metric.name}").with_context(
                    specialist=self.name
                )
            try:
                checked[metric.name] = metric.check(payload[metric.name])
            except PayloadValidationError as exc:
                raise exc.with_context(specialist=self.name)
        return checked

    def bind(self, request_data: Any) -> Callable[[], Awaitable[dict[str, float]]]:
        """Zero-argument attempt function for the deadline guard.

        Sync callables run in a worker thread so the deadline can still
        fire while they compute.
        """

        async def _attempt() -> dict[str, float]:
            if _is_async(self.invoke):
                raw = await self.invoke(request_data)
            else:
                raw = await asyncio.to_thread(self.invoke, request_data)
            return self.validate_payload(raw)

        return _attempt


def ensure_records(request_data: Any) -> list[LearnerRecord]:
    """Input guardrail: coerce request data into learner records."""
    if isinstance(request_data, (str, bytes)) or not isinstance(request_data, Sequence):
        raise ValidationError("learner responses must be a list of learner records")
    try:
        return [
            item if isinstance(item, LearnerRecord) else LearnerRecord.model_validate(item)
            for item in request_data
        ]
    except pydantic.ValidationError as exc:
        raise ValidationError(
            "each learner record needs a learner_id (string) and responses (list)",
            cause=exc,
        ) from exc

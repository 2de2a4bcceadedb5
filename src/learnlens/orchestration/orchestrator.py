"""Orchestrator: fan one request out to the specialist roster and merge.

Manifesto:
    A report with a few defaulted fields is more useful than no report.
    Every specialist runs concurrently behind its own deadline and retry
    loop; the orchestrator waits for all of them to settle and never lets
    one specialist's failure cancel or fail the others.

    - **Wait for all:** ``asyncio.gather(..., return_exceptions=True)``
    - **Deterministic merge:** fields follow roster order, not completion order
    - **Owned state only:** the recorder and session store are injected,
      nothing else is touched

Architecture:
    ::

        run(session_id, request_data, meta)
            │
            ├── sessions.get_or_create(session_id, meta)   (SessionError is fatal)
            │
            ├── gather ─┬─ RetryPolicy.execute(guard(engagement))  ─┐
            │           ├─ RetryPolicy.execute(guard(completion))  ─┤  recorder.record()
            │           ├─ ...                                      │  per attempt
            │           └─ RetryPolicy.execute(guard(market))      ─┘  recorder.record_run()
            │                                                         per specialist
            ├── merge_results(roster, results, local fields)
            └── sessions.append_run(session_id, report)

Examples:
    >>> orchestrator = Orchestrator(default_roster(), ExecutionRecorder(), SessionStore())
    >>> report = await orchestrator.run("m1-2025", records, RunMeta(module_id="m1"))
    >>> report["numberOfLearners"]
    12.0

Tags:
    orchestration, fan-out, asyncio, resilience, learnlens
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from learnlens.core.errors import ConfigError, SessionError
from learnlens.core.logging import LogContext, get_logger
from learnlens.execution.outcomes import AttemptOutcome, Failed, SpecialistResult, Unavailable
from learnlens.execution.retry import Classifier, RetryPolicy, classify_outcome
from learnlens.execution.timeout import DeadlineGuard
from learnlens.observability.recorder import ExecutionRecorder
from learnlens.orchestration.merge import MergedReport, declared_fields, merge_results
from learnlens.orchestration.session import SessionContext, SessionStore
from learnlens.specialists.base import SpecialistCall

logger = get_logger(__name__)

LocalField = Callable[[Any], float]


def count_records(request_data: Any) -> float:
    """Number of learner records in the request (0 if it has no length)."""
    try:
        return float(len(request_data))
    except TypeError:
        return 0.0


@dataclass(frozen=True)
class RunMeta:
    """Caller-supplied session seed."""

    module_id: str | None = None
    cohort: str | None = None
    previous_runs: tuple[Mapping[str, float], ...] = ()


@dataclass(frozen=True)
class RunSummary:
    """Everything one run produced, for callers that need more than the report."""

    session: SessionContext
    report: MergedReport
    results: Mapping[str, SpecialistResult] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def unavailable(self) -> tuple[str, ...]:
        """Specialists whose fields were defaulted."""
        return tuple(name for name, result in self.results.items() if not result.is_ok())


class Orchestrator:
    """Runs a fixed roster of specialists for one request at a time.

    Parameters
    ----------
    roster : Sequence[SpecialistCall]
        Specialists in merge order. Copied into a tuple; never changes.
    recorder : ExecutionRecorder
        Process-wide execution counters.
    sessions : SessionStore | None
        Session contexts; a private store is created when omitted.
    guard : DeadlineGuard | None
        Shared deadline guard (tracks abandoned attempts).
    classify : Classifier
        Transient/permanent classifier for failed attempts.
    sleep : callable
        Backoff sleep; tests inject a no-op.
    local_fields : Mapping[str, LocalField] | None
        Fields computed here rather than by a specialist.
        Defaults to ``numberOfLearners``.
    """

    def __init__(
        self,
        roster: Sequence[SpecialistCall],
        recorder: ExecutionRecorder,
        sessions: SessionStore | None = None,
        *,
        guard: DeadlineGuard | None = None,
        classify: Classifier = classify_outcome,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        local_fields: Mapping[str, LocalField] | None = None,
    ):
        if not roster:
            raise ConfigError("roster must contain at least one specialist")
        names = [call.name for call in roster]
        if len(set(names)) != len(names):
            raise ConfigError(f"duplicate specialist names in roster: {names}")

        self.roster: tuple[SpecialistCall, ...] = tuple(roster)
        self.recorder = recorder
        self.sessions = sessions if sessions is not None else SessionStore()
        self.guard = guard or DeadlineGuard()
        self.classify = classify
        self._sleep = sleep
        self.local_fields = dict(local_fields) if local_fields is not None else {"numberOfLearners": count_records}
        self.fields = declared_fields(self.roster, tuple(self.local_fields))

    async def run(self, session_id: str, request_data: Any, meta: RunMeta | None = None) -> MergedReport:
        """Run every specialist and return the merged report.

        Raises:
            SessionError: If the session cannot be allocated or updated
        """
        summary = await self.execute(session_id, request_data, meta)
        return summary.report

    async def execute(self, session_id: str, request_data: Any, meta: RunMeta | None = None) -> RunSummary:
        """Like :meth:`run`, but also return per-specialist results."""
        meta = meta or RunMeta()

        async with LogContext(session_id=session_id):
            context = self._open_session(session_id, meta)

            started = time.perf_counter()
            logger.info("orchestrator.run_start", specialists=len(self.roster))

            settled = await asyncio.gather(
                *(self._run_specialist(call, request_data) for call in self.roster),
                return_exceptions=True,
            )

            results: dict[str, SpecialistResult] = {}
            for call, outcome in zip(self.roster, settled, strict=True):
                if isinstance(outcome, BaseException):
                    logger.error(
                        "orchestrator.specialist_crashed",
                        specialist=call.name,
                        error=repr(outcome),
                    )
                    outcome = Unavailable(Failed.from_exception(outcome))
                    self.recorder.record_run(call.name, False, (time.perf_counter() - started) * 1000)
                results[call.name] = outcome

            local = {name: compute(request_data) for name, compute in self.local_fields.items()}
            report = merge_results(self.roster, results, local)

            try:
                self.sessions.append_run(session_id, report)
            except SessionError:
                raise
            except Exception as exc:
                raise SessionError(f"cannot update session {session_id!r}", cause=exc) from exc

            duration_ms = (time.perf_counter() - started) * 1000
            unavailable = [name for name, result in results.items() if not result.is_ok()]
            logger.info(
                "orchestrator.run_complete",
                duration_ms=round(duration_ms, 2),
                succeeded=len(results) - len(unavailable),
                unavailable=unavailable,
                previous_runs=len(context.previous_runs),
            )
            return RunSummary(session=context, report=report, results=results, duration_ms=duration_ms)

    def _open_session(self, session_id: str, meta: RunMeta) -> SessionContext:
        if not session_id:
            raise SessionError("session id must not be empty")
        try:
            return self.sessions.get_or_create(
                session_id,
                module_id=meta.module_id,
                cohort=meta.cohort,
                previous_runs=meta.previous_runs,
            )
        except SessionError:
            raise
        except Exception as exc:
            raise SessionError(f"cannot allocate session {session_id!r}", cause=exc) from exc

    async def _run_specialist(self, call: SpecialistCall, request_data: Any) -> SpecialistResult:
        """Guarded, retried invocation of one specialist."""
        attempt_fn = call.bind(request_data)

        async def guarded() -> AttemptOutcome:
            return await self.guard.guard(
                attempt_fn,
                call.deadline_s,
                name=call.name,
                hard_limit=call.hard_limit_s,
            )

        def on_attempt(attempt: int, outcome: AttemptOutcome, duration_ms: float) -> None:
            self.recorder.record(call.name, outcome.is_success(), duration_ms)

        policy = RetryPolicy(call.retry, classify=self.classify, sleep=self._sleep)
        started = time.perf_counter()
        result = await policy.execute(guarded, name=call.name, on_attempt=on_attempt)
        self.recorder.record_run(call.name, result.is_ok(), (time.perf_counter() - started) * 1000)

        logger.debug("orchestrator.specialist_settled", specialist=call.name, **result.to_dict())
        return result


__all__ = ["Orchestrator", "RunMeta", "RunSummary", "count_records"]

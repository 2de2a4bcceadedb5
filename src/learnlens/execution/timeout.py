"""Deadline guard: race one attempt against a fixed duration.

Manifesto:
    Specialist calls without deadlines are a reliability anti-pattern: one
    hung specialist would hold the whole report hostage. The guard bounds
    each attempt while leaving the decision of what to do next (retry or
    give up) to the retry policy.

    - **Outcome, not exception:** ``guard()`` returns an ``AttemptOutcome``
    - **Cooperative:** The losing operation is not killed at the deadline;
      it may keep running in the background but its result is discarded
    - **Bounded:** Abandoned operations are cancelled once their hard limit
      (deadline × max attempts) has passed, so nothing runs unbounded

Architecture:
    ::

        guard(operation, 30.0)
            │
            ├── task  = operation()          (coroutine, or worker thread for sync callables)
            └── asyncio.wait({task}, timeout=30.0)
                    │
                    ├── task done first  → Success(payload) | Failed(kind, message)
                    └── timer first      → TimedOut(30.0)
                                           task parked in ``abandoned`` until it
                                           finishes or its hard limit cancels it

Examples:
    >>> guard = DeadlineGuard()
    >>> outcome = await guard.guard(partial(fetch_metrics, records), 30.0)
    >>> if isinstance(outcome, TimedOut):
    ...     ...

Guardrails:
    - Sync callables run in a worker thread; a thread cannot be cancelled,
      so the hard limit only stops waiting for it
    - Don't rely on cleanup beyond what the operation itself performs

Tags:
    timeout, deadline, resilience, execution, learnlens
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any

from learnlens.core.logging import get_logger
from learnlens.execution.outcomes import AttemptOutcome, Failed, Success, TimedOut

logger = get_logger(__name__)

Operation = Callable[[], Awaitable[Any]] | Callable[[], Any]


def _start(operation: Operation | Awaitable[Any]) -> asyncio.Future[Any]:
    """Schedule ``operation`` as a task without awaiting it."""
    if inspect.isawaitable(operation):
        return asyncio.ensure_future(operation)
    if inspect.iscoroutinefunction(operation) or inspect.iscoroutinefunction(
        getattr(operation, "__call__", None)
    ):
        return asyncio.ensure_future(operation())
    return asyncio.ensure_future(asyncio.to_thread(operation))


class DeadlineGuard:
    """Races operations against deadlines and tracks the ones it abandons.

    One guard is shared by every specialist of an orchestrator; the set of
    abandoned tasks is the only state it keeps.
    """

    def __init__(self) -> None:
        self._abandoned: set[asyncio.Future[Any]] = set()

    @property
    def abandoned(self) -> int:
        """Number of timed-out operations still running in the background."""
        return len(self._abandoned)

    async def guard(
        self,
        operation: Operation | Awaitable[Any],
        duration: float,
        *,
        name: str = "operation",
        hard_limit: float | None = None,
    ) -> AttemptOutcome:
        """Run ``operation`` and wait at most ``duration`` seconds for it.

        Args:
            operation: Zero-argument callable (async or sync) or an awaitable
            duration: Deadline in seconds
            name: Operation name for logs
            hard_limit: Seconds after start at which an abandoned operation
                is cancelled; ``None`` lets it run to completion

        Returns:
            ``Success`` with the operation's result, ``Failed`` if it raised
            first, or ``TimedOut`` if the deadline elapsed first.

        Raises:
            ValueError: If duration is not positive
        """
        if duration <= 0:
            raise ValueError(f"Timeout must be positive, got {duration}")

        started = time.monotonic()
        task = _start(operation)
        try:
            done, _ = await asyncio.wait({task}, timeout=duration)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            if task.cancelled():
                return Failed(error_kind="CancelledError", message=f"{name} was cancelled")
            exc = task.exception()
            if exc is not None:
                return Failed.from_exception(exc)
            return Success(task.result())

        elapsed = time.monotonic() - started
        logger.warning("deadline.exceeded", operation=name, timeout=duration, elapsed=round(elapsed, 3))
        self._abandon(task, name, None if hard_limit is None else hard_limit - elapsed)
        return TimedOut(timeout=duration)

    def _abandon(self, task: asyncio.Future[Any], name: str, remaining: float | None) -> None:
        """Keep a reference to a timed-out task until it settles."""
        self._abandoned.add(task)
        handle = None
        if remaining is not None:
            handle = asyncio.get_running_loop().call_later(max(remaining, 0.0), task.cancel)

        def _settled(fut: asyncio.Future[Any]) -> None:
            self._abandoned.discard(fut)
            if handle is not None:
                handle.cancel()
            if fut.cancelled():
                logger.debug("deadline.abandoned_cancelled", operation=name)
                return
            # Retrieve the exception so asyncio does not warn about it; the
            # result itself is discarded.
            exc = fut.exception()
            logger.debug(
                "deadline.abandoned_finished",
                operation=name,
                error=None if exc is None else repr(exc),
            )

        task.add_done_callback(_settled)

    def cancel_abandoned(self) -> int:
        """Cancel every abandoned operation now. Returns how many were cancelled."""
        pending = [t for t in self._abandoned if not t.done()]
        for task in pending:
            task.cancel()
        return len(pending)


async def guard(
    operation: Operation | Awaitable[Any],
    duration: float,
    *,
    name: str = "operation",
) -> AttemptOutcome:
    """Race ``operation`` against ``duration`` with a throwaway guard.

    Abandoned work is never cancelled here; use a shared
    :class:`DeadlineGuard` when a hard limit is needed.
    """
    return await DeadlineGuard().guard(operation, duration, name=name)


__all__ = ["DeadlineGuard", "guard"]

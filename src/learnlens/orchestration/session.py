"""Per-session context shared by the runs of one analysis session.

A ``SessionContext`` carries the module and cohort a session analyses and
the history of merged reports it has produced. The history is append-only:
a run never rewrites or drops an earlier entry.

Only the orchestrator writes a context, and it does so after the fan-out
has settled, so a session has a single writer. The store keeps contexts in
process memory for the lifetime of its owner.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from learnlens.core.errors import SessionError
from learnlens.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SessionContext:
    """Module, cohort and run history of one session."""

    session_id: str
    module_id: str | None = None
    cohort: str | None = None
    _runs: list[dict[str, Any]] = field(default_factory=list, repr=False)

    @property
    def previous_runs(self) -> tuple[dict[str, Any], ...]:
        """Reports produced so far, oldest first."""
        return tuple(self._runs)

    def append_run(self, report: Mapping[str, Any]) -> None:
        self._runs.append(dict(report))

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "moduleId": self.module_id,
            "cohort": self.cohort,
            "previousRuns": [dict(r) for r in self._runs],
        }


class SessionStore:
    """In-memory map of session id to context."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionContext] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> SessionContext | None:
        return self._sessions.get(session_id)

    def set(self, context: SessionContext) -> None:
        if not context.session_id:
            raise SessionError("session id must not be empty")
        self._sessions[context.session_id] = context

    def get_or_create(
        self,
        session_id: str,
        *,
        module_id: str | None = None,
        cohort: str | None = None,
        previous_runs: Iterable[Mapping[str, Any]] | None = None,
    ) -> SessionContext:
        """Fetch a session, seeding it from the arguments on first use.

        An existing session keeps its module, cohort and history; seed
        values only fill a module or cohort it does not have yet.
        """
        context = self._sessions.get(session_id)
        if context is None:
            context = SessionContext(session_id=session_id, module_id=module_id, cohort=cohort)
            for run in previous_runs or ():
                context.append_run(run)
            self.set(context)
            logger.debug("session.created", session_id=session_id, seeded_runs=len(context.previous_runs))
            return context

        if context.module_id is None:
            context.module_id = module_id
        if context.cohort is None:
            context.cohort = cohort
        return context

    def append_run(self, session_id: str, report: Mapping[str, Any]) -> SessionContext:
        """Append ``report`` to an existing session's history."""
        context = self._sessions.get(session_id)
        if context is None:
            raise SessionError(f"unknown session {session_id!r}").with_context(session_id=session_id)
        context.append_run(report)
        return context

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

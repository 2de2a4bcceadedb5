"""Analysis service: the component that owns and composes orchestrator runs.

The service holds the process-wide state (metric registry, execution
recorder, session store, report store) and hands it to one
``Orchestrator``. Both the HTTP API and the CLI go through it.

Example:
    >>> service = AnalysisService(LearnLensSettings())
    >>> report = await service.analyze(records, module_id="algebra-1")
    >>> report["sessionId"]
    'algebra-1-2025-01-01T12-00-00-000Z'
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx

from learnlens.core.errors import ValidationError
from learnlens.core.logging import get_logger
from learnlens.core.reports import ReportStore
from learnlens.core.settings import LearnLensSettings
from learnlens.ingest.csv_reader import read_learner_records
from learnlens.observability.metrics import MetricsRegistry
from learnlens.observability.recorder import ExecutionRecorder
from learnlens.orchestration.orchestrator import Orchestrator, RunMeta, RunSummary
from learnlens.orchestration.session import SessionStore
from learnlens.specialists.base import SpecialistCall
from learnlens.specialists.roster import default_roster, remote_roster

logger = get_logger(__name__)


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_session_id(module_id: str | None, moment: datetime) -> str:
    """``{module}-{timestamp}`` with ``:`` and ``.`` replaced by ``-``."""
    stamp = iso_timestamp(moment).replace(":", "-").replace(".", "-")
    return f"{module_id or 'module'}-{stamp}"


class AnalysisService:
    """Runs analyses and keeps their results for the process lifetime.

    Args:
        settings: Orchestration policy and report defaults
        roster: Specialist roster; built from settings when omitted
        registry: Metric registry the recorder mirrors into
        sleep: Backoff sleep handed to the orchestrator
        http_client: Client for remote specialists; created when needed
    """

    def __init__(
        self,
        settings: LearnLensSettings | None = None,
        *,
        roster: Sequence[SpecialistCall] | None = None,
        registry: MetricsRegistry | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or LearnLensSettings()
        self.registry = registry or MetricsRegistry()
        self.recorder = ExecutionRecorder(self.registry)
        self.sessions = SessionStore()
        self.reports = ReportStore()

        self._client = http_client
        self._owns_client = False
        if roster is None:
            if self.settings.specialist_urls:
                if self._client is None:
                    self._client = httpx.AsyncClient(timeout=self.settings.specialist_timeout_s)
                    self._owns_client = True
                roster = remote_roster(self.settings.specialist_urls, self._client, self.settings)
            else:
                roster = default_roster(self.settings)

        self.orchestrator = Orchestrator(roster, self.recorder, self.sessions, sleep=sleep)

    def _new_session_id(self, module_id: str | None) -> str:
        """Timestamped id; ``-2``, ``-3``... when one millisecond yields several."""
        base = make_session_id(module_id, datetime.now(UTC))
        session_id, n = base, 1
        # sessions holds the runs still in flight, reports the finished ones
        while session_id in self.reports or session_id in self.sessions:
            n += 1
            session_id = f"{base}-{n}"
        return session_id

    async def run(
        self,
        records: Sequence[Any],
        *,
        module_id: str | None = None,
        cohort: str | None = None,
        previous_runs: Iterable[Mapping[str, float]] | None = None,
        source: str | None = None,
        csv_file_path: str | None = None,
    ) -> tuple[dict[str, Any], RunSummary]:
        """Analyse ``records`` and return the stored report and the run summary."""
        session_id = self._new_session_id(module_id)
        module_id = module_id or self.settings.default_module_id
        cohort = cohort or self.settings.default_cohort

        logger.info(
            "analysis.start",
            session_id=session_id,
            module_id=module_id,
            cohort=cohort,
            learners=len(records),
        )
        try:
            summary = await self.orchestrator.execute(
                session_id,
                records,
                RunMeta(module_id=module_id, cohort=cohort, previous_runs=tuple(previous_runs or ())),
            )
        finally:
            # the history travels on in report["previousRuns"]
            self.sessions.discard(session_id)

        report: dict[str, Any] = dict(summary.report)
        report.update(
            sessionId=session_id,
            moduleId=module_id,
            cohort=cohort,
            analyzedAt=iso_timestamp(datetime.now(UTC)),
        )
        if source is not None:
            report["source"] = source
        if csv_file_path is not None:
            report["csvFilePath"] = csv_file_path
        report["previousRuns"] = [dict(r) for r in summary.session.previous_runs]

        self.reports.save(session_id, report)
        return report, summary

    async def analyze(
        self,
        records: Sequence[Any],
        *,
        module_id: str | None = None,
        cohort: str | None = None,
        previous_runs: Iterable[Mapping[str, float]] | None = None,
    ) -> dict[str, Any]:
        """Analyse inline learner records."""
        report, _ = await self.run(records, module_id=module_id, cohort=cohort, previous_runs=previous_runs)
        return report

    async def analyze_csv(
        self,
        path: str | Path,
        *,
        module_id: str | None = None,
        cohort: str | None = None,
    ) -> tuple[dict[str, Any], RunSummary]:
        """Analyse a CSV export.

        Raises:
            IngestError: If the file cannot be read or parsed
            ValidationError: If it holds no learner records
        """
        records = await asyncio.to_thread(read_learner_records, path)
        if not records:
            raise ValidationError("CSV file is empty or contains no valid learner responses")
        return await self.run(
            records,
            module_id=module_id,
            cohort=cohort,
            source="csv",
            csv_file_path=str(path),
        )

    def metrics_snapshot(self) -> dict[str, Any]:
        return self.recorder.snapshot()

    def reset_metrics(self) -> None:
        """Administrative reset of the recorder and the mirrored registry."""
        self.recorder.reset()
        self.registry.clear()
        logger.info("metrics.reset")

    async def aclose(self) -> None:
        """Cancel abandoned attempts and close the HTTP client if we made it."""
        cancelled = self.orchestrator.guard.cancel_abandoned()
        if cancelled:
            logger.info("analysis.abandoned_cancelled", count=cancelled)
        if self._owns_client and self._client is not None:
            await self._client.aclose()

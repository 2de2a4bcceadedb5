"""
CLI: ``learnlens analyze`` - analyse a CSV export without starting the API.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import typer

from learnlens.cli.utils import fail, print_json, print_metrics, print_report, print_specialists
from learnlens.core.errors import LearnLensError
from learnlens.core.logging import configure_logging
from learnlens.core.settings import LearnLensSettings
from learnlens.service import AnalysisService


async def _analyze(service: AnalysisService, csv_path: Path, module_id: str | None, cohort: str | None) -> Any:
    try:
        return await service.analyze_csv(csv_path, module_id=module_id, cohort=cohort)
    finally:
        await service.aclose()


def analyze(
    csv_path: Path = typer.Argument(..., help="CSV export of learner responses"),
    module_id: str | None = typer.Option(None, "--module-id", "-m", help="Module identifier"),
    cohort: str | None = typer.Option(None, "--cohort", "-c", help="Cohort name"),
    json_out: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    show_metrics: bool = typer.Option(False, "--show-metrics", help="Print execution metrics after the run"),
) -> None:
    """Analyse learner responses from a CSV file."""
    settings = LearnLensSettings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    service = AnalysisService(settings)

    try:
        report, summary = asyncio.run(_analyze(service, csv_path, module_id, cohort))
    except LearnLensError as exc:
        raise fail(exc) from exc

    if json_out:
        payload = {"success": True, "sessionId": report["sessionId"], "data": report}
        if show_metrics:
            payload["metrics"] = service.metrics_snapshot()
        print_json(payload)
        return

    print_report(report, title=f"Report {report['sessionId']}")
    print_specialists(summary.results)
    if show_metrics:
        print_metrics(service.metrics_snapshot())

"""
CLI output helpers built on rich.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from learnlens.core.errors import LearnLensError

console = Console()
err_console = Console(stderr=True)


def fail(error: LearnLensError) -> typer.Exit:
    """Print ``error`` and return the exit to raise."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    return typer.Exit(code=1)


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_report(report: Mapping[str, Any], *, title: str = "") -> None:
    """Render a report: numeric fields as a table, context fields below it."""
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    table.add_column("metric", style="cyan")
    table.add_column("value", justify="right")
    context: dict[str, Any] = {}
    for key, value in report.items():
        if isinstance(value, float):
            table.add_row(key, f"{value:.4g}")
        elif key != "previousRuns":
            context[key] = value
    console.print(table)
    for key, value in context.items():
        console.print(f"  [cyan]{key}[/cyan]: {value}")


def print_specialists(results: Mapping[str, Any]) -> None:
    """One row per specialist: status, attempts and the reason it was unavailable."""
    table = Table(title="Specialists", show_lines=False, pad_edge=False)
    for col in ("specialist", "status", "attempts", "reason"):
        table.add_column(col, overflow="fold")
    for name, result in results.items():
        info = result.to_dict()
        reason = info.get("reason")
        table.add_row(
            name,
            "[green]ok[/green]" if result.is_ok() else "[yellow]unavailable[/yellow]",
            str(info["attempts"]),
            "" if reason is None else str(reason.get("message", reason.get("kind"))),
        )
    console.print(table)


def print_metrics(snapshot: Mapping[str, Any]) -> None:
    """Render an execution recorder snapshot."""
    per_specialist = snapshot.get("perSpecialist", {})
    if not per_specialist:
        console.print("[dim]No executions recorded.[/dim]")
        return
    table = Table(title="Execution metrics", show_lines=False, pad_edge=False)
    columns = ("attemptsTotal", "successes", "failures", "averageDurationMs")
    table.add_column("specialist", style="cyan")
    for col in columns:
        table.add_column(col, justify="right")
    for name, record in per_specialist.items():
        table.add_row(name, *(str(record[col]) for col in columns))
    console.print(table)
    console.print(f"\n[dim]Success rate: {snapshot['successRatePercent']}%[/dim]")

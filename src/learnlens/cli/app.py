"""
Root Typer application for the learnlens CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from learnlens import __version__
from learnlens.cli.analyze import analyze
from learnlens.cli.serve import serve

app = Typer(
    name="learnlens",
    help="learnlens - concurrent learner analytics.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"learnlens {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """learnlens CLI: analyse learner exports and serve the API."""


app.command("analyze")(analyze)
app.command("serve")(serve)

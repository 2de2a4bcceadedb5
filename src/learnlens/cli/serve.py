"""
CLI: ``learnlens serve`` - start the API server.
"""

from __future__ import annotations

import typer
import uvicorn

from learnlens.api.settings import LearnLensAPISettings
from learnlens.cli.utils import console
from learnlens.core.logging import configure_logging


def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default from settings)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Start the learnlens REST API server."""
    settings = LearnLensAPISettings()
    host = host or settings.host
    port = port or settings.port
    configure_logging(level=log_level, json_format=settings.json_logs)

    console.print(f"[bold green]Starting learnlens API[/bold green] on {host}:{port}")
    uvicorn.run(
        "learnlens.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )

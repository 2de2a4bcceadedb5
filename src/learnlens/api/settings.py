"""
API-specific settings.

Extends :class:`~learnlens.core.settings.LearnLensSettings` with the
parameters that govern the REST transport (bind address, prefix, CORS).
Every value can be overridden with a ``LEARNLENS_`` environment variable.
"""

from __future__ import annotations

from pydantic import Field

from learnlens import __version__
from learnlens.core.settings import LearnLensSettings


class LearnLensAPISettings(LearnLensSettings):
    """Settings for the learnlens REST API.

    Order of precedence (highest → lowest):
        1. Environment variables (``LEARNLENS_PORT``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=5000, description="Bind port")
    debug: bool = Field(default=False, description="Expose exception text in 500 responses")

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="", description="URL prefix for all endpoints")
    api_title: str = Field(default="learnlens API", description="OpenAPI title")
    api_version: str = Field(default=__version__, description="OpenAPI version string")

    # ── CORS ─────────────────────────────────────────────────────────────
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

"""
Health router.

Endpoints:
    GET /health        Service status and roster size
    GET /health/live   Liveness probe, always 200
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from learnlens import __version__
from learnlens.api.deps import Service

_START_TIME = time.monotonic()

router = APIRouter(prefix="/health")


class HealthResponse(BaseModel):
    """Health envelope.

    Fields
    ──────
    status      : ``healthy``
    service     : Service name
    version     : Semver string
    uptime_s    : Seconds since startup
    timestamp   : ISO-8601 UTC
    specialists : Names in the configured roster
    abandoned   : Timed-out attempts still running in the background
    """

    status: Literal["healthy"] = "healthy"
    service: str = "learnlens"
    version: str = __version__
    uptime_s: float = Field(default_factory=lambda: round(time.monotonic() - _START_TIME, 1))
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    specialists: list[str] = Field(default_factory=list)
    abandoned: int = 0


class LivenessResponse(BaseModel):
    status: str = "alive"


@router.get("", response_model=HealthResponse)
def health(service: Service) -> HealthResponse:
    orchestrator = service.orchestrator
    return HealthResponse(
        specialists=[call.name for call in orchestrator.roster],
        abandoned=orchestrator.guard.abandoned,
    )


@router.get("/live", response_model=LivenessResponse)
def liveness() -> LivenessResponse:
    return LivenessResponse()

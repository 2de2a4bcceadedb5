"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root for the HTTP surface:
    the analysis service (and with it the recorder, session store and
    report store) is created here once and shared by every request.

Tags:
    learnlens, api, app-factory, composition-root, FastAPI
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from learnlens.api.deps import get_settings
from learnlens.api.middleware.errors import (
    learnlens_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from learnlens.api.middleware.request_id import RequestIDMiddleware
from learnlens.api.middleware.timing import TimingMiddleware
from learnlens.api.settings import LearnLensAPISettings
from learnlens.core.errors import LearnLensError
from learnlens.core.logging import get_logger
from learnlens.service import AnalysisService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup / shutdown hooks."""
    service: AnalysisService = app.state.service
    logger.info(
        "api.starting",
        version=app.version,
        specialists=[call.name for call in service.orchestrator.roster],
    )
    yield
    await service.aclose()
    logger.info("api.shutting_down")


def create_app(
    *,
    settings: LearnLensAPISettings | None = None,
    service: AnalysisService | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : LearnLensAPISettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    service : AnalysisService | None
        Override the analysis service, e.g. with a custom roster.
    """
    settings = settings or get_settings()
    service = service or AnalysisService(settings)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.service = service
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware, registry=service.registry)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(LearnLensError, learnlens_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from learnlens.api.routers import analyze, csv, health, metrics, reports

    prefix = settings.api_prefix

    # Health endpoints at root level (no prefix) for container healthchecks
    app.include_router(health.router, tags=["health"])

    app.include_router(analyze.router, prefix=prefix, tags=["analyze"])
    app.include_router(csv.router, prefix=prefix, tags=["csv"])
    app.include_router(metrics.router, prefix=prefix, tags=["metrics"])
    app.include_router(reports.router, prefix=prefix, tags=["reports"])

    return app

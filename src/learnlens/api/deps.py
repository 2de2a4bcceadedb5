"""
FastAPI dependency injection.

Usage in routers::

    from learnlens.api.deps import Service

    @router.get("/metrics")
    def metrics(service: Service):
        return service.metrics_snapshot()

The analysis service is created once by :func:`create_app` and stored on
``app.state``; settings are a cached singleton unless the app overrides them.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from learnlens.api.settings import LearnLensAPISettings
from learnlens.service import AnalysisService


@lru_cache(maxsize=1)
def get_settings() -> LearnLensAPISettings:
    """Cached settings, loaded once per process."""
    return LearnLensAPISettings()


def get_service(request: Request) -> AnalysisService:
    """The analysis service owned by the running application."""
    return request.app.state.service


Settings = Annotated[LearnLensAPISettings, Depends(get_settings)]
Service = Annotated[AnalysisService, Depends(get_service)]

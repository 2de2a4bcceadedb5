"""
REST API layer for learnlens.

Provides a FastAPI application factory whose endpoints delegate to
:class:`~learnlens.service.AnalysisService`. All analysis logic lives in
the orchestration layer; this package handles only HTTP concerns:
serialisation, error mapping and request context.

Quick start::

    from learnlens.api import create_app

    app = create_app()  # ready for uvicorn

Tags:
    learnlens, api, REST, FastAPI, transport-layer
"""

from learnlens.api.app import create_app

__all__ = ["create_app"]

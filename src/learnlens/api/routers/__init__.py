"""API routers package.

Manifesto:
    Each router module owns one API area (analysis, CSV ingestion,
    metrics, reports, health) and delegates to ``AnalysisService``.

Tags:
    learnlens, api, routers, REST
"""

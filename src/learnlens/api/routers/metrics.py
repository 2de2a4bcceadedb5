"""
Metrics router: execution recorder snapshot and Prometheus export.

Endpoints:
    GET  /metrics              Per-specialist attempts, successes, failures, durations
    GET  /metrics/prometheus   Text exposition of the metric registry
    POST /metrics/reset        Administrative reset of every counter
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from learnlens.api.deps import Service

router = APIRouter(prefix="/metrics")


@router.get("")
def get_metrics(service: Service) -> dict[str, Any]:
    return {"success": True, "data": service.metrics_snapshot()}


@router.get("/prometheus", response_class=PlainTextResponse)
def prometheus(service: Service) -> PlainTextResponse:
    """Export Prometheus-compatible metrics."""
    return PlainTextResponse(
        content=service.registry.export_prometheus(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


@router.post("/reset")
def reset_metrics(service: Service) -> dict[str, Any]:
    service.reset_metrics()
    return {"success": True, "message": "Metrics reset"}

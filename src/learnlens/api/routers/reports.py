"""
Reports router: finished analyses kept in process memory.

Endpoints:
    GET /reports                    Every stored report
    GET /reports?sessionId=...      One report (404 if unknown)
    GET /reports?moduleId=...       Reports of one module
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from learnlens.api.deps import Service
from learnlens.api.middleware.errors import problem_response
from learnlens.api.schemas.common import ReportsResponse

router = APIRouter()


@router.get("/reports", response_model=ReportsResponse)
def list_reports(
    request: Request,
    service: Service,
    sessionId: str | None = Query(None, description="Return only this session's report"),
    moduleId: str | None = Query(None, description="Return only this module's reports"),
) -> ReportsResponse | JSONResponse:
    if sessionId is not None:
        report = service.reports.get(sessionId)
        if report is None:
            return problem_response(
                status=404,
                title="Report not found",
                detail=f"Session '{sessionId}' has no stored report",
                instance=str(request.url),
            )
        reports = [report]
    elif moduleId is not None:
        reports = service.reports.by_module(moduleId)
    else:
        reports = service.reports.all()
    return ReportsResponse(count=len(reports), data=reports)

"""
Common API schemas: response envelopes and RFC 7807 errors.

Analysis endpoints return :class:`AnalysisResponse`; every 4xx/5xx response
is a :class:`ProblemDetail`.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


# ── RFC 7807 Problem Detail ─────────────────────────────────────────────


class ErrorDetail(BaseModel):
    """Field-level error, e.g. one failed request-body constraint."""

    code: str = Field(description="Machine-readable error code (e.g. 'missing', 'too_short')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Dotted field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Example:
        {
            "type": "about:blank",
            "title": "Validation Failed",
            "status": 400,
            "detail": "learnerResponses: List should have at least 1 item",
            "instance": "http://testserver/analyze",
            "errors": [...]
        }
    """

    type: str = Field(default="about:blank", description="Error type URI")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(default_factory=list)


# ── Success envelopes ────────────────────────────────────────────────────


class AnalysisResponse(BaseModel):
    """Result of ``POST /analyze`` and ``POST /csv/analyze``.

    ``data`` holds every report field plus the context fields
    (``sessionId``, ``moduleId``, ``cohort``, ``analyzedAt``, ``previousRuns``).
    """

    success: Literal[True] = True
    message: str = "Analysis completed successfully"
    sessionId: str
    data: dict[str, Any]


class CsvFilesResponse(BaseModel):
    success: Literal[True] = True
    files: list[str]
    count: int


class ReportsResponse(BaseModel):
    success: Literal[True] = True
    count: int
    data: list[dict[str, Any]]

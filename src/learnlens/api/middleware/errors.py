"""
Error-handling middleware: maps learnlens errors to RFC 7807 responses.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from learnlens.api.schemas.common import ErrorDetail, ProblemDetail
from learnlens.core.errors import ErrorCategory, LearnLensError, categorize_error
from learnlens.core.logging import get_logger

logger = get_logger(__name__)

# ── Error category → HTTP status mapping ─────────────────────────────────

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.PARSE: 400,
    ErrorCategory.NETWORK: 503,
    ErrorCategory.SPECIALIST: 502,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.ORCHESTRATION: 500,
    ErrorCategory.INTERNAL: 500,
    ErrorCategory.UNKNOWN: 500,
}


def status_for_category(category: ErrorCategory) -> int:
    """Resolve an error category to an HTTP status, defaulting to 500."""
    return CATEGORY_TO_STATUS.get(category, 500)


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        errors=[ErrorDetail(**e) for e in errors or []],
    )
    return JSONResponse(status_code=status, content=body.model_dump())


async def learnlens_error_handler(request: Request, exc: LearnLensError) -> JSONResponse:
    """Typed errors raised by the service layer."""
    status = status_for_category(exc.category)
    log = logger.warning if status < 500 else logger.error
    log("api.request_failed", path=request.url.path, status=status, **exc.to_dict())
    return problem_response(
        status=status,
        title="Validation Failed" if status == 400 else "Analysis Failed",
        detail=exc.message,
        instance=str(request.url),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request bodies that fail schema validation → 400."""
    errors = [
        {
            "code": str(err.get("type", "invalid")),
            "message": str(err.get("msg", "")),
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body") or None,
        }
        for err in exc.errors()
    ]
    detail = "; ".join(f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors)
    return problem_response(
        status=400,
        title="Validation Failed",
        detail=detail,
        instance=str(request.url),
        errors=errors,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: 500 with ProblemDetail."""
    logger.error(
        "api.unhandled_exception",
        path=request.url.path,
        category=categorize_error(exc).value,
        error=repr(exc),
    )
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )

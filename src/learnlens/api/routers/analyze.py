"""
Analyze router: run the specialist roster over inline learner records.

Endpoints:
    POST /analyze    Analyse ``learnerResponses`` and return the merged report
"""

from __future__ import annotations

from fastapi import APIRouter

from learnlens.api.deps import Service
from learnlens.api.schemas.common import AnalysisResponse
from learnlens.ingest.schemas import AnalyzeRequest

router = APIRouter()


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(body: AnalyzeRequest, service: Service) -> AnalysisResponse:
    """Analyse learner responses.

    Specialists that fail or time out contribute 0 for their fields; the
    response always carries the full field set.
    """
    report = await service.analyze(
        body.learnerResponses,
        module_id=body.moduleId,
        cohort=body.cohort,
        previous_runs=body.previousRuns,
    )
    return AnalysisResponse(sessionId=report["sessionId"], data=report)

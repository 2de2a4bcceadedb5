"""
CSV router: analyse learner exports stored on disk.

Endpoints:
    POST /csv/analyze    Read a CSV export and analyse it
    GET  /csv/files      List CSV exports in a directory
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from learnlens.api.deps import Service
from learnlens.api.schemas.common import AnalysisResponse, CsvFilesResponse
from learnlens.ingest.csv_reader import list_csv_files
from learnlens.ingest.schemas import CsvAnalyzeRequest

router = APIRouter(prefix="/csv")


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_csv(body: CsvAnalyzeRequest, service: Service) -> AnalysisResponse:
    """Analyse the learner responses in ``csvFilePath``.

    Relative paths resolve against the server's working directory.
    """
    report, _ = await service.analyze_csv(body.csvFilePath, module_id=body.moduleId, cohort=body.cohort)
    return AnalysisResponse(
        message="Analysis completed successfully from CSV",
        sessionId=report["sessionId"],
        data=report,
    )


@router.get("/files", response_model=CsvFilesResponse)
def list_files(
    service: Service,
    directory: str | None = Query(None, description="Directory to scan (defaults to the data dir)"),
) -> CsvFilesResponse:
    files = list_csv_files(directory or service.settings.data_dir)
    return CsvFilesResponse(files=files, count=len(files))

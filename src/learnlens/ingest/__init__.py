"""learnlens ingest: request schemas and CSV exports."""

from learnlens.ingest.csv_reader import list_csv_files, read_learner_records
from learnlens.ingest.schemas import AnalyzeRequest, CsvAnalyzeRequest, LearnerRecord, ResponseItem

__all__ = [
    "list_csv_files",
    "read_learner_records",
    "AnalyzeRequest",
    "CsvAnalyzeRequest",
    "LearnerRecord",
    "ResponseItem",
]

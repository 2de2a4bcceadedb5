"""Read learner responses from CSV exports.

One CSV row is one response item. Rows are grouped into learner records by
learner id, keeping first-seen order. Exports from different tools name
their columns differently, so each field accepts a few header variants:

    learner_id   learner_id | learnerId | Learner ID
    question_id  question_id | questionId | Question ID
    answer       answer | Answer
    correct      correct | Correct
    completed    completed | Completed
    rating       rating | Rating
    timestamp    timestamp | Timestamp | created_at | createdAt

Blank cells drop the field from the response, except for ``correct`` and
``completed``: when the export has the column at all, a blank cell counts
as false.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

import pydantic

from learnlens.core.errors import IngestError
from learnlens.core.logging import get_logger
from learnlens.ingest.schemas import LearnerRecord

logger = get_logger(__name__)

COLUMN_VARIANTS: dict[str, tuple[str, ...]] = {
    "learner_id": ("learner_id", "learnerId", "Learner ID"),
    "question_id": ("question_id", "questionId", "Question ID"),
    "answer": ("answer", "Answer"),
    "correct": ("correct", "Correct"),
    "completed": ("completed", "Completed"),
    "rating": ("rating", "Rating"),
    "timestamp": ("timestamp", "Timestamp", "created_at", "createdAt"),
}

TRUE_VALUES = frozenset({"true", "1", "yes", "y"})


def parse_bool(value: Any) -> bool:
    """``true``/``1``/``yes``/``y`` (any case) are true; anything else is false."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return False


def _column(row: dict[str, Any], field: str) -> str | None:
    """First non-empty value among the header variants of ``field``."""
    for name in COLUMN_VARIANTS[field]:
        value = row.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _response(row: dict[str, Any]) -> dict[str, Any]:
    response: dict[str, Any] = {}
    for field in ("question_id", "answer", "timestamp"):
        value = _column(row, field)
        if value is not None:
            response[field] = value

    # a flag column in the header always yields a flag; blank reads as false
    for field in ("correct", "completed"):
        if any(name in row for name in COLUMN_VARIANTS[field]):
            response[field] = parse_bool(_column(row, field) or "")

    rating = _column(row, "rating")
    if rating is not None:
        try:
            response["rating"] = float(rating)
        except ValueError:
            logger.debug("csv.rating_dropped", value=rating)
    return response


def read_learner_records(path: str | Path) -> list[LearnerRecord]:
    """Parse a CSV export into learner records.

    Relative paths resolve against the working directory. Rows without a
    learner id are skipped.

    Raises:
        IngestError: If the file cannot be read or a record is invalid
    """
    resolved = Path(path).expanduser().resolve()
    logger.info("csv.read_start", path=str(resolved))

    learners: dict[str, dict[str, Any]] = {}
    rows = 0
    try:
        with open(resolved, "r", encoding="utf-8-sig", newline="") as f:
            for row in csv.DictReader(f):
                if not any(v and v.strip() for v in row.values() if isinstance(v, str)):
                    continue
                rows += 1
                learner_id = _column(row, "learner_id")
                if learner_id is None:
                    logger.warning("csv.row_skipped", reason="missing learner_id", row=rows)
                    continue
                learner = learners.setdefault(learner_id, {"learner_id": learner_id, "responses": []})
                learner["responses"].append(_response(row))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise IngestError(f"Failed to read CSV file: {exc}", cause=exc).with_context(
            path=str(resolved)
        ) from exc

    try:
        records = [LearnerRecord.model_validate(learner) for learner in learners.values()]
    except pydantic.ValidationError as exc:
        raise IngestError(
            "CSV data does not match expected format",
            cause=exc,
        ).with_context(path=str(resolved)) from exc

    logger.info("csv.read_complete", path=str(resolved), rows=rows, learners=len(records))
    return records


def list_csv_files(directory: str | Path = "./data") -> list[str]:
    """Absolute paths of the ``*.csv`` files in ``directory``, sorted.

    The directory is created when it does not exist yet.
    """
    resolved = Path(directory).expanduser().resolve()
    if not resolved.exists():
        resolved.mkdir(parents=True, exist_ok=True)
        logger.info("csv.data_dir_created", path=str(resolved))
    return sorted(str(p) for p in resolved.glob("*.csv") if p.is_file())


__all__ = ["read_learner_records", "list_csv_files", "parse_bool"]

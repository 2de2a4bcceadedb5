"""Built-in specialists that score learner records in process.

Each scorer takes the raw request data, applies the input guardrail and
returns a mapping of the fields it owns. They are deterministic and free of
side effects; the orchestrator runs them in worker threads.
"""

from __future__ import annotations

from collections.abc import Sequence
from statistics import fmean
from typing import Any

from learnlens.ingest.schemas import LearnerRecord
from learnlens.specialists.base import ensure_records

MASTERY_THRESHOLD = 0.7
INCOMPLETE_WEIGHT = 0.5


def _mean(values: Sequence[float]) -> float:
    return fmean(values) if values else 0.0


def _engagement(records: Sequence[LearnerRecord]) -> float:
    shares = [
        sum(item.answered for item in r.responses) / len(r.responses) if r.responses else 0.0
        for r in records
    ]
    return _mean(shares)


def _completion(records: Sequence[LearnerRecord]) -> float:
    return sum(r.completed for r in records) / len(records) if records else 0.0


def _objective(records: Sequence[LearnerRecord]) -> float:
    graded = [item.correct for r in records for item in r.responses if item.correct is not None]
    return _mean(graded)


def _dropout(records: Sequence[LearnerRecord]) -> float:
    started = [r for r in records if r.responses]
    return sum(not r.completed for r in started) / len(records) if records else 0.0


def score_engagement(request_data: Any) -> dict[str, float]:
    """Share of items answered per learner, averaged over learners."""
    return {"engagementRate": _engagement(ensure_records(request_data))}


def score_completion(request_data: Any) -> dict[str, float]:
    return {"completionRate": _completion(ensure_records(request_data))}


def score_mastery(request_data: Any) -> dict[str, float]:
    """Objective score and score-to-retention (incomplete learners count half)."""
    records = ensure_records(request_data)
    retention = [
        r.objective_score * (1.0 if r.completed else INCOMPLETE_WEIGHT) for r in records
    ]
    return {"objectiveScore": _objective(records), "STR": _mean(retention)}


def score_rating(request_data: Any) -> dict[str, float]:
    """Mean learner rating.

    Without any rating the result is 0, which the 1..5 bound rejects; the
    field then falls back to its default.
    """
    records = ensure_records(request_data)
    ratings = [item.rating for r in records for item in r.responses if item.rating is not None]
    return {"averageRating": _mean(ratings)}


def score_market(request_data: Any) -> dict[str, float]:
    """Market-readiness indicators.

    strPercent:   % of learners who completed with objective score >= 0.7
    csr:          share of learners who started but did not complete
    cod:          share of graded items answered incorrectly
    insightIndex: mean of engagement, completion, objective score and 1 - csr
    """
    records = ensure_records(request_data)
    total = len(records)

    mastered = sum(r.completed and r.objective_score >= MASTERY_THRESHOLD for r in records)
    graded = [item.correct for r in records for item in r.responses if item.correct is not None]
    csr = _dropout(records)
    insight = _mean([_engagement(records), _completion(records), _objective(records), 1.0 - csr])

    return {
        "strPercent": 100.0 * mastered / total if total else 0.0,
        "csr": csr,
        "cod": sum(not c for c in graded) / len(graded) if graded else 0.0,
        "insightIndex": min(max(insight, 0.0), 1.0),
    }


__all__ = [
    "score_engagement",
    "score_completion",
    "score_mastery",
    "score_rating",
    "score_market",
]

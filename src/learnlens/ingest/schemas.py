"""
Learner-response schemas.

A request carries one entry per learner; each entry holds that learner's
response items. Every item field is optional so partially filled exports
(no ratings, no timestamps) still validate.

Example:
    {
        "learner_id": "L-001",
        "responses": [
            {"question_id": "q1", "answer": "B", "correct": true, "completed": true, "rating": 4}
        ]
    }
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResponseItem(BaseModel):
    """One answered (or skipped) item of a learning module."""

    model_config = ConfigDict(extra="allow")

    question_id: str | None = Field(default=None, description="Question identifier")
    answer: Any | None = Field(default=None, description="Raw answer given by the learner")
    correct: bool | None = Field(default=None, description="Whether the answer was correct")
    completed: bool | None = Field(default=None, description="Whether the learner completed the module")
    rating: float | None = Field(default=None, ge=1, le=5, description="Learner rating, 1–5")
    timestamp: str | None = Field(default=None, description="ISO-8601 response time")

    @property
    def answered(self) -> bool:
        return self.answer is not None or self.correct is not None


class LearnerRecord(BaseModel):
    """All responses of one learner."""

    learner_id: str = Field(min_length=1, description="Unique learner identifier")
    responses: list[ResponseItem] = Field(default_factory=list)

    @property
    def completed(self) -> bool:
        return any(item.completed for item in self.responses)

    @property
    def objective_score(self) -> float:
        """Share of graded items answered correctly (0.0 when nothing was graded)."""
        graded = [item.correct for item in self.responses if item.correct is not None]
        return sum(graded) / len(graded) if graded else 0.0


class AnalyzeRequest(BaseModel):
    """Body of ``POST /analyze``."""

    learnerResponses: list[LearnerRecord] = Field(min_length=1)
    moduleId: str | None = Field(default=None, min_length=1)
    cohort: str | None = Field(default=None, min_length=1)
    previousRuns: list[dict[str, float]] | None = Field(
        default=None,
        description="Earlier merged reports for trend comparison",
    )


class CsvAnalyzeRequest(BaseModel):
    """Body of ``POST /csv/analyze``."""

    csvFilePath: str = Field(min_length=1)
    moduleId: str | None = Field(default=None, min_length=1)
    cohort: str | None = Field(default=None, min_length=1)

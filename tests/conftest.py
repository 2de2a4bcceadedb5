"""
Shared pytest fixtures for learnlens tests.

This module provides:
- A fresh execution recorder (mirrored into its own metric registry)
- A no-wait sleep for retry policies, recording the delays it was asked for
- Learner-record fixtures and a CSV export on disk
- An analysis service with zero backoff for API and CLI tests
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from learnlens.core.settings import LearnLensSettings
from learnlens.observability.metrics import MetricsRegistry
from learnlens.observability.recorder import ExecutionRecorder


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that returns immediately."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def registry() -> MetricsRegistry:
    return MetricsRegistry()


@pytest.fixture()
def recorder(registry: MetricsRegistry) -> ExecutionRecorder:
    return ExecutionRecorder(registry)


@pytest.fixture()
def no_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def fast_settings(tmp_path: Path) -> LearnLensSettings:
    """Short deadline, no backoff, data dir under tmp_path."""
    return LearnLensSettings(
        specialist_timeout_s=2.0,
        initial_delay_s=0.0,
        max_delay_s=0.0,
        data_dir=tmp_path / "data",
        _env_file=None,
    )


@pytest.fixture()
def learner_records() -> list[dict[str, Any]]:
    """Three learners.

    L1: 2/2 correct, completed, ratings 4 and 5
    L2: 1/2 correct, completed, rating 3
    L3: 0/1 correct, one of two items answered, not completed
    """
    return [
        {
            "learner_id": "L1",
            "responses": [
                {"question_id": "q1", "answer": "A", "correct": True, "completed": True, "rating": 4},
                {"question_id": "q2", "answer": "B", "correct": True, "completed": True, "rating": 5},
            ],
        },
        {
            "learner_id": "L2",
            "responses": [
                {"question_id": "q1", "answer": "C", "correct": False, "completed": True, "rating": 3},
                {"question_id": "q2", "answer": "B", "correct": True, "completed": True},
            ],
        },
        {
            "learner_id": "L3",
            "responses": [
                {"question_id": "q1", "answer": "D", "correct": False, "completed": False},
                {"question_id": "q2"},
            ],
        },
    ]


CSV_TEXT = """learner_id,question_id,answer,correct,completed,rating,timestamp
L1,q1,A,true,true,4,2025-01-01T10:00:00Z
L1,q2,B,yes,true,5,2025-01-01T10:01:00Z
L2,q1,C,false,1,3,2025-01-01T10:02:00Z
L2,q2,B,1,y,,2025-01-01T10:03:00Z
L3,q1,D,0,no,not-a-number,2025-01-01T10:04:00Z
,q9,X,true,true,5,2025-01-01T10:05:00Z
"""


@pytest.fixture()
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "responses.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return path

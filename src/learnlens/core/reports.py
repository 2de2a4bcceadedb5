"""In-memory store for finished analysis reports.

Reports are kept per session id for the lifetime of the process. Durable
storage is left to whoever consumes ``GET /reports``.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from learnlens.core.logging import get_logger

logger = get_logger(__name__)


class ReportStore:
    """Session id → stored report (merged metrics plus context fields)."""

    def __init__(self) -> None:
        self._reports: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._reports

    def save(self, session_id: str, report: Mapping[str, Any]) -> None:
        with self._lock:
            self._reports[session_id] = dict(report)
        logger.info("report.saved", session_id=session_id)

    def get(self, session_id: str) -> dict[str, Any] | None:
        with self._lock:
            report = self._reports.get(session_id)
            return dict(report) if report is not None else None

    def by_module(self, module_id: str) -> list[dict[str, Any]]:
        """Reports for one module, oldest first."""
        with self._lock:
            return [dict(r) for r in self._reports.values() if r.get("moduleId") == module_id]

    def all(self) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(r) for r in self._reports.values()]

    def clear(self) -> None:
        with self._lock:
            self._reports.clear()

"""learnlens orchestration: fan-out, merge and session history."""

from learnlens.orchestration.merge import MergedReport, declared_fields, merge_results
from learnlens.orchestration.orchestrator import Orchestrator, RunMeta, RunSummary
from learnlens.orchestration.session import SessionContext, SessionStore

__all__ = [
    "MergedReport",
    "declared_fields",
    "merge_results",
    "Orchestrator",
    "RunMeta",
    "RunSummary",
    "SessionContext",
    "SessionStore",
]

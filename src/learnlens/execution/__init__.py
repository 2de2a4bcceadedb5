"""learnlens execution: bounding and retrying one specialist.

::

    RetryPolicy.execute
      └── DeadlineGuard.guard(attempt, deadline)
            └── AttemptOutcome   Success | TimedOut | Failed
      └── SpecialistResult       Succeeded | Unavailable
"""

from learnlens.execution.outcomes import (
    AttemptOutcome,
    Failed,
    SpecialistResult,
    Succeeded,
    Success,
    TimedOut,
    Unavailable,
)
from learnlens.execution.retry import (
    Classification,
    ExponentialBackoff,
    RetryConfig,
    RetryPolicy,
    classify_outcome,
)
from learnlens.execution.timeout import DeadlineGuard, guard

__all__ = [
    "AttemptOutcome",
    "Failed",
    "SpecialistResult",
    "Succeeded",
    "Success",
    "TimedOut",
    "Unavailable",
    "Classification",
    "ExponentialBackoff",
    "RetryConfig",
    "RetryPolicy",
    "classify_outcome",
    "DeadlineGuard",
    "guard",
]

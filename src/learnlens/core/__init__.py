"""learnlens core: structured errors, logging, settings and the report store.

Layer 1 -- Errors & logging
    errors.py      LearnLensError hierarchy and the transient classifier
    logging.py     structlog configuration and context binding

Layer 2 -- Configuration & storage
    settings.py    LearnLensSettings (pydantic-settings, ``LEARNLENS_*``)
    reports.py     In-memory report store
"""

from learnlens.core.errors import (
    ErrorCategory,
    LearnLensError,
    SessionError,
    TransientError,
    ValidationError,
    is_transient,
)
from learnlens.core.logging import configure_logging, get_logger

__all__ = [
    "ErrorCategory",
    "LearnLensError",
    "SessionError",
    "TransientError",
    "ValidationError",
    "is_transient",
    "configure_logging",
    "get_logger",
]

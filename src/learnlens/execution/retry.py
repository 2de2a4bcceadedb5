"""Retry policy with exponential backoff over guarded attempts.

The policy re-invokes an attempt function (usually a deadline-guarded
specialist call) until it succeeds, fails permanently, or runs out of
attempts, and folds the attempts into one terminal ``SpecialistResult``.

Example:
    >>> from learnlens.execution.retry import ExponentialBackoff, RetryPolicy
    >>>
    >>> strategy = ExponentialBackoff(base_delay=1.0, max_delay=5.0, jitter=False)
    >>> [strategy.next_delay(n) for n in range(4)]
    [1.0, 2.0, 4.0, 5.0]
    >>>
    >>> policy = RetryPolicy(RetryConfig(max_attempts=3))
    >>> result = await policy.execute(attempt_fn, name="engagement")
"""

import asyncio
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from learnlens.core.errors import is_transient
from learnlens.core.logging import get_logger
from learnlens.execution.outcomes import (
    AttemptOutcome,
    Failed,
    SpecialistResult,
    Succeeded,
    Success,
    TimedOut,
    Unavailable,
)

logger = get_logger(__name__)


class Classification(str, Enum):
    """Whether a failed attempt is worth retrying."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"


def classify_outcome(outcome: AttemptOutcome) -> Classification:
    """Default classifier.

    Timeouts are always transient. A failure is transient when its error is
    (see :func:`learnlens.core.errors.is_transient`); without the original
    exception the message alone decides.
    """
    if isinstance(outcome, TimedOut):
        return Classification.TRANSIENT
    if isinstance(outcome, Failed):
        error = outcome.error if outcome.error is not None else Exception(outcome.message)
        return Classification.TRANSIENT if is_transient(error) else Classification.PERMANENT
    raise TypeError(f"cannot classify a successful outcome: {outcome!r}")


class RetryStrategy(ABC):
    """Abstract base for retry delay strategies."""

    @abstractmethod
    def next_delay(self, attempt: int) -> float:
        """Calculate delay before next retry attempt.

        Args:
            attempt: Zero-based retry number (0 = first retry)

        Returns:
            Delay in seconds before next attempt
        """
        ...


@dataclass
class ExponentialBackoff(RetryStrategy):
    """Exponential backoff with optional jitter.

    Delay = min(base_delay * (multiplier ** attempt), max_delay) ± jitter

    Attributes:
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap in seconds
        multiplier: Exponential multiplier (default: 2)
        jitter: Add randomness to prevent thundering herd
        jitter_range: Range of jitter as fraction of delay (0.0-1.0)
    """

    base_delay: float = 1.0
    max_delay: float = 5.0
    multiplier: float = 2.0
    jitter: bool = False
    jitter_range: float = 0.25

    def next_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay."""
        delay = min(
            self.base_delay * (self.multiplier ** attempt),
            self.max_delay,
        )

        if self.jitter:
            jitter_amount = delay * self.jitter_range
            delay += random.uniform(-jitter_amount, jitter_amount)
            delay = min(max(0.0, delay), self.max_delay)

        return delay


@dataclass(frozen=True)
class RetryConfig:
    """Retry budget for one specialist.

    Attributes:
        max_attempts: Total attempts including the first one
        initial_delay_s: Delay before the first retry
        max_delay_s: Cap on any single delay
        jitter: Randomise delays by ±25%
    """

    max_attempts: int = 3
    initial_delay_s: float = 1.0
    max_delay_s: float = 5.0
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay_s < 0 or self.max_delay_s < 0:
            raise ValueError("retry delays must be non-negative")

    def strategy(self) -> ExponentialBackoff:
        return ExponentialBackoff(
            base_delay=self.initial_delay_s,
            max_delay=self.max_delay_s,
            jitter=self.jitter,
        )

    def worst_case_seconds(self, deadline_s: float) -> float:
        """Upper bound on one specialist's wall time: attempts × (deadline + max delay)."""
        return self.max_attempts * (deadline_s + self.max_delay_s)


AttemptFn = Callable[[], Awaitable[AttemptOutcome]]
Classifier = Callable[[AttemptOutcome], Classification]
#: Called after every attempt with (attempt number, outcome, attempt duration in ms).
AttemptHook = Callable[[int, AttemptOutcome, float], None]
#: Called before every retry with (attempt number, outcome, delay in seconds).
RetryHook = Callable[[int, AttemptOutcome, float], None]


class RetryPolicy:
    """Runs an attempt function until it yields a terminal result.

    Algorithm:
        1. Invoke the attempt function (attempt counter starts at 1)
        2. ``Success`` → ``Succeeded`` immediately
        3. Otherwise classify; ``PERMANENT`` or last attempt → ``Unavailable``
        4. ``TRANSIENT`` → sleep (initial delay, doubling, capped), retry

    ``sleep`` is injectable so tests can observe delays without waiting.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        classify: Classifier = classify_outcome,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or RetryConfig()
        self.classify = classify
        self._sleep = sleep

    async def execute(
        self,
        operation: AttemptFn,
        *,
        name: str = "operation",
        on_attempt: AttemptHook | None = None,
        on_retry: RetryHook | None = None,
    ) -> SpecialistResult:
        """Execute ``operation`` with retry logic.

        Args:
            operation: Async function producing one ``AttemptOutcome``
            name: Operation name for logs
            on_attempt: Callback after each attempt
            on_retry: Callback before each retry

        Returns:
            ``Succeeded`` with the payload, or ``Unavailable`` with the
            last failed outcome.
        """
        strategy = self.config.strategy()
        attempt = 1

        while True:
            started = time.perf_counter()
            outcome = await operation()
            duration_ms = (time.perf_counter() - started) * 1000

            if on_attempt is not None:
                on_attempt(attempt, outcome, duration_ms)

            if isinstance(outcome, Success):
                if attempt > 1:
                    logger.info("retry.recovered", operation=name, attempt=attempt)
                return Succeeded(outcome.payload, attempts=attempt)

            classification = self.classify(outcome)
            if classification is Classification.PERMANENT or attempt >= self.config.max_attempts:
                logger.warning(
                    "retry.gave_up",
                    operation=name,
                    attempt=attempt,
                    classification=classification.value,
                    outcome=outcome.to_dict(),
                )
                return Unavailable(outcome, attempts=attempt)

            delay = strategy.next_delay(attempt - 1)
            logger.info(
                "retry.attempt_failed",
                operation=name,
                attempt=attempt,
                delay_s=round(delay, 3),
                outcome=outcome.to_dict(),
            )
            if on_retry is not None:
                on_retry(attempt, outcome, delay)

            await self._sleep(delay)
            attempt += 1


async def execute(
    operation: AttemptFn,
    classify: Classifier = classify_outcome,
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 5.0,
) -> SpecialistResult:
    """Functional form of :meth:`RetryPolicy.execute`."""
    policy = RetryPolicy(
        RetryConfig(max_attempts=max_attempts, initial_delay_s=initial_delay, max_delay_s=max_delay),
        classify=classify,
    )
    return await policy.execute(operation)


__all__ = [
    "Classification",
    "classify_outcome",
    "RetryStrategy",
    "ExponentialBackoff",
    "RetryConfig",
    "RetryPolicy",
    "execute",
]

"""Shared settings for learnlens.

``LearnLensSettings`` holds the orchestration policy (deadline, retry
budget, backoff) and the ambient knobs (log level, data directory). The
API layer extends it with transport settings.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first use
    - **Environment-driven:** ``LEARNLENS_*`` env vars and a ``.env`` file
    - **Sensible defaults:** 30s deadline, 3 attempts, 1s → 5s backoff

Examples:
    >>> settings = LearnLensSettings(max_attempts=5)
    >>> settings.retry_config().max_attempts
    5

Tags:
    settings, configuration, pydantic, environment, learnlens
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from learnlens.execution.retry import RetryConfig


class LearnLensSettings(BaseSettings):
    """Common settings for every learnlens entry point.

    Fields
    ──────
    specialist_timeout_s : Per-attempt deadline for one specialist call
    max_attempts         : Attempts per specialist (1 initial + retries)
    initial_delay_s      : First backoff delay
    max_delay_s          : Backoff cap
    retry_jitter         : Randomise backoff delays by ±25%
    specialist_urls      : Remote endpoints per specialist (JSON in the env var)
    log_level            : Structlog log level
    json_logs            : Force JSON (True) / console (False); None = auto
    data_dir             : Directory scanned for CSV learner exports
    """

    model_config = SettingsConfigDict(
        env_prefix="LEARNLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Orchestration policy ─────────────────────────────────────
    specialist_timeout_s: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    initial_delay_s: float = Field(default=1.0, ge=0)
    max_delay_s: float = Field(default=5.0, ge=0)
    retry_jitter: bool = False

    specialist_urls: dict[str, str] = Field(
        default_factory=dict,
        description="Specialist name → HTTP endpoint; unlisted specialists are scored in process",
    )

    # ── Report defaults ──────────────────────────────────────────
    default_module_id: str = "UnknownModule"
    default_cohort: str = "DefaultCohort"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Storage ──────────────────────────────────────────────────
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding CSV learner exports",
    )

    @model_validator(mode="after")
    def _check_backoff(self) -> LearnLensSettings:
        if self.initial_delay_s > self.max_delay_s:
            raise ValueError(
                f"initial_delay_s ({self.initial_delay_s}) must not exceed "
                f"max_delay_s ({self.max_delay_s})"
            )
        return self

    def retry_config(self) -> RetryConfig:
        """Retry configuration applied to every specialist in the roster."""
        return RetryConfig(
            max_attempts=self.max_attempts,
            initial_delay_s=self.initial_delay_s,
            max_delay_s=self.max_delay_s,
            jitter=self.retry_jitter,
        )

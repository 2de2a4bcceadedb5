"""Report fields and the default specialist roster.

The roster order is the merge order of the report:

    numberOfLearners (orchestrator) · engagementRate · completionRate ·
    averageRating · objectiveScore · STR · strPercent · csr · cod · insightIndex
"""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from learnlens.core.errors import ConfigError
from learnlens.core.settings import LearnLensSettings
from learnlens.specialists.base import MetricField, SpecialistCall, SpecialistFn
from learnlens.specialists.local import (
    score_completion,
    score_engagement,
    score_market,
    score_mastery,
    score_rating,
)
from learnlens.specialists.remote import RemoteSpecialist

SPECIALIST_FIELDS: dict[str, tuple[MetricField, ...]] = {
    "engagement": (MetricField("engagementRate"),),
    "completion": (MetricField("completionRate"),),
    "rating": (MetricField("averageRating", lower=1.0, upper=5.0),),
    "mastery": (MetricField("objectiveScore"), MetricField("STR")),
    "market": (
        MetricField("strPercent", upper=100.0),
        MetricField("csr"),
        MetricField("cod"),
        MetricField("insightIndex"),
    ),
}

LOCAL_SCORERS: dict[str, SpecialistFn] = {
    "engagement": score_engagement,
    "completion": score_completion,
    "rating": score_rating,
    "mastery": score_mastery,
    "market": score_market,
}


def build_roster(
    invokers: Mapping[str, SpecialistFn],
    settings: LearnLensSettings | None = None,
) -> tuple[SpecialistCall, ...]:
    """Pair each specialist's callable with its fields and the configured policy.

    Raises:
        ConfigError: If ``invokers`` names a specialist without declared fields
    """
    settings = settings or LearnLensSettings()
    unknown = set(invokers) - set(SPECIALIST_FIELDS)
    if unknown:
        raise ConfigError(f"no field declarations for specialists: {sorted(unknown)}")

    retry = settings.retry_config()
    return tuple(
        SpecialistCall(
            name=name,
            invoke=invokers[name],
            fields=fields,
            deadline_s=settings.specialist_timeout_s,
            retry=retry,
        )
        for name, fields in SPECIALIST_FIELDS.items()
        if name in invokers
    )


def default_roster(settings: LearnLensSettings | None = None) -> tuple[SpecialistCall, ...]:
    """Every specialist, scored in process."""
    return build_roster(LOCAL_SCORERS, settings)


def remote_roster(
    urls: Mapping[str, str],
    client: httpx.AsyncClient,
    settings: LearnLensSettings | None = None,
) -> tuple[SpecialistCall, ...]:
    """Specialists served over HTTP; any specialist without a URL is scored locally."""
    invokers: dict[str, SpecialistFn] = dict(LOCAL_SCORERS)
    for name, url in urls.items():
        invokers[name] = RemoteSpecialist(name, url, client)
    return build_roster(invokers, settings)


__all__ = ["SPECIALIST_FIELDS", "LOCAL_SCORERS", "build_roster", "default_roster", "remote_roster"]

"""Merge terminal specialist results into one report.

The merge is a pure function of the roster, the terminal results and the
locally computed fields. Keys follow a fixed order: local fields first,
then each specialist's fields in roster order. Identical inputs therefore
serialise to identical bytes.

A field is taken from its owning specialist's payload when that specialist
succeeded; otherwise it gets the field's default (0). Nothing records
which values are defaults.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from learnlens.core.errors import ConfigError
from learnlens.execution.outcomes import SpecialistResult, Succeeded
from learnlens.specialists.base import SpecialistCall

MergedReport = dict[str, float]


def declared_fields(roster: Sequence[SpecialistCall], local_fields: Sequence[str] = ()) -> tuple[str, ...]:
    """Every report field in merge order.

    Raises:
        ConfigError: If two owners declare the same field
    """
    seen: dict[str, str] = {name: "orchestrator" for name in local_fields}
    for call in roster:
        for name in call.field_names:
            if name in seen:
                raise ConfigError(f"field {name!r} is declared by both {seen[name]!r} and {call.name!r}")
            seen[name] = call.name
    return tuple(seen)


def merge_results(
    roster: Sequence[SpecialistCall],
    results: Mapping[str, SpecialistResult],
    local_fields: Mapping[str, float] | None = None,
) -> MergedReport:
    """Build the merged report.

    Args:
        roster: Specialists in roster order
        results: Terminal result per specialist name; a missing entry is
            treated like an unavailable specialist
        local_fields: Fields computed by the orchestrator itself

    Returns:
        Field name → value, in merge order
    """
    local_fields = dict(local_fields or {})
    declared_fields(roster, tuple(local_fields))

    report: MergedReport = {name: float(value) for name, value in local_fields.items()}
    for call in roster:
        result = results.get(call.name)
        payload = result.payload if isinstance(result, Succeeded) else {}
        for metric in call.fields:
            value = payload.get(metric.name, metric.default)
            report[metric.name] = float(value)
    return report


__all__ = ["MergedReport", "declared_fields", "merge_results"]

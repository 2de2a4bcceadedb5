"""learnlens specialists: the contract and the built-in roster."""

from learnlens.specialists.base import MetricField, SpecialistCall, ensure_records
from learnlens.specialists.remote import RemoteSpecialist
from learnlens.specialists.roster import SPECIALIST_FIELDS, build_roster, default_roster, remote_roster

__all__ = [
    "MetricField",
    "SpecialistCall",
    "ensure_records",
    "RemoteSpecialist",
    "SPECIALIST_FIELDS",
    "build_roster",
    "default_roster",
    "remote_roster",
]

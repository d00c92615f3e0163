"""Patience meter primitive: job-security bands and event impact tables.

The meter is a bounded 0-100 scalar. Raw values are never shown to the
player; :mod:`front_office.views` turns them into labels.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import clamp, round_half_up


class JobSecurityLevel(str, Enum):
    SECURE = "secure"
    STABLE = "stable"
    WARM_SEAT = "warmSeat"
    HOT_SEAT = "hotSeat"
    FIRED = "fired"


# Ordered from the top band down; each band is [min, max] inclusive.
PATIENCE_THRESHOLDS: Dict[JobSecurityLevel, Tuple[int, int]] = {
    JobSecurityLevel.SECURE: (70, 100),
    JobSecurityLevel.STABLE: (50, 69),
    JobSecurityLevel.WARM_SEAT: (35, 49),
    JobSecurityLevel.HOT_SEAT: (20, 34),
    JobSecurityLevel.FIRED: (0, 19),
}

_STATUS_LABELS: Dict[JobSecurityLevel, str] = {
    JobSecurityLevel.SECURE: "secure",
    JobSecurityLevel.STABLE: "stable",
    JobSecurityLevel.WARM_SEAT: "warm seat",
    JobSecurityLevel.HOT_SEAT: "hot seat",
    JobSecurityLevel.FIRED: "danger",
}


@dataclass(frozen=True)
class PatienceModifier:
    event: str
    min_impact: int
    max_impact: int
    description: str


PATIENCE_POSITIVE: List[PatienceModifier] = [
    PatienceModifier("superBowlWin", 25, 40, "Won the Super Bowl"),
    PatienceModifier("playoffAppearance", 8, 15, "Made the playoffs"),
    PatienceModifier("winningSeason", 5, 12, "Finished with a winning record"),
    PatienceModifier("exceededExpectations", 10, 20, "Beat preseason expectations"),
    PatienceModifier("majorFASigningWorks", 3, 8, "Big free agent signing paid off"),
    PatienceModifier("draftPickBecomesStar", 5, 12, "Draft pick developed into a star"),
]

PATIENCE_NEGATIVE: List[PatienceModifier] = [
    PatienceModifier("losingSeason", -15, -8, "Finished with a losing record"),
    PatienceModifier("defiedOwner", -20, -10, "Ignored an owner directive"),
    PatienceModifier("losingStreak5Plus", -12, -5, "Lost five or more in a row"),
    PatienceModifier("blowoutLoss", -6, -2, "Embarrassing blowout loss"),
    PatienceModifier("missedExpectedPlayoffs", -20, -10, "Missed the playoffs when expected to make them"),
    PatienceModifier("majorFASigningBusts", -10, -4, "Big free agent signing flopped"),
    PatienceModifier("topDraftPickBusts", -12, -5, "Top draft pick failed to develop"),
    PatienceModifier("badPR", -12, -5, "Public relations disaster"),
]

_MODIFIERS_BY_EVENT: Dict[str, PatienceModifier] = {
    modifier.event: modifier for modifier in PATIENCE_POSITIVE + PATIENCE_NEGATIVE
}

PERSONALITY_ADJUSTMENT_CAP = 0.3


def apply_patience_change(current: float, delta: float) -> int:
    return round_half_up(clamp(current + delta, 0, 100))


def get_job_security_level(value: float) -> JobSecurityLevel:
    for level, (minimum, _) in PATIENCE_THRESHOLDS.items():
        if value >= minimum:
            return level
    return JobSecurityLevel.FIRED


def get_job_security_status(value: float) -> str:
    """Player-facing label for the band: secure, stable, warm seat, hot seat or danger."""

    return _STATUS_LABELS[get_job_security_level(value)]


def would_be_fired(current: float, delta: float) -> bool:
    return get_job_security_level(apply_patience_change(current, delta)) is JobSecurityLevel.FIRED


def get_patience_modifier(event: str) -> Optional[PatienceModifier]:
    """Return the primary-table row for ``event`` or ``None`` if it has none."""

    return _MODIFIERS_BY_EVENT.get(event)


def scale_impact_for_patience(base: float, owner_patience: float) -> int:
    """Lean ``base`` toward the owner's temperament.

    Patient owners amplify good news and soften bad news; impatient owners do
    the reverse. The adjustment never exceeds 30% of the base magnitude.
    """

    factor = clamp(
        (owner_patience - 50) / 100, -PERSONALITY_ADJUSTMENT_CAP, PERSONALITY_ADJUSTMENT_CAP
    )
    return round_half_up(base + abs(base) * factor)


def calculate_patience_impact(event: str, owner_patience: float, random_factor: float) -> int:
    """Interpolate the event's impact range by ``random_factor`` and apply temperament.

    Unknown events have no impact.
    """

    modifier = get_patience_modifier(event)
    if modifier is None:
        return 0
    base = modifier.min_impact + (modifier.max_impact - modifier.min_impact) * random_factor
    return scale_impact_for_patience(base, owner_patience)


def validate_patience_value(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return 0 <= value <= 100


__all__ = [
    "JobSecurityLevel",
    "PATIENCE_NEGATIVE",
    "PATIENCE_POSITIVE",
    "PATIENCE_THRESHOLDS",
    "PatienceModifier",
    "apply_patience_change",
    "calculate_patience_impact",
    "get_job_security_level",
    "get_job_security_status",
    "get_patience_modifier",
    "scale_impact_for_patience",
    "validate_patience_value",
    "would_be_fired",
]

"""Patience meter tracking: history, trends and player-facing status."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ..models import Owner, clamp, round_half_up, to_plain
from ..patience import (
    JobSecurityLevel,
    PATIENCE_THRESHOLDS,
    apply_patience_change,
    get_job_security_level,
    get_job_security_status,
    validate_patience_value,
)

# Bands from most to least secure.
_LADDER = sorted(PATIENCE_THRESHOLDS.items(), key=lambda item: item[1][0], reverse=True)

# Level -> floor that must be held to stay in it; the bottom band has none.
_HOLD_THRESHOLDS: Dict[JobSecurityLevel, Optional[int]] = {
    level: (low if index < len(_LADDER) - 1 else None)
    for index, (level, (low, _)) in enumerate(_LADDER)
}

# Level -> value needed to climb one band.
_IMPROVE_THRESHOLDS: Dict[JobSecurityLevel, Optional[int]] = {
    level: (_LADDER[index - 1][1][0] if index else None)
    for index, (level, _) in enumerate(_LADDER)
}


@dataclass
class PatienceHistoryEntry:
    week: int
    season: int
    value: int
    event_description: Optional[str] = None


@dataclass
class PatienceMeterState:
    owner_id: str
    current_value: int
    history: List[PatienceHistoryEntry] = field(default_factory=list)
    season_start_value: int = 50
    last_week_value: int = 50
    consecutive_declines: int = 0
    consecutive_improvements: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatienceMeterState":
        return cls(
            owner_id=data["owner_id"],
            current_value=data["current_value"],
            history=[PatienceHistoryEntry(**item) for item in data.get("history", [])],
            season_start_value=data.get("season_start_value", data["current_value"]),
            last_week_value=data.get("last_week_value", data["current_value"]),
            consecutive_declines=data.get("consecutive_declines", 0),
            consecutive_improvements=data.get("consecutive_improvements", 0),
        )


@dataclass
class PatienceViewModel:
    status: str
    trend: str
    trend_description: str
    weekly_change: str
    season_change: str
    is_at_risk: bool
    urgency_level: str


@dataclass
class PatienceSummary:
    total_changes: int = 0
    positive_changes: int = 0
    negative_changes: int = 0
    biggest_gain: int = 0
    biggest_loss: int = 0
    average_change: float = 0.0


def create_patience_meter_state(
    owner_id: str, initial_value: float = 50, current_week: int = 1, current_season: int = 1
) -> PatienceMeterState:
    value = round_half_up(clamp(initial_value, 0, 100))
    return PatienceMeterState(
        owner_id=owner_id,
        current_value=value,
        history=[PatienceHistoryEntry(current_week, current_season, value, "Initial hire")],
        season_start_value=value,
        last_week_value=value,
    )


def create_from_owner(owner: Owner, current_week: int = 1, current_season: int = 1) -> PatienceMeterState:
    return create_patience_meter_state(owner.id, owner.patience_meter, current_week, current_season)


def update_patience_value(
    state: PatienceMeterState,
    change: int,
    week: int,
    season: int,
    event_description: str,
    history_cap: Optional[int] = None,
) -> PatienceMeterState:
    new_value = apply_patience_change(state.current_value, change)
    declines = state.consecutive_declines
    improvements = state.consecutive_improvements
    if change < 0:
        declines += 1
        improvements = 0
    elif change > 0:
        improvements += 1
        declines = 0

    history = [*state.history, PatienceHistoryEntry(week, season, new_value, event_description)]
    if history_cap is not None:
        history = history[-history_cap:]
    return replace(
        state,
        current_value=new_value,
        last_week_value=state.current_value,
        history=history,
        consecutive_declines=declines,
        consecutive_improvements=improvements,
    )


def start_new_season(state: PatienceMeterState) -> PatienceMeterState:
    return replace(state, season_start_value=state.current_value)


def get_current_security_level(state: PatienceMeterState) -> JobSecurityLevel:
    return get_job_security_level(state.current_value)


def calculate_trend(state: PatienceMeterState) -> str:
    if len(state.history) < 3:
        return "stable"
    recent = state.history[-5:]
    difference = recent[-1].value - recent[0].value
    if difference >= 5:
        return "improving"
    if difference <= -5:
        return "declining"
    return "stable"


def get_trend_description(trend: str, state: PatienceMeterState) -> str:
    level = get_current_security_level(state)
    if trend == "improving":
        if level in (JobSecurityLevel.HOT_SEAT, JobSecurityLevel.WARM_SEAT):
            return "Owner confidence is recovering"
        return "Owner is increasingly pleased with your performance"
    if trend == "declining":
        if level in (JobSecurityLevel.SECURE, JobSecurityLevel.STABLE):
            return "Recent results have raised some concerns"
        return "Owner patience is wearing thin"
    return {
        JobSecurityLevel.SECURE: "Your position remains strong",
        JobSecurityLevel.STABLE: "Owner remains satisfied with direction",
        JobSecurityLevel.WARM_SEAT: "Your position requires improvement",
        JobSecurityLevel.HOT_SEAT: "Your job security is in serious jeopardy",
    }.get(level, "Your position is uncertain")


def get_weekly_change(state: PatienceMeterState) -> str:
    diff = state.current_value - state.last_week_value
    if diff > 2:
        return "improved"
    if diff < -2:
        return "worsened"
    return "unchanged"


def get_season_change(state: PatienceMeterState) -> str:
    diff = state.current_value - state.season_start_value
    if diff >= 20:
        return "much better"
    if diff >= 8:
        return "better"
    if diff <= -20:
        return "much worse"
    if diff <= -8:
        return "worse"
    return "same"


def get_urgency_level(state: PatienceMeterState) -> str:
    level = get_current_security_level(state)
    declining = calculate_trend(state) == "declining"
    if level is JobSecurityLevel.SECURE:
        return "none"
    if level is JobSecurityLevel.STABLE:
        return "low" if declining else "none"
    if level is JobSecurityLevel.WARM_SEAT:
        return "medium" if declining else "low"
    if level is JobSecurityLevel.HOT_SEAT:
        return "critical" if declining else "high"
    return "critical"


def is_at_risk(state: PatienceMeterState) -> bool:
    return get_current_security_level(state) in (JobSecurityLevel.HOT_SEAT, JobSecurityLevel.FIRED)


def create_patience_view_model(state: PatienceMeterState) -> PatienceViewModel:
    trend = calculate_trend(state)
    return PatienceViewModel(
        status=get_job_security_status(state.current_value),
        trend=trend,
        trend_description=get_trend_description(trend, state),
        weekly_change=get_weekly_change(state),
        season_change=get_season_change(state),
        is_at_risk=is_at_risk(state),
        urgency_level=get_urgency_level(state),
    )


def get_impact_description(change: float) -> str:
    """Qualitative label shown to the player instead of the numeric delta."""

    if change >= 25:
        return "major boost"
    if change >= 15:
        return "significant boost"
    if change >= 8:
        return "moderate boost"
    if change >= 3:
        return "slight boost"
    if change > -3:
        return "no change"
    if change > -8:
        return "slight concern"
    if change > -15:
        return "moderate concern"
    if change > -25:
        return "significant concern"
    return "major concern"


def get_distance_to_next_threshold(state: PatienceMeterState) -> Optional[int]:
    """Points of cushion above the current band's floor; ``None`` once fired."""

    threshold = _HOLD_THRESHOLDS[get_current_security_level(state)]
    if threshold is None:
        return None
    return state.current_value - threshold


def get_points_to_improve(state: PatienceMeterState) -> Optional[int]:
    threshold = _IMPROVE_THRESHOLDS[get_current_security_level(state)]
    if threshold is None:
        return None
    return threshold - state.current_value


def calculate_recovery_modifier(owner_patience: float) -> float:
    return 0.5 + owner_patience / 100


def calculate_decline_modifier(owner_patience: float) -> float:
    return 1.5 - owner_patience / 100


def apply_personality_modifiers(base_change: float, owner_patience: float) -> int:
    """Patient owners recover faster and sour slower; impatient owners the reverse."""

    if base_change > 0:
        return round_half_up(base_change * calculate_recovery_modifier(owner_patience))
    return round_half_up(base_change * calculate_decline_modifier(owner_patience))


def get_patience_summary(state: PatienceMeterState) -> PatienceSummary:
    if len(state.history) < 2:
        return PatienceSummary()
    summary = PatienceSummary(total_changes=len(state.history) - 1)
    total = 0
    for previous, current in zip(state.history, state.history[1:]):
        change = current.value - previous.value
        if change > 0:
            summary.positive_changes += 1
            summary.biggest_gain = max(summary.biggest_gain, change)
        elif change < 0:
            summary.negative_changes += 1
            summary.biggest_loss = min(summary.biggest_loss, change)
        total += change
    summary.average_change = round_half_up(total / summary.total_changes * 10) / 10
    return summary


def sync_with_owner(state: PatienceMeterState, owner: Owner) -> Owner:
    return replace(owner, patience_meter=state.current_value)


def validate_patience_meter_state(state: PatienceMeterState) -> bool:
    if not state.owner_id or not isinstance(state.owner_id, str):
        return False
    for value in (state.current_value, state.season_start_value, state.last_week_value):
        if not validate_patience_value(value):
            return False
    if state.consecutive_declines < 0 or state.consecutive_improvements < 0:
        return False
    for entry in state.history:
        if not validate_patience_value(entry.value):
            return False
        if entry.week < 0 or entry.season < 0:
            return False
    return True


__all__ = [
    "PatienceHistoryEntry",
    "PatienceMeterState",
    "PatienceSummary",
    "PatienceViewModel",
    "apply_personality_modifiers",
    "calculate_decline_modifier",
    "calculate_recovery_modifier",
    "calculate_trend",
    "create_from_owner",
    "create_patience_meter_state",
    "create_patience_view_model",
    "get_current_security_level",
    "get_distance_to_next_threshold",
    "get_impact_description",
    "get_patience_summary",
    "get_points_to_improve",
    "get_season_change",
    "get_trend_description",
    "get_urgency_level",
    "get_weekly_change",
    "is_at_risk",
    "start_new_season",
    "sync_with_owner",
    "update_patience_value",
    "validate_patience_meter_state",
]

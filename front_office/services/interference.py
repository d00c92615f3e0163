"""Owner intervention detection, compliance ledger and consequences."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..models import (
    DemandType,
    ExpectationTier,
    Owner,
    OwnerDemand,
    Severity,
    TeamState,
    TriggerType,
    clamp,
    round_half_up,
    to_plain,
)
from ..patience import apply_patience_change, would_be_fired
from ..rng import RandomSource

EXPECTED_WIN_PCT: Dict[ExpectationTier, float] = {
    ExpectationTier.REBUILD: 0.25,
    ExpectationTier.DEVELOPING: 0.4,
    ExpectationTier.COMPETITIVE: 0.5,
    ExpectationTier.CONTENDER: 0.6,
    ExpectationTier.CHAMPIONSHIP: 0.7,
}


class ComplianceStatus(str, Enum):
    PENDING = "pending"
    COMPLIED = "complied"
    DEFIED = "defied"
    EXPIRED = "expired"


@dataclass
class InterventionTrigger:
    triggered: bool
    type: TriggerType
    severity: Severity = Severity.MILD
    description: str = ""


@dataclass
class ComplianceRecord:
    demand_id: str
    status: ComplianceStatus
    issued_week: int
    resolved_week: Optional[int] = None
    consequence_applied: bool = False


@dataclass
class InterferenceConsequence:
    patience_change: int
    trust_change: int
    description: str
    fired_immediately: bool = False


@dataclass
class InterferenceState:
    team_id: str
    compliance_history: List[ComplianceRecord] = field(default_factory=list)
    total_defiances: int = 0
    total_compliances: int = 0
    consecutive_defiances: int = 0
    last_intervention_week: Optional[int] = None

    def record_for(self, demand_id: str) -> Optional[ComplianceRecord]:
        for record in self.compliance_history:
            if record.demand_id == demand_id:
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterferenceState":
        return cls(
            team_id=data["team_id"],
            compliance_history=[
                ComplianceRecord(
                    demand_id=item["demand_id"],
                    status=ComplianceStatus(item["status"]),
                    issued_week=item["issued_week"],
                    resolved_week=item.get("resolved_week"),
                    consequence_applied=item.get("consequence_applied", False),
                )
                for item in data.get("compliance_history", [])
            ],
            total_defiances=data.get("total_defiances", 0),
            total_compliances=data.get("total_compliances", 0),
            consecutive_defiances=data.get("consecutive_defiances", 0),
            last_intervention_week=data.get("last_intervention_week"),
        )


def create_interference_state(team_id: str) -> InterferenceState:
    return InterferenceState(team_id=team_id)


def _quiet(trigger_type: TriggerType) -> InterventionTrigger:
    return InterventionTrigger(triggered=False, type=trigger_type)


# --- detectors -------------------------------------------------------------


def detect_losing_streak_intervention(owner: Owner, team_state: TeamState) -> InterventionTrigger:
    threshold = owner.personality.intervention_triggers.losing_streak_length
    streak = team_state.current_losing_streak
    if streak < threshold:
        return _quiet(TriggerType.LOSING_STREAK)
    over = streak - threshold
    severity = Severity.SEVERE if over >= 3 else Severity.MODERATE if over >= 1 else Severity.MILD
    return InterventionTrigger(
        triggered=True,
        type=TriggerType.LOSING_STREAK,
        severity=severity,
        description=f"{streak} game losing streak has caught the owner's attention",
    )


def detect_fan_approval_intervention(owner: Owner, team_state: TeamState) -> InterventionTrigger:
    floor = owner.personality.intervention_triggers.fan_approval_floor
    if team_state.fan_approval >= floor:
        return _quiet(TriggerType.FAN_APPROVAL)
    under = floor - team_state.fan_approval
    severity = Severity.SEVERE if under >= 20 else Severity.MODERATE if under >= 10 else Severity.MILD
    return InterventionTrigger(
        triggered=True,
        type=TriggerType.FAN_APPROVAL,
        severity=severity,
        description=f"Fan approval at {team_state.fan_approval}% is below the owner's tolerance",
    )


def detect_media_scrutiny_intervention(owner: Owner, team_state: TeamState) -> InterventionTrigger:
    threshold = owner.personality.intervention_triggers.media_scrutiny_threshold
    if team_state.media_scrutiny <= threshold:
        return _quiet(TriggerType.MEDIA_SCRUTINY)
    over = team_state.media_scrutiny - threshold
    severity = Severity.SEVERE if over >= 30 else Severity.MODERATE if over >= 15 else Severity.MILD
    return InterventionTrigger(
        triggered=True,
        type=TriggerType.MEDIA_SCRUTINY,
        severity=severity,
        description="Negative media attention has the owner concerned",
    )


def detect_season_performance_intervention(
    owner: Owner, team_state: TeamState
) -> InterventionTrigger:
    """Compare win percentage against the expectation tier from week 8 on."""

    if team_state.current_week < 8:
        return _quiet(TriggerType.SEASON_PERFORMANCE)
    games = team_state.season_wins + team_state.season_losses
    if games == 0:
        return _quiet(TriggerType.SEASON_PERFORMANCE)

    win_pct = team_state.season_wins / games
    expected = EXPECTED_WIN_PCT[ExpectationTier(team_state.season_expectation)]
    underperformance = expected - win_pct
    # 0.15 for the most patient owners, tightening to 0.10
    threshold = 0.15 - (100 - owner.personality.traits.patience) / 100 * 0.05
    if underperformance <= threshold:
        return _quiet(TriggerType.SEASON_PERFORMANCE)

    if underperformance > 0.25:
        severity = Severity.SEVERE
    elif underperformance > 0.15:
        severity = Severity.MODERATE
    else:
        severity = Severity.MILD
    return InterventionTrigger(
        triggered=True,
        type=TriggerType.SEASON_PERFORMANCE,
        severity=severity,
        description=(
            f"Team is underperforming expectations ({round_half_up(win_pct * 100)}% wins vs "
            f"{round_half_up(expected * 100)}% expected)"
        ),
    )


def ego_minimum_gap(ego: int) -> int:
    return max(3, 8 - math.floor(ego / 20))


def detect_ego_intervention(
    owner: Owner,
    current_week: int,
    last_intervention_week: Optional[int],
    rng: RandomSource,
) -> InterventionTrigger:
    """Unprovoked intervention from owners who need to feel involved."""

    ego = owner.personality.traits.ego
    if ego < 70:
        return _quiet(TriggerType.EGO)
    weeks_since = (
        current_week - last_intervention_week if last_intervention_week is not None else current_week
    )
    if weeks_since < ego_minimum_gap(ego):
        return _quiet(TriggerType.EGO)
    if rng.random() >= (ego - 70) / 100:
        return _quiet(TriggerType.EGO)
    return InterventionTrigger(
        triggered=True,
        type=TriggerType.EGO,
        severity=Severity.MILD,
        description="The owner wants to make their presence felt",
    )


def detect_all_interventions(
    owner: Owner,
    team_state: TeamState,
    state: InterferenceState,
    rng: RandomSource,
) -> List[InterventionTrigger]:
    """Run every detector, returning fired triggers in priority order:
    losing streak, fan approval, media scrutiny, season performance, ego."""

    candidates = [
        detect_losing_streak_intervention(owner, team_state),
        detect_fan_approval_intervention(owner, team_state),
        detect_media_scrutiny_intervention(owner, team_state),
        detect_season_performance_intervention(owner, team_state),
        detect_ego_intervention(owner, team_state.current_week, state.last_intervention_week, rng),
    ]
    return [trigger for trigger in candidates if trigger.triggered]


def get_most_severe_trigger(triggers: List[InterventionTrigger]) -> Optional[InterventionTrigger]:
    """Highest severity wins; on a tie the earlier trigger in priority order is kept."""

    most: Optional[InterventionTrigger] = None
    for trigger in triggers:
        if most is None or trigger.severity.rank > most.severity.rank:
            most = trigger
    return most


# --- compliance ledger -----------------------------------------------------


def _trim_history(records: List[ComplianceRecord], cap: Optional[int]) -> List[ComplianceRecord]:
    """Drop the oldest resolved records once the ledger exceeds ``cap``.

    Pending records are always kept.
    """

    if cap is None or len(records) <= cap:
        return records
    excess = len(records) - cap
    trimmed: List[ComplianceRecord] = []
    for record in records:
        if excess > 0 and record.status is not ComplianceStatus.PENDING:
            excess -= 1
            continue
        trimmed.append(record)
    return trimmed


def _resolve(
    state: InterferenceState, demand_id: str, status: ComplianceStatus, week: int
) -> List[ComplianceRecord]:
    return [
        replace(record, status=status, resolved_week=week, consequence_applied=True)
        if record.demand_id == demand_id
        else record
        for record in state.compliance_history
    ]


def record_compliance(
    state: InterferenceState, demand_id: str, current_week: int, history_cap: Optional[int] = None
) -> InterferenceState:
    return replace(
        state,
        compliance_history=_trim_history(
            _resolve(state, demand_id, ComplianceStatus.COMPLIED, current_week), history_cap
        ),
        total_compliances=state.total_compliances + 1,
        consecutive_defiances=0,
    )


def record_defiance(
    state: InterferenceState,
    demand_id: str,
    current_week: int,
    history_cap: Optional[int] = None,
    status: ComplianceStatus = ComplianceStatus.DEFIED,
) -> InterferenceState:
    return replace(
        state,
        compliance_history=_trim_history(_resolve(state, demand_id, status, current_week), history_cap),
        total_defiances=state.total_defiances + 1,
        consecutive_defiances=state.consecutive_defiances + 1,
    )


def track_new_demand(
    state: InterferenceState,
    demand: OwnerDemand,
    current_week: int,
    history_cap: Optional[int] = None,
) -> InterferenceState:
    record = ComplianceRecord(
        demand_id=demand.id,
        status=ComplianceStatus.PENDING,
        issued_week=current_week,
    )
    return replace(
        state,
        compliance_history=_trim_history([*state.compliance_history, record], history_cap),
        last_intervention_week=current_week,
    )


def check_expired_demands(
    owner: Owner,
    state: InterferenceState,
    current_week: int,
    history_cap: Optional[int] = None,
) -> Tuple[List[OwnerDemand], InterferenceState]:
    """Convert pending demands whose deadline has passed into defiances.

    Expired records are marked ``expired``; they count toward the defiance
    totals exactly like an explicit defiance.
    """

    expired: List[OwnerDemand] = []
    updated = state
    for demand in owner.active_demands:
        if demand.deadline > current_week:
            continue
        record = updated.record_for(demand.id)
        if record is not None and record.status is ComplianceStatus.PENDING:
            expired.append(demand)
            updated = record_defiance(
                updated, demand.id, current_week, history_cap, status=ComplianceStatus.EXPIRED
            )
    return expired, updated


# --- consequences ----------------------------------------------------------


def calculate_compliance_consequence(
    owner: Owner, demand_type: DemandType
) -> InterferenceConsequence:
    control_factor = owner.personality.traits.control / 100
    return InterferenceConsequence(
        patience_change=round_half_up(5 * (1 - control_factor * 0.5)),
        trust_change=round_half_up(3 * (1 + control_factor * 0.3)),
        description="Owner appreciates your cooperation",
    )


def calculate_defiance_consequence(
    owner: Owner,
    demand_type: DemandType,
    consecutive_defiances: int,
    current_patience: int,
) -> InterferenceConsequence:
    """Penalty for ignoring a demand.

    ``fired_immediately`` is a look-ahead on ``current_patience``; nothing is
    applied to the owner here.
    """

    traits = owner.personality.traits
    control_multiplier = 1 + (traits.control - 50) / 100
    patience_loss = round_half_up(-15 * control_multiplier)
    trust_loss = round_half_up(-10 * control_multiplier)

    stacking = 1 + consecutive_defiances * 0.25
    patience_loss = round_half_up(patience_loss * stacking)
    trust_loss = round_half_up(trust_loss * stacking)

    loyalty_softening = (traits.loyalty - 50) / 200
    patience_loss = round_half_up(patience_loss * (1 - loyalty_softening))

    fired = would_be_fired(current_patience, patience_loss)
    if fired:
        description = "Your defiance was the final straw. You have been fired."
    elif consecutive_defiances >= 2:
        description = "The owner is losing patience with your repeated defiance"
    else:
        description = "The owner is unhappy with your decision to ignore their request"

    return InterferenceConsequence(
        patience_change=patience_loss,
        trust_change=trust_loss,
        description=description,
        fired_immediately=fired,
    )


def apply_interference_consequence(owner: Owner, consequence: InterferenceConsequence) -> Owner:
    return replace(
        owner,
        patience_meter=apply_patience_change(owner.patience_meter, consequence.patience_change),
        trust_level=int(clamp(owner.trust_level + consequence.trust_change, 0, 100)),
    )


def get_compliance_rate(state: InterferenceState) -> Optional[int]:
    total = state.total_compliances + state.total_defiances
    if total == 0:
        return None
    return round_half_up(state.total_compliances / total * 100)


def get_compliance_description(state: InterferenceState) -> str:
    rate = get_compliance_rate(state)
    if rate is None:
        return "unknown"
    if rate >= 90:
        return "exemplary"
    if rate >= 70:
        return "cooperative"
    if rate >= 50:
        return "independent"
    if rate >= 30:
        return "defiant"
    return "rebellious"


def should_generate_demand(
    owner: Owner,
    triggers: List[InterventionTrigger],
    has_active_demand: bool,
    rng: RandomSource,
) -> bool:
    control = owner.personality.traits.control
    if has_active_demand and control < 80:
        return False
    if not triggers:
        return False
    if any(t.severity is Severity.SEVERE for t in triggers):
        return True
    if any(t.severity is Severity.MODERATE for t in triggers):
        return rng.random() < 0.7
    return rng.random() < control / 100 * 0.5


__all__ = [
    "ComplianceRecord",
    "ComplianceStatus",
    "EXPECTED_WIN_PCT",
    "InterferenceConsequence",
    "InterferenceState",
    "InterventionTrigger",
    "apply_interference_consequence",
    "calculate_compliance_consequence",
    "calculate_defiance_consequence",
    "check_expired_demands",
    "create_interference_state",
    "detect_all_interventions",
    "detect_ego_intervention",
    "detect_fan_approval_intervention",
    "detect_losing_streak_intervention",
    "detect_media_scrutiny_intervention",
    "detect_season_performance_intervention",
    "ego_minimum_gap",
    "get_compliance_description",
    "get_compliance_rate",
    "get_most_severe_trigger",
    "record_compliance",
    "record_defiance",
    "should_generate_demand",
    "track_new_demand",
]

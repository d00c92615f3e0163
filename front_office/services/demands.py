"""Owner demand generation: weighted type lottery, targets, deadlines."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..models import DemandType, Owner, OwnerDemand, SecondaryTrait, Severity, TeamState, TriggerType
from ..rng import RandomSource, pick, token, weighted_choice
from .interference import InterventionTrigger


@dataclass
class PlayerInfo:
    id: str
    first_name: str
    last_name: str
    position: str
    overall: int
    age: int = 25
    salary: int = 0
    is_starter: bool = False
    is_star: bool = False
    is_struggling: bool = False
    is_free_agent: bool = False

    @property
    def label(self) -> str:
        return f"{self.first_name} {self.last_name} ({self.position})"


@dataclass
class CoachInfo:
    id: str
    first_name: str
    last_name: str
    role: str
    win_percentage: Optional[float] = None
    years_with_team: int = 0
    is_struggling: bool = False


@dataclass
class ProspectInfo:
    id: str
    first_name: str
    last_name: str
    position: str
    projected_round: int = 1
    hype_level: str = "prospect"  # unknown, sleeper, prospect, star, generational


@dataclass
class DemandContext:
    """World snapshot the generator picks targets from."""

    current_week: int
    current_season: int = 1
    team_state: Optional[TeamState] = None
    available_players: List[PlayerInfo] = field(default_factory=list)
    available_coaches: List[CoachInfo] = field(default_factory=list)
    draft_prospects: List[ProspectInfo] = field(default_factory=list)
    trade_targets: List[PlayerInfo] = field(default_factory=list)
    team_roster: List[PlayerInfo] = field(default_factory=list)


@dataclass
class CompletedAction:
    type: DemandType
    target_id: Optional[str] = None


@dataclass
class DemandDisplayInfo:
    title: str
    urgency: str
    weeks_remaining: int
    consequence: str


BASE_DEMAND_WEIGHTS: Dict[DemandType, int] = {
    DemandType.SIGN_PLAYER: 25,
    DemandType.FIRE_COACH: 25,
    DemandType.DRAFT_PLAYER: 20,
    DemandType.TRADE_FOR: 20,
    DemandType.OTHER: 10,
}

TRIGGER_DEMAND_WEIGHTS: Dict[TriggerType, Dict[DemandType, int]] = {
    TriggerType.LOSING_STREAK: {DemandType.FIRE_COACH: 40, DemandType.SIGN_PLAYER: 30, DemandType.TRADE_FOR: 30},
    TriggerType.FAN_APPROVAL: {DemandType.SIGN_PLAYER: 50, DemandType.TRADE_FOR: 30, DemandType.FIRE_COACH: 20},
    TriggerType.MEDIA_SCRUTINY: {DemandType.FIRE_COACH: 35, DemandType.SIGN_PLAYER: 35, DemandType.OTHER: 30},
    TriggerType.SEASON_PERFORMANCE: {DemandType.FIRE_COACH: 40, DemandType.TRADE_FOR: 30, DemandType.SIGN_PLAYER: 30},
    TriggerType.EGO: {DemandType.DRAFT_PLAYER: 40, DemandType.SIGN_PLAYER: 30, DemandType.OTHER: 30},
}

# Weeks of runway per type, before the patience bonus.
DEADLINE_RANGES: Dict[DemandType, Tuple[int, int]] = {
    DemandType.SIGN_PLAYER: (2, 6),
    DemandType.FIRE_COACH: (1, 3),
    DemandType.DRAFT_PLAYER: (4, 8),
    DemandType.TRADE_FOR: (2, 5),
    DemandType.OTHER: (3, 6),
}

CONSEQUENCES: Dict[Severity, Tuple[str, ...]] = {
    Severity.MILD: (
        "The owner will be disappointed",
        "Trust will be affected",
        "Expect some pushback",
    ),
    Severity.MODERATE: (
        "Your job security will decrease significantly",
        "The owner will lose confidence in your leadership",
        "Expect increased scrutiny of your decisions",
    ),
    Severity.SEVERE: (
        "Your position will be in serious jeopardy",
        "This could be the final straw",
        "Failure is not an option at this point",
    ),
}

OTHER_DIRECTIVES: Tuple[Tuple[str, str], ...] = (
    ("Improve team chemistry and locker room culture", "Trust in your leadership will decrease"),
    ("Reduce player conflicts and drama", "Media scrutiny will increase further"),
    ("Show progress in the next few weeks", "Your job security will be questioned"),
    ("Address the offensive struggles immediately", "Fans will demand changes"),
    ("Fix the defensive issues plaguing the team", "Patience is running thin"),
)

_URGENCY_LABELS = {
    "relaxed": "When convenient",
    "soon": "Soon",
    "urgent": "Urgent",
    "critical": "Overdue!",
}


def calculate_demand_weights(
    owner: Owner, trigger: Optional[InterventionTrigger], context: DemandContext
) -> Dict[DemandType, int]:
    weights = dict(BASE_DEMAND_WEIGHTS)
    if trigger is not None:
        for demand_type, bonus in TRIGGER_DEMAND_WEIGHTS[trigger.type].items():
            weights[demand_type] += bonus

    traits = owner.personality.traits
    personality = owner.personality
    if traits.patience < 40:
        weights[DemandType.FIRE_COACH] += 20
    if traits.spending > 70:
        weights[DemandType.SIGN_PLAYER] += 20
        weights[DemandType.TRADE_FOR] += 10
    if personality.has_trait(SecondaryTrait.WIN_NOW):
        weights[DemandType.TRADE_FOR] += 25
        weights[DemandType.SIGN_PLAYER] += 15
    if personality.has_trait(SecondaryTrait.ANALYTICS_BELIEVER):
        weights[DemandType.FIRE_COACH] -= 15
    if personality.has_trait(SecondaryTrait.OLD_SCHOOL):
        weights[DemandType.FIRE_COACH] += 15
    if personality.has_trait(SecondaryTrait.PR_OBSESSED):
        weights[DemandType.SIGN_PLAYER] += 20

    # Nobody to fire or nobody to draft: the category cannot be materialized.
    if not context.available_coaches:
        weights[DemandType.FIRE_COACH] = 0
    elif not any(coach.is_struggling for coach in context.available_coaches):
        weights[DemandType.FIRE_COACH] = max(5, weights[DemandType.FIRE_COACH] - 30)

    if not context.draft_prospects:
        weights[DemandType.DRAFT_PLAYER] = 0
    elif context.current_week > 17:
        # Past the regular season a draft demand is unlikely, not impossible.
        weights[DemandType.DRAFT_PLAYER] = 5

    return weights


def select_demand_type(
    owner: Owner,
    trigger: Optional[InterventionTrigger],
    context: DemandContext,
    rng: RandomSource,
) -> DemandType:
    weights = calculate_demand_weights(owner, trigger, context)
    return DemandType(weighted_choice(rng, {k.value: v for k, v in weights.items()}))


def determine_deadline_offset(owner: Owner, demand_type: DemandType, rng: RandomSource) -> int:
    """Weeks granted: a draw from the type's range plus ``floor((patience-50)/25)``, at least 1."""

    low, high = DEADLINE_RANGES[demand_type]
    patience_bonus = math.floor((owner.personality.traits.patience - 50) / 25)
    return max(1, math.floor(low + rng.random() * (high - low)) + patience_bonus)


def determine_consequence(severity: Severity, rng: RandomSource) -> str:
    return pick(rng, CONSEQUENCES[Severity(severity)])


def _severity(trigger: Optional[InterventionTrigger]) -> Severity:
    return trigger.severity if trigger is not None else Severity.MILD


def _build(
    owner: Owner,
    context: DemandContext,
    trigger: Optional[InterventionTrigger],
    demand_type: DemandType,
    description: str,
    target_id: Optional[str],
    rng: RandomSource,
    consequence: Optional[str] = None,
) -> OwnerDemand:
    demand_id = f"demand-{context.current_season}-{context.current_week}-{token(rng)}"
    deadline = context.current_week + determine_deadline_offset(owner, demand_type, rng)
    return OwnerDemand(
        id=demand_id,
        type=demand_type,
        description=description,
        target_id=target_id,
        deadline=deadline,
        consequence=consequence or determine_consequence(_severity(trigger), rng),
        issued_week=context.current_week,
    )


def _prefer(rng: RandomSource, preferred: Sequence, fallback: Sequence):
    return pick(rng, preferred) if preferred else pick(rng, fallback)


def generate_sign_player_demand(
    owner: Owner,
    context: DemandContext,
    trigger: Optional[InterventionTrigger],
    rng: RandomSource,
) -> OwnerDemand:
    free_agents = [p for p in context.available_players if p.is_free_agent]
    if not free_agents:
        return _build(
            owner, context, trigger, DemandType.SIGN_PLAYER,
            "Make a significant free agent signing", None, rng,
        )

    if owner.personality.has_trait(SecondaryTrait.PR_OBSESSED):
        stars = [p for p in free_agents if p.is_star]
        target = pick(rng, stars) if stars else free_agents[0]
    elif owner.personality.traits.spending < 40:
        bargains = [p for p in free_agents if p.overall < 80]
        target = pick(rng, bargains) if bargains else free_agents[0]
    else:
        good = [p for p in free_agents if p.overall >= 75]
        target = pick(rng, good) if good else free_agents[0]

    return _build(
        owner, context, trigger, DemandType.SIGN_PLAYER, f"Sign {target.label}", target.id, rng
    )


def generate_fire_coach_demand(
    owner: Owner,
    context: DemandContext,
    trigger: Optional[InterventionTrigger],
    rng: RandomSource,
) -> Optional[OwnerDemand]:
    if not context.available_coaches:
        return None
    struggling = [c for c in context.available_coaches if c.is_struggling]
    target = _prefer(rng, struggling, context.available_coaches)
    return _build(
        owner, context, trigger, DemandType.FIRE_COACH,
        f"Fire {target.first_name} {target.last_name} ({target.role})", target.id, rng,
    )


def generate_draft_player_demand(
    owner: Owner,
    context: DemandContext,
    trigger: Optional[InterventionTrigger],
    rng: RandomSource,
) -> Optional[OwnerDemand]:
    prospects = context.draft_prospects
    if not prospects:
        return None
    if owner.personality.traits.ego > 70:
        hyped = [p for p in prospects if p.hype_level in ("generational", "star")]
        target = pick(rng, hyped) if hyped else prospects[0]
    elif owner.personality.has_trait(SecondaryTrait.ANALYTICS_BELIEVER):
        target = _prefer(rng, [p for p in prospects if p.hype_level == "sleeper"], prospects)
    else:
        target = pick(rng, prospects)
    return _build(
        owner, context, trigger, DemandType.DRAFT_PLAYER,
        f"Draft {target.first_name} {target.last_name} ({target.position})", target.id, rng,
    )


def generate_trade_for_demand(
    owner: Owner,
    context: DemandContext,
    trigger: Optional[InterventionTrigger],
    rng: RandomSource,
) -> OwnerDemand:
    targets = context.trade_targets
    if not targets:
        return _build(
            owner, context, trigger, DemandType.TRADE_FOR,
            "Make a significant trade to improve the roster", None, rng,
        )
    stars = [p for p in targets if p.is_star]
    if stars and owner.personality.traits.spending > 50:
        target = pick(rng, stars)
    else:
        target = pick(rng, targets)
    return _build(
        owner, context, trigger, DemandType.TRADE_FOR, f"Trade for {target.label}", target.id, rng
    )


def generate_other_demand(
    owner: Owner,
    context: DemandContext,
    trigger: Optional[InterventionTrigger],
    rng: RandomSource,
) -> OwnerDemand:
    description, consequence = pick(rng, OTHER_DIRECTIVES)
    return _build(
        owner, context, trigger, DemandType.OTHER, description, None, rng, consequence=consequence
    )


_GENERATORS: Dict[DemandType, Callable[..., Optional[OwnerDemand]]] = {
    DemandType.SIGN_PLAYER: generate_sign_player_demand,
    DemandType.FIRE_COACH: generate_fire_coach_demand,
    DemandType.DRAFT_PLAYER: generate_draft_player_demand,
    DemandType.TRADE_FOR: generate_trade_for_demand,
    DemandType.OTHER: generate_other_demand,
}


def generate_demand(
    owner: Owner,
    context: DemandContext,
    trigger: Optional[InterventionTrigger],
    rng: RandomSource,
) -> Optional[OwnerDemand]:
    demand_type = select_demand_type(owner, trigger, context, rng)
    return _GENERATORS[demand_type](owner, context, trigger, rng)


def get_demand_urgency(demand: OwnerDemand, current_week: int) -> str:
    remaining = demand.deadline - current_week
    if remaining <= 0:
        return "critical"
    if remaining <= 1:
        return "urgent"
    if remaining <= 3:
        return "soon"
    return "relaxed"


def get_demand_display_info(demand: OwnerDemand, current_week: int) -> DemandDisplayInfo:
    return DemandDisplayInfo(
        title=demand.description,
        urgency=_URGENCY_LABELS[get_demand_urgency(demand, current_week)],
        weeks_remaining=max(0, demand.deadline - current_week),
        consequence=demand.consequence,
    )


def is_demand_satisfied(demand: OwnerDemand, completed_actions: Sequence[CompletedAction]) -> bool:
    """A targetless demand accepts any action of its type; otherwise the target must match."""

    return any(
        action.type == demand.type
        and (demand.target_id is None or action.target_id == demand.target_id)
        for action in completed_actions
    )


__all__ = [
    "BASE_DEMAND_WEIGHTS",
    "CONSEQUENCES",
    "CoachInfo",
    "CompletedAction",
    "DEADLINE_RANGES",
    "DemandContext",
    "DemandDisplayInfo",
    "OTHER_DIRECTIVES",
    "PlayerInfo",
    "ProspectInfo",
    "TRIGGER_DEMAND_WEIGHTS",
    "calculate_demand_weights",
    "determine_consequence",
    "determine_deadline_offset",
    "generate_demand",
    "generate_draft_player_demand",
    "generate_fire_coach_demand",
    "generate_other_demand",
    "generate_sign_player_demand",
    "generate_trade_for_demand",
    "get_demand_display_info",
    "get_demand_urgency",
    "is_demand_satisfied",
    "select_demand_type",
]

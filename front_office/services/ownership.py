"""League-wide ownership changes: sales, deaths, transfers and GM retention."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..models import (
    MarketSize,
    Owner,
    OwnerPersonality,
    PerformanceTier,
    TeamContext,
    clamp,
    to_plain,
)
from ..personality import Archetype, generate_owner
from ..rng import RandomSource, pick, token, weighted_choice
from .interference import InterferenceState, create_interference_state
from .mood import OwnerMoodState, create_owner_mood_state

logger = logging.getLogger(__name__)

_DATA_PATH = Path(__file__).resolve().parent.parent / "data"


class OwnershipChangeType(str, Enum):
    SALE = "sale"
    DEATH = "death"
    FAMILY_TRANSFER = "family_transfer"
    FORCED_SALE = "forced_sale"
    GROUP_PURCHASE = "group_purchase"


BASE_GM_RETENTION: Dict[OwnershipChangeType, float] = {
    OwnershipChangeType.FAMILY_TRANSFER: 0.8,
    OwnershipChangeType.DEATH: 0.7,
    OwnershipChangeType.SALE: 0.5,
    OwnershipChangeType.GROUP_PURCHASE: 0.4,
    OwnershipChangeType.FORCED_SALE: 0.3,
}

GM_PERFORMANCE_RETENTION: Dict[PerformanceTier, float] = {
    PerformanceTier.EXCELLENT: 0.3,
    PerformanceTier.GOOD: 0.15,
    PerformanceTier.AVERAGE: 0.0,
    PerformanceTier.POOR: -0.2,
    PerformanceTier.TERRIBLE: -0.4,
}

_CHANGE_DESCRIPTIONS: Dict[OwnershipChangeType, Tuple[str, ...]] = {
    OwnershipChangeType.SALE: (
        "{previous} has sold the team to {new}",
        "The franchise has been purchased by {new} from {previous}",
        "{new} becomes the new owner after purchasing the team",
    ),
    OwnershipChangeType.DEATH: (
        "Following the passing of {previous}, {new} takes ownership",
        "The team transitions to new ownership under {new} following the death of the previous owner",
    ),
    OwnershipChangeType.FAMILY_TRANSFER: (
        "{previous} has transferred ownership to {new}",
        "{new} takes control as ownership passes within the family",
        "The franchise stays in the family as {new} becomes the new owner",
    ),
    OwnershipChangeType.FORCED_SALE: (
        "The league has forced a sale of the team to {new}",
        "{new} purchases the team following a league-mandated sale",
        "Ownership controversy leads to forced sale to {new}",
    ),
    OwnershipChangeType.GROUP_PURCHASE: (
        "An ownership group led by {new} has purchased the team",
        "{new} leads new ownership group taking control of the franchise",
        "The team is now owned by a group headed by {new}",
    ),
}

_HEADLINES: Dict[OwnershipChangeType, str] = {
    OwnershipChangeType.SALE: "Team Sold to New Owner",
    OwnershipChangeType.DEATH: "Ownership Transition Following Passing",
    OwnershipChangeType.FAMILY_TRANSFER: "Team Passes to New Family Member",
    OwnershipChangeType.FORCED_SALE: "League Forces Sale of Franchise",
    OwnershipChangeType.GROUP_PURCHASE: "New Ownership Group Takes Control",
}


class OwnerNameBank:
    """Given names and surnames for generated owners."""

    def __init__(self, data_path: Path | None = None) -> None:
        self._path = data_path or _DATA_PATH
        with (self._path / "owner_names.yaml").open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        self.given: List[str] = [str(name) for name in raw.get("given", [])]
        self.surnames: List[str] = [str(name) for name in raw.get("surname", [])]
        if not self.given or not self.surnames:
            raise ValueError(f"Owner namebank at {self._path} is missing given names or surnames")

    def generate(self, rng: RandomSource) -> Tuple[str, str]:
        return pick(rng, self.given), pick(rng, self.surnames)


_DEFAULT_NAMEBANK: Optional[OwnerNameBank] = None


def _default_namebank() -> OwnerNameBank:
    global _DEFAULT_NAMEBANK
    if _DEFAULT_NAMEBANK is None:
        _DEFAULT_NAMEBANK = OwnerNameBank()
    return _DEFAULT_NAMEBANK


@dataclass
class OwnershipChangeEvent:
    type: OwnershipChangeType
    team_id: str
    previous_owner_id: str
    new_owner_id: str
    season: int
    description: str
    gm_retained: bool
    expectations_reset: bool = True


@dataclass
class OwnershipChangeResult:
    state: "LeagueOwnershipState"
    event: OwnershipChangeEvent
    new_owner: Owner


@dataclass
class OwnershipChangeSummary:
    headline: str
    subtext: str
    gm_status: str


@dataclass
class LeagueOwnershipState:
    owners: Dict[str, Owner] = field(default_factory=dict)
    team_contexts: Dict[str, TeamContext] = field(default_factory=dict)
    last_change_per_team: Dict[str, int] = field(default_factory=dict)
    ownership_history: List[OwnershipChangeEvent] = field(default_factory=list)
    mood_states: Dict[str, OwnerMoodState] = field(default_factory=dict)
    interference_states: Dict[str, InterferenceState] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owners": {team: owner.to_dict() for team, owner in self.owners.items()},
            "team_contexts": {team: to_plain(ctx) for team, ctx in self.team_contexts.items()},
            "last_change_per_team": dict(self.last_change_per_team),
            "ownership_history": [to_plain(event) for event in self.ownership_history],
            "mood_states": {team: mood.to_dict() for team, mood in self.mood_states.items()},
            "interference_states": {
                team: interference.to_dict() for team, interference in self.interference_states.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeagueOwnershipState":
        history = []
        for item in data.get("ownership_history", []):
            payload = dict(item)
            payload["type"] = OwnershipChangeType(payload["type"])
            history.append(OwnershipChangeEvent(**payload))
        return cls(
            owners={team: Owner.from_dict(raw) for team, raw in data.get("owners", {}).items()},
            team_contexts={
                team: TeamContext.from_dict(raw) for team, raw in data.get("team_contexts", {}).items()
            },
            last_change_per_team={
                team: int(season) for team, season in data.get("last_change_per_team", {}).items()
            },
            ownership_history=history,
            mood_states={
                team: OwnerMoodState.from_dict(raw) for team, raw in data.get("mood_states", {}).items()
            },
            interference_states={
                team: InterferenceState.from_dict(raw)
                for team, raw in data.get("interference_states", {}).items()
            },
        )


def create_league_ownership_state() -> LeagueOwnershipState:
    return LeagueOwnershipState()


def generate_owner_id(rng: RandomSource) -> str:
    return f"owner-{token(rng)}{token(rng, 4)}"


def generate_owner_name(rng: RandomSource, namebank: OwnerNameBank | None = None) -> Tuple[str, str]:
    return (namebank or _default_namebank()).generate(rng)


def calculate_ownership_change_probability(
    owner: Owner,
    context: TeamContext,
    current_season: int,
    last_change_season: Optional[int],
    base: float = 0.008,
    per_year: float = 0.002,
    cap: float = 0.05,
) -> float:
    """Chance this season that the team changes hands.

    Grows with years since the last change and with the owner's tenure,
    with bumps for bad results; never above ``cap``.
    """

    probability = base
    if last_change_season is not None:
        years_since_change = current_season - last_change_season
    else:
        years_since_change = owner.years_as_owner

    if years_since_change > 10:
        probability += (years_since_change - 10) * per_year
    if owner.years_as_owner > 20:
        probability += 0.005
    if owner.years_as_owner > 30:
        probability += 0.005
    if context.recent_performance is PerformanceTier.TERRIBLE:
        probability += 0.003
    if context.market_size is MarketSize.SMALL and context.recent_performance is PerformanceTier.POOR:
        probability += 0.002
    return min(cap, probability)


def determine_change_type(owner: Owner, rng: RandomSource) -> OwnershipChangeType:
    weights = {
        OwnershipChangeType.SALE.value: 35,
        OwnershipChangeType.DEATH.value: 20 if owner.years_as_owner > 25 else 10,
        OwnershipChangeType.FAMILY_TRANSFER.value: 25 if owner.years_as_owner > 15 else 15,
        OwnershipChangeType.FORCED_SALE.value: 15,
        OwnershipChangeType.GROUP_PURCHASE.value: 15,
    }
    return OwnershipChangeType(weighted_choice(rng, weights))


def generate_change_description(
    change_type: OwnershipChangeType, previous_owner: Owner, new_owner_name: str, rng: RandomSource
) -> str:
    template = pick(rng, _CHANGE_DESCRIPTIONS[change_type])
    return template.format(previous=previous_owner.full_name, new=new_owner_name)


def gm_retention_probability(
    change_type: OwnershipChangeType, new_personality: OwnerPersonality, gm_performance: PerformanceTier
) -> float:
    retention = BASE_GM_RETENTION[change_type]
    retention += GM_PERFORMANCE_RETENTION[PerformanceTier(gm_performance)]

    traits = new_personality.traits
    if traits.control > 70:
        retention -= 0.2
    elif traits.control < 30:
        retention += 0.1
    if traits.patience > 70:
        retention += 0.15
    elif traits.patience < 30:
        retention -= 0.15
    return clamp(retention, 0.1, 0.95)


def determine_gm_retention(
    change_type: OwnershipChangeType,
    new_personality: OwnerPersonality,
    gm_performance: PerformanceTier,
    rng: RandomSource,
) -> bool:
    return rng.random() < gm_retention_probability(change_type, new_personality, gm_performance)


def create_new_owner(
    team_id: str,
    context: TeamContext,
    change_type: OwnershipChangeType,
    rng: RandomSource,
    namebank: OwnerNameBank | None = None,
) -> Owner:
    """A fresh owner: new personality, moderate patience and trust, no tenure."""

    first_name, last_name = generate_owner_name(rng, namebank)
    owner_id = generate_owner_id(rng)

    archetype: Optional[Archetype] = None
    if change_type is OwnershipChangeType.FORCED_SALE and rng.random() < 0.6:
        archetype = Archetype.ANALYTICS_BELIEVER
    elif change_type is OwnershipChangeType.GROUP_PURCHASE and rng.random() < 0.4:
        archetype = Archetype.HANDS_OFF_OWNER

    owner = generate_owner(owner_id, first_name, last_name, replace(context, team_id=team_id), rng, archetype)
    return replace(
        owner,
        patience_meter=55 + int(rng.random() * 20),
        trust_level=45 + int(rng.random() * 15),
        years_as_owner=1,
        previous_gms_fired=0,
        championships_won=0,
        active_demands=[],
    )


def _cap_history(events: List[OwnershipChangeEvent], cap: Optional[int]) -> List[OwnershipChangeEvent]:
    if cap is None:
        return events
    return events[-cap:]


def process_ownership_change(
    state: LeagueOwnershipState,
    team_id: str,
    previous_owner: Owner,
    current_season: int,
    gm_performance: PerformanceTier,
    rng: RandomSource,
    namebank: OwnerNameBank | None = None,
    history_cap: Optional[int] = None,
) -> OwnershipChangeResult:
    context = state.team_contexts.get(team_id)
    if context is None:
        raise ValueError(f"No team context found for team {team_id}")

    change_type = determine_change_type(previous_owner, rng)
    new_owner = create_new_owner(team_id, context, change_type, rng, namebank)
    gm_retained = determine_gm_retention(change_type, new_owner.personality, gm_performance, rng)
    description = generate_change_description(change_type, previous_owner, new_owner.full_name, rng)

    event = OwnershipChangeEvent(
        type=change_type,
        team_id=team_id,
        previous_owner_id=previous_owner.id,
        new_owner_id=new_owner.id,
        season=current_season,
        description=description,
        gm_retained=gm_retained,
    )
    logger.info(
        "Ownership change for %s in season %s: %s (GM retained: %s)",
        team_id,
        current_season,
        change_type.value,
        gm_retained,
    )

    new_state = replace(
        state,
        owners={**state.owners, team_id: new_owner},
        last_change_per_team={**state.last_change_per_team, team_id: current_season},
        ownership_history=_cap_history([*state.ownership_history, event], history_cap),
        mood_states={**state.mood_states, team_id: create_owner_mood_state()},
        interference_states={**state.interference_states, team_id: create_interference_state(team_id)},
    )
    return OwnershipChangeResult(state=new_state, event=event, new_owner=new_owner)


def check_league_ownership_changes(
    state: LeagueOwnershipState,
    current_season: int,
    gm_performances: Dict[str, PerformanceTier],
    rng: RandomSource,
    namebank: OwnerNameBank | None = None,
    history_cap: Optional[int] = None,
    base: float = 0.008,
    per_year: float = 0.002,
    cap: float = 0.05,
) -> Tuple[LeagueOwnershipState, List[OwnershipChangeEvent]]:
    """Roll once per owned team; teams without a registered context are skipped."""

    current = state
    changes: List[OwnershipChangeEvent] = []
    for team_id, owner in state.owners.items():
        context = state.team_contexts.get(team_id)
        if context is None:
            logger.debug("Skipping ownership roll for %s: no team context", team_id)
            continue
        probability = calculate_ownership_change_probability(
            owner,
            context,
            current_season,
            state.last_change_per_team.get(team_id),
            base=base,
            per_year=per_year,
            cap=cap,
        )
        if rng.random() < probability:
            result = process_ownership_change(
                current,
                team_id,
                owner,
                current_season,
                gm_performances.get(team_id, PerformanceTier.AVERAGE),
                rng,
                namebank,
                history_cap,
            )
            current = result.state
            changes.append(result.event)
    return current, changes


def get_ownership_change_summary(event: OwnershipChangeEvent) -> OwnershipChangeSummary:
    if event.gm_retained:
        gm_status = "You have been retained by the new ownership"
    else:
        gm_status = "New ownership has decided to make a change at GM"
    return OwnershipChangeSummary(
        headline=_HEADLINES.get(event.type, "New Ownership"),
        subtext=event.description,
        gm_status=gm_status,
    )


def get_team_ownership_history(state: LeagueOwnershipState, team_id: str) -> List[OwnershipChangeEvent]:
    if team_id not in state.owners:
        return []
    return [event for event in state.ownership_history if event.team_id == team_id]


def initialize_team_ownership(
    state: LeagueOwnershipState,
    team_id: str,
    context: TeamContext,
    initial_season: int,
    rng: RandomSource,
    namebank: OwnerNameBank | None = None,
) -> LeagueOwnershipState:
    first_name, last_name = generate_owner_name(rng, namebank)
    context = replace(context, team_id=team_id)
    owner = generate_owner(generate_owner_id(rng), first_name, last_name, context, rng)
    return replace(
        state,
        owners={**state.owners, team_id: owner},
        team_contexts={**state.team_contexts, team_id: context},
        mood_states={**state.mood_states, team_id: create_owner_mood_state()},
        interference_states={**state.interference_states, team_id: create_interference_state(team_id)},
        last_change_per_team={**state.last_change_per_team, team_id: initial_season - owner.years_as_owner},
    )


__all__ = [
    "BASE_GM_RETENTION",
    "GM_PERFORMANCE_RETENTION",
    "LeagueOwnershipState",
    "OwnerNameBank",
    "OwnershipChangeEvent",
    "OwnershipChangeResult",
    "OwnershipChangeSummary",
    "OwnershipChangeType",
    "calculate_ownership_change_probability",
    "check_league_ownership_changes",
    "create_league_ownership_state",
    "create_new_owner",
    "determine_change_type",
    "determine_gm_retention",
    "generate_change_description",
    "generate_owner_id",
    "generate_owner_name",
    "get_ownership_change_summary",
    "get_team_ownership_history",
    "gm_retention_probability",
    "initialize_team_ownership",
    "process_ownership_change",
]

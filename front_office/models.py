"""Core data models for the front office simulation."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, is_dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round with .5 going toward positive infinity (-19.5 -> -19, 4.5 -> 5)."""

    return int(math.floor(value + 0.5))


def to_plain(value: Any) -> Any:
    """Convert dataclasses/enums into plain nested dicts, lists and scalars."""

    if is_dataclass(value) and not isinstance(value, type):
        return {key: to_plain(item) for key, item in asdict(value).items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


class SecondaryTrait(str, Enum):
    WIN_NOW = "winNow"
    LONG_TERM_THINKER = "longTermThinker"
    ANALYTICS_BELIEVER = "analyticsBeliever"
    OLD_SCHOOL = "oldSchool"
    PR_OBSESSED = "prObsessed"
    PLAYERS_OWNER = "playersOwner"
    CHAMPIONSHIP_OR_BUST = "championshipOrBust"


ALL_SECONDARY_TRAITS: List[SecondaryTrait] = list(SecondaryTrait)

TRAIT_CONFLICTS: Dict[SecondaryTrait, SecondaryTrait] = {
    SecondaryTrait.WIN_NOW: SecondaryTrait.LONG_TERM_THINKER,
    SecondaryTrait.LONG_TERM_THINKER: SecondaryTrait.WIN_NOW,
    SecondaryTrait.ANALYTICS_BELIEVER: SecondaryTrait.OLD_SCHOOL,
    SecondaryTrait.OLD_SCHOOL: SecondaryTrait.ANALYTICS_BELIEVER,
}


class NetWorth(str, Enum):
    MODEST = "modest"
    WEALTHY = "wealthy"
    BILLIONAIRE = "billionaire"
    OLIGARCH = "oligarch"


ALL_NET_WORTH_LEVELS: List[NetWorth] = list(NetWorth)

_NET_WORTH_MULTIPLIERS: Dict[NetWorth, float] = {
    NetWorth.MODEST: 0.8,
    NetWorth.WEALTHY: 1.0,
    NetWorth.BILLIONAIRE: 1.2,
    NetWorth.OLIGARCH: 1.5,
}


class DemandType(str, Enum):
    SIGN_PLAYER = "signPlayer"
    FIRE_COACH = "fireCoach"
    DRAFT_PLAYER = "draftPlayer"
    TRADE_FOR = "tradeFor"
    OTHER = "other"


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return {"mild": 1, "moderate": 2, "severe": 3}[self.value]


class TriggerType(str, Enum):
    LOSING_STREAK = "losingStreak"
    FAN_APPROVAL = "fanApproval"
    MEDIA_SCRUTINY = "mediaScrutiny"
    SEASON_PERFORMANCE = "seasonPerformance"
    EGO = "ego"


class ExpectationTier(str, Enum):
    REBUILD = "rebuild"
    DEVELOPING = "developing"
    COMPETITIVE = "competitive"
    CONTENDER = "contender"
    CHAMPIONSHIP = "championship"


class MarketSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    MEGA = "mega"


class HistoricalSuccess(str, Enum):
    DYNASTY = "dynasty"
    CONTENDER = "contender"
    REBUILDING = "rebuilding"
    PERENNIAL_LOSER = "perennial_loser"


class PerformanceTier(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    TERRIBLE = "terrible"


class FanbasePassion(str, Enum):
    RABID = "rabid"
    PASSIONATE = "passionate"
    MODERATE = "moderate"
    APATHETIC = "apathetic"


class MediaMarket(str, Enum):
    NATIONAL_SPOTLIGHT = "national_spotlight"
    REGIONAL = "regional"
    LOCAL = "local"


@dataclass
class OwnerTraits:
    patience: int
    spending: int
    control: int
    loyalty: int
    ego: int


@dataclass
class InterventionTriggers:
    losing_streak_length: int
    fan_approval_floor: int
    media_scrutiny_threshold: int


@dataclass
class OwnerPersonality:
    traits: OwnerTraits
    secondary_traits: List[SecondaryTrait] = field(default_factory=list)
    intervention_triggers: InterventionTriggers = field(
        default_factory=lambda: InterventionTriggers(5, 50, 50)
    )

    def has_trait(self, trait: SecondaryTrait) -> bool:
        return trait in self.secondary_traits


@dataclass
class OwnerDemand:
    id: str
    type: DemandType
    description: str
    target_id: Optional[str]
    deadline: int
    consequence: str
    issued_week: int


@dataclass
class Owner:
    id: str
    first_name: str
    last_name: str
    team_id: str
    personality: OwnerPersonality
    patience_meter: int = 50
    trust_level: int = 50
    active_demands: List[OwnerDemand] = field(default_factory=list)
    years_as_owner: int = 0
    previous_gms_fired: int = 0
    championships_won: int = 0
    net_worth: NetWorth = NetWorth.WEALTHY

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def traits(self) -> OwnerTraits:
        return self.personality.traits

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Owner":
        personality = data["personality"]
        return cls(
            id=data["id"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            team_id=data["team_id"],
            personality=OwnerPersonality(
                traits=OwnerTraits(**personality["traits"]),
                secondary_traits=[SecondaryTrait(t) for t in personality["secondary_traits"]],
                intervention_triggers=InterventionTriggers(**personality["intervention_triggers"]),
            ),
            patience_meter=data["patience_meter"],
            trust_level=data["trust_level"],
            active_demands=[demand_from_dict(item) for item in data.get("active_demands", [])],
            years_as_owner=data.get("years_as_owner", 0),
            previous_gms_fired=data.get("previous_gms_fired", 0),
            championships_won=data.get("championships_won", 0),
            net_worth=NetWorth(data.get("net_worth", NetWorth.WEALTHY.value)),
        )


def demand_from_dict(data: Dict[str, Any]) -> OwnerDemand:
    return OwnerDemand(
        id=data["id"],
        type=DemandType(data["type"]),
        description=data["description"],
        target_id=data.get("target_id"),
        deadline=data["deadline"],
        consequence=data["consequence"],
        issued_week=data["issued_week"],
    )


@dataclass
class TeamState:
    """Snapshot supplied by the season simulator each time triggers are evaluated."""

    current_losing_streak: int
    fan_approval: int
    media_scrutiny: int
    season_wins: int
    season_losses: int
    current_week: int
    is_playoffs: bool = False
    season_expectation: ExpectationTier = ExpectationTier.COMPETITIVE


@dataclass
class TeamContext:
    team_id: str
    market_size: MarketSize = MarketSize.MEDIUM
    historical_success: HistoricalSuccess = HistoricalSuccess.REBUILDING
    recent_performance: PerformanceTier = PerformanceTier.AVERAGE
    fanbase_passion: FanbasePassion = FanbasePassion.MODERATE
    media_market: MediaMarket = MediaMarket.REGIONAL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamContext":
        return cls(
            team_id=data["team_id"],
            market_size=MarketSize(data["market_size"]),
            historical_success=HistoricalSuccess(data["historical_success"]),
            recent_performance=PerformanceTier(data["recent_performance"]),
            fanbase_passion=FanbasePassion(data["fanbase_passion"]),
            media_market=MediaMarket(data["media_market"]),
        )


# --- personality validation -------------------------------------------------


def validate_owner_traits(traits: OwnerTraits) -> bool:
    values = (traits.patience, traits.spending, traits.control, traits.loyalty, traits.ego)
    return all(isinstance(v, int) and 1 <= v <= 100 for v in values)


def validate_intervention_triggers(triggers: InterventionTriggers) -> bool:
    return (
        1 <= triggers.losing_streak_length <= 17
        and 0 <= triggers.fan_approval_floor <= 100
        and 1 <= triggers.media_scrutiny_threshold <= 100
    )


def validate_owner_personality(personality: OwnerPersonality) -> bool:
    if not validate_owner_traits(personality.traits):
        return False
    if not validate_intervention_triggers(personality.intervention_triggers):
        return False
    traits: List[SecondaryTrait] = []
    for raw in personality.secondary_traits:
        try:
            traits.append(SecondaryTrait(raw))
        except ValueError:
            return False
    for trait in traits:
        conflict = TRAIT_CONFLICTS.get(trait)
        if conflict is not None and conflict in traits:
            return False
    return True


def create_default_owner_personality() -> OwnerPersonality:
    return OwnerPersonality(
        traits=OwnerTraits(patience=50, spending=50, control=50, loyalty=50, ego=50),
        secondary_traits=[],
        intervention_triggers=InterventionTriggers(
            losing_streak_length=5, fan_approval_floor=50, media_scrutiny_threshold=50
        ),
    )


# --- owner helpers ----------------------------------------------------------


def validate_owner_demand(demand: OwnerDemand) -> bool:
    if not demand.id or not isinstance(demand.id, str):
        return False
    if not demand.description or not demand.consequence:
        return False
    if not isinstance(demand.deadline, int) or demand.deadline < 0:
        return False
    if not isinstance(demand.issued_week, int) or demand.issued_week < 0:
        return False
    try:
        DemandType(demand.type)
    except ValueError:
        return False
    return True


def validate_owner(owner: Owner) -> bool:
    for value in (owner.id, owner.first_name, owner.last_name, owner.team_id):
        if not value or not isinstance(value, str):
            return False
    if not validate_owner_personality(owner.personality):
        return False
    if not 0 <= owner.patience_meter <= 100:
        return False
    if not 0 <= owner.trust_level <= 100:
        return False
    if not all(validate_owner_demand(demand) for demand in owner.active_demands):
        return False
    if not 0 <= owner.years_as_owner <= 100:
        return False
    if not 0 <= owner.previous_gms_fired <= 50:
        return False
    if not 0 <= owner.championships_won <= 30:
        return False
    return owner.net_worth in ALL_NET_WORTH_LEVELS


def create_default_owner(owner_id: str, team_id: str) -> Owner:
    return Owner(
        id=owner_id,
        first_name="John",
        last_name="Smith",
        team_id=team_id,
        personality=create_default_owner_personality(),
        patience_meter=50,
        trust_level=50,
        active_demands=[],
        years_as_owner=5,
        previous_gms_fired=1,
        championships_won=0,
        net_worth=NetWorth.WEALTHY,
    )


def add_owner_demand(owner: Owner, demand: OwnerDemand) -> Owner:
    return replace(owner, active_demands=[*owner.active_demands, demand])


def remove_owner_demand(owner: Owner, demand_id: str) -> Owner:
    return replace(
        owner, active_demands=[d for d in owner.active_demands if d.id != demand_id]
    )


def update_patience_meter(owner: Owner, new_value: float) -> Owner:
    return replace(owner, patience_meter=round_half_up(clamp(new_value, 0, 100)))


def update_trust_level(owner: Owner, new_value: float) -> Owner:
    return replace(owner, trust_level=round_half_up(clamp(new_value, 0, 100)))


def get_net_worth_budget_multiplier(net_worth: NetWorth) -> float:
    return _NET_WORTH_MULTIPLIERS[NetWorth(net_worth)]


__all__ = [
    "ALL_NET_WORTH_LEVELS",
    "ALL_SECONDARY_TRAITS",
    "DemandType",
    "ExpectationTier",
    "FanbasePassion",
    "HistoricalSuccess",
    "InterventionTriggers",
    "MarketSize",
    "MediaMarket",
    "NetWorth",
    "Owner",
    "OwnerDemand",
    "OwnerPersonality",
    "OwnerTraits",
    "PerformanceTier",
    "SecondaryTrait",
    "Severity",
    "TRAIT_CONFLICTS",
    "TeamContext",
    "TeamState",
    "TriggerType",
    "add_owner_demand",
    "clamp",
    "create_default_owner",
    "create_default_owner_personality",
    "demand_from_dict",
    "get_net_worth_budget_multiplier",
    "remove_owner_demand",
    "round_half_up",
    "to_plain",
    "update_patience_meter",
    "update_trust_level",
    "validate_intervention_triggers",
    "validate_owner",
    "validate_owner_demand",
    "validate_owner_personality",
    "validate_owner_traits",
]

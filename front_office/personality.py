"""Owner personality generation from team and market context."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import (
    ALL_NET_WORTH_LEVELS,
    ALL_SECONDARY_TRAITS,
    TRAIT_CONFLICTS,
    FanbasePassion,
    HistoricalSuccess,
    InterventionTriggers,
    MarketSize,
    MediaMarket,
    NetWorth,
    Owner,
    OwnerPersonality,
    OwnerTraits,
    PerformanceTier,
    SecondaryTrait,
    TeamContext,
    clamp,
    round_half_up,
)
from .rng import RandomSource, random_int, weighted_choice


class Archetype(str, Enum):
    PATIENT_BUILDER = "patient_builder"
    WIN_NOW_SPENDER = "win_now_spender"
    MEDDLING_MICROMANAGER = "meddling_micromanager"
    HANDS_OFF_OWNER = "hands_off_owner"
    ANALYTICS_BELIEVER = "analytics_believer"
    OLD_SCHOOL_TRADITIONALIST = "old_school_traditionalist"
    PENNY_PINCHER = "penny_pincher"
    BALANCED = "balanced"


@dataclass(frozen=True)
class ArchetypeProfile:
    patience: Tuple[int, int]
    spending: Tuple[int, int]
    control: Tuple[int, int]
    loyalty: Tuple[int, int]
    ego: Tuple[int, int]
    preferred_secondary: Tuple[SecondaryTrait, ...]
    description: str


ARCHETYPE_PROFILES: Dict[Archetype, ArchetypeProfile] = {
    Archetype.PATIENT_BUILDER: ArchetypeProfile(
        (70, 95), (40, 60), (20, 45), (60, 85), (20, 50),
        (SecondaryTrait.LONG_TERM_THINKER, SecondaryTrait.ANALYTICS_BELIEVER),
        "A patient owner focused on building sustainable success",
    ),
    Archetype.WIN_NOW_SPENDER: ArchetypeProfile(
        (15, 40), (75, 100), (50, 75), (30, 55), (60, 90),
        (SecondaryTrait.WIN_NOW, SecondaryTrait.CHAMPIONSHIP_OR_BUST),
        "An aggressive owner willing to spend big for immediate wins",
    ),
    Archetype.MEDDLING_MICROMANAGER: ArchetypeProfile(
        (25, 50), (40, 70), (75, 100), (25, 50), (70, 95),
        (SecondaryTrait.WIN_NOW, SecondaryTrait.PR_OBSESSED),
        "A controlling owner who likes to be involved in all decisions",
    ),
    Archetype.HANDS_OFF_OWNER: ArchetypeProfile(
        (60, 85), (45, 70), (1, 30), (55, 80), (20, 45),
        (SecondaryTrait.LONG_TERM_THINKER, SecondaryTrait.PLAYERS_OWNER),
        "A trusting owner who empowers the front office",
    ),
    Archetype.ANALYTICS_BELIEVER: ArchetypeProfile(
        (55, 80), (50, 75), (35, 60), (50, 70), (30, 55),
        (SecondaryTrait.ANALYTICS_BELIEVER, SecondaryTrait.LONG_TERM_THINKER),
        "A modern owner who values data-driven decision making",
    ),
    Archetype.OLD_SCHOOL_TRADITIONALIST: ArchetypeProfile(
        (40, 65), (35, 60), (50, 75), (55, 80), (45, 70),
        (SecondaryTrait.OLD_SCHOOL, SecondaryTrait.PLAYERS_OWNER),
        "A traditional owner who values experience and gut instincts",
    ),
    Archetype.PENNY_PINCHER: ArchetypeProfile(
        (30, 55), (1, 30), (40, 65), (35, 55), (35, 60),
        (SecondaryTrait.LONG_TERM_THINKER,),
        "A frugal owner focused on keeping costs down",
    ),
    Archetype.BALANCED: ArchetypeProfile(
        (40, 60), (40, 60), (40, 60), (40, 60), (40, 60),
        (),
        "A well-rounded owner with moderate expectations",
    ),
}

# (patience, spending, control, ego) offsets
MARKET_INFLUENCE: Dict[MarketSize, Tuple[int, int, int, int]] = {
    MarketSize.SMALL: (10, -15, -5, -10),
    MarketSize.MEDIUM: (5, 0, 0, 0),
    MarketSize.LARGE: (-5, 10, 5, 10),
    MarketSize.MEGA: (-15, 15, 10, 15),
}

NET_WORTH_WEIGHTS: Dict[MarketSize, Dict[NetWorth, int]] = {
    MarketSize.SMALL: {NetWorth.MODEST: 40, NetWorth.WEALTHY: 40, NetWorth.BILLIONAIRE: 15, NetWorth.OLIGARCH: 5},
    MarketSize.MEDIUM: {NetWorth.MODEST: 20, NetWorth.WEALTHY: 45, NetWorth.BILLIONAIRE: 25, NetWorth.OLIGARCH: 10},
    MarketSize.LARGE: {NetWorth.MODEST: 10, NetWorth.WEALTHY: 30, NetWorth.BILLIONAIRE: 40, NetWorth.OLIGARCH: 20},
    MarketSize.MEGA: {NetWorth.MODEST: 5, NetWorth.WEALTHY: 20, NetWorth.BILLIONAIRE: 40, NetWorth.OLIGARCH: 35},
}

_INITIAL_PATIENCE: Dict[PerformanceTier, int] = {
    PerformanceTier.EXCELLENT: 80,
    PerformanceTier.GOOD: 65,
    PerformanceTier.AVERAGE: 50,
    PerformanceTier.POOR: 40,
    PerformanceTier.TERRIBLE: 30,
}

_INITIAL_TRUST: Dict[HistoricalSuccess, int] = {
    HistoricalSuccess.DYNASTY: 60,
    HistoricalSuccess.CONTENDER: 55,
    HistoricalSuccess.REBUILDING: 45,
    HistoricalSuccess.PERENNIAL_LOSER: 40,
}

_FAN_PASSION_OFFSET: Dict[FanbasePassion, int] = {
    FanbasePassion.RABID: 10,
    FanbasePassion.PASSIONATE: 5,
    FanbasePassion.MODERATE: 0,
    FanbasePassion.APATHETIC: -10,
}

_SECONDARY_TRAIT_PHRASES: Dict[SecondaryTrait, str] = {
    SecondaryTrait.ANALYTICS_BELIEVER: "Trusts the numbers",
    SecondaryTrait.OLD_SCHOOL: "Traditional approach",
    SecondaryTrait.WIN_NOW: "Win-now mentality",
    SecondaryTrait.PR_OBSESSED: "Image-conscious",
    SecondaryTrait.CHAMPIONSHIP_OR_BUST: "Championship or bust",
}


@dataclass
class OwnerHistory:
    years_as_owner: int
    previous_gms_fired: int
    championships_won: int


@dataclass
class OwnerPersonalitySummary:
    primary_style: str
    key_traits: List[str]
    working_relationship: str
    risk_level: str


def select_archetype_from_context(context: TeamContext, rng: RandomSource) -> Archetype:
    weights: Dict[Archetype, int] = {
        Archetype.PATIENT_BUILDER: 15,
        Archetype.WIN_NOW_SPENDER: 15,
        Archetype.MEDDLING_MICROMANAGER: 10,
        Archetype.HANDS_OFF_OWNER: 15,
        Archetype.ANALYTICS_BELIEVER: 15,
        Archetype.OLD_SCHOOL_TRADITIONALIST: 10,
        Archetype.PENNY_PINCHER: 10,
        Archetype.BALANCED: 10,
    }

    if context.historical_success is HistoricalSuccess.DYNASTY:
        weights[Archetype.PATIENT_BUILDER] += 10
        weights[Archetype.HANDS_OFF_OWNER] += 10
    elif context.historical_success is HistoricalSuccess.PERENNIAL_LOSER:
        weights[Archetype.WIN_NOW_SPENDER] += 15
        weights[Archetype.MEDDLING_MICROMANAGER] += 10

    if context.fanbase_passion is FanbasePassion.RABID:
        weights[Archetype.WIN_NOW_SPENDER] += 10
        weights[Archetype.MEDDLING_MICROMANAGER] += 5

    if context.market_size is MarketSize.SMALL:
        weights[Archetype.PENNY_PINCHER] += 10
        weights[Archetype.PATIENT_BUILDER] += 5
    elif context.market_size is MarketSize.MEGA:
        weights[Archetype.WIN_NOW_SPENDER] += 10

    if context.media_market is MediaMarket.NATIONAL_SPOTLIGHT:
        weights[Archetype.MEDDLING_MICROMANAGER] += 5

    return Archetype(weighted_choice(rng, {a.value: w for a, w in weights.items()}))


def generate_owner_traits(
    archetype: Archetype, market_size: MarketSize, rng: RandomSource
) -> OwnerTraits:
    profile = ARCHETYPE_PROFILES[archetype]
    patience_mod, spending_mod, control_mod, ego_mod = MARKET_INFLUENCE[market_size]

    def draw(bounds: Tuple[int, int], offset: int) -> int:
        return int(clamp(random_int(rng, bounds[0], bounds[1]) + offset, 1, 100))

    return OwnerTraits(
        patience=draw(profile.patience, patience_mod),
        spending=draw(profile.spending, spending_mod),
        control=draw(profile.control, control_mod),
        loyalty=draw(profile.loyalty, 0),
        ego=draw(profile.ego, ego_mod),
    )


def has_trait_conflict(trait: SecondaryTrait, existing: List[SecondaryTrait]) -> bool:
    conflict = TRAIT_CONFLICTS.get(trait)
    return conflict is not None and conflict in existing


def generate_secondary_traits(archetype: Archetype, rng: RandomSource) -> List[SecondaryTrait]:
    """Each preferred trait lands 70% of the time (a lone preference always does),
    with a 30% chance of one extra non-conflicting trait."""

    preferred = ARCHETYPE_PROFILES[archetype].preferred_secondary
    traits: List[SecondaryTrait] = []
    for trait in preferred:
        if len(preferred) == 1 or rng.random() < 0.7:
            traits.append(trait)

    extra = rng.random()
    if extra > 0.7:
        available = [
            t
            for t in ALL_SECONDARY_TRAITS
            if t not in traits and t not in preferred and not has_trait_conflict(t, traits)
        ]
        if available:
            traits.append(available[int(extra * len(available)) % len(available)])
    return traits


def generate_intervention_triggers(
    traits: OwnerTraits, fanbase_passion: FanbasePassion
) -> InterventionTriggers:
    losing = int(clamp(round_half_up(2 + traits.patience / 100 * 5), 2, 8))
    fan_floor = 50 - (traits.control - 50) / 2 + _FAN_PASSION_OFFSET[fanbase_passion]
    return InterventionTriggers(
        losing_streak_length=losing,
        fan_approval_floor=int(clamp(round_half_up(fan_floor), 20, 70)),
        media_scrutiny_threshold=int(clamp(round_half_up(100 - traits.ego), 20, 80)),
    )


def generate_owner_personality(
    context: TeamContext, rng: RandomSource, archetype: Optional[Archetype] = None
) -> OwnerPersonality:
    archetype = archetype or select_archetype_from_context(context, rng)
    traits = generate_owner_traits(archetype, context.market_size, rng)
    return OwnerPersonality(
        traits=traits,
        secondary_traits=generate_secondary_traits(archetype, rng),
        intervention_triggers=generate_intervention_triggers(traits, context.fanbase_passion),
    )


def generate_net_worth(market_size: MarketSize, rng: RandomSource) -> NetWorth:
    weights = NET_WORTH_WEIGHTS[market_size]
    return NetWorth(weighted_choice(rng, {level.value: weights[level] for level in ALL_NET_WORTH_LEVELS}))


def generate_owner_history(
    context: TeamContext, personality: OwnerPersonality, rng: RandomSource
) -> OwnerHistory:
    roll = rng.random()
    years = int(3 + roll * 37)
    patience = personality.traits.patience
    patience_mod = 2 if patience < 40 else -1 if patience > 70 else 0
    championships = 0
    if context.historical_success is HistoricalSuccess.DYNASTY:
        championships = int(roll * 4) + 1
    elif context.historical_success is HistoricalSuccess.CONTENDER:
        championships = 1 if roll > 0.6 else 0
    return OwnerHistory(
        years_as_owner=years,
        previous_gms_fired=max(0, years // 5 + patience_mod),
        championships_won=championships,
    )


def generate_owner(
    owner_id: str,
    first_name: str,
    last_name: str,
    context: TeamContext,
    rng: RandomSource,
    archetype: Optional[Archetype] = None,
) -> Owner:
    """Build a complete owner for ``context.team_id``."""

    personality = generate_owner_personality(context, rng, archetype)
    net_worth = generate_net_worth(context.market_size, rng)
    history = generate_owner_history(context, personality, rng)
    return Owner(
        id=owner_id,
        first_name=first_name,
        last_name=last_name,
        team_id=context.team_id,
        personality=personality,
        patience_meter=_INITIAL_PATIENCE[context.recent_performance],
        trust_level=_INITIAL_TRUST[context.historical_success],
        active_demands=[],
        years_as_owner=history.years_as_owner,
        previous_gms_fired=history.previous_gms_fired,
        championships_won=history.championships_won,
        net_worth=net_worth,
    )


def get_owner_personality_summary(owner: Owner) -> OwnerPersonalitySummary:
    """Player-facing description of how the owner operates. Contains no raw numbers."""

    traits = owner.personality.traits

    if traits.control >= 70:
        style = "Hands-on owner who likes to be involved in decisions"
    elif traits.control <= 30:
        style = "Hands-off owner who trusts the front office"
    elif traits.patience >= 70:
        style = "Patient owner willing to build for the future"
    elif traits.patience <= 30:
        style = "Impatient owner demanding immediate results"
    elif traits.spending >= 70:
        style = "Big spender willing to pay for top talent"
    elif traits.spending <= 30:
        style = "Frugal owner focused on efficiency"
    else:
        style = "Balanced owner with moderate expectations"

    key_traits: List[str] = []
    if traits.patience <= 30:
        key_traits.append("Demands quick results")
    elif traits.patience >= 70:
        key_traits.append("Willing to wait for success")
    if traits.spending <= 30:
        key_traits.append("Budget-conscious")
    elif traits.spending >= 70:
        key_traits.append("Opens the checkbook")
    if traits.loyalty <= 30:
        key_traits.append("Quick to make changes")
    elif traits.loyalty >= 70:
        key_traits.append("Values loyalty")
    if traits.ego >= 70:
        key_traits.append("Strong personality")
    for trait in owner.personality.secondary_traits:
        phrase = _SECONDARY_TRAIT_PHRASES.get(trait)
        if phrase:
            key_traits.append(phrase)

    if traits.control <= 30 and traits.loyalty >= 60:
        relationship = "Gives you full autonomy and supports your decisions"
    elif traits.control >= 70 and traits.patience <= 40:
        relationship = "Expects frequent updates and may override decisions"
    elif traits.loyalty >= 70:
        relationship = "Supportive but expects open communication"
    else:
        relationship = "Professional relationship based on results"

    risk = (
        (100 - traits.patience) / 100
        + (100 - traits.loyalty) / 100
        + traits.control / 100
        + (0.5 if owner.previous_gms_fired > 3 else 0)
    )
    if risk < 1:
        risk_level = "low"
    elif risk < 1.5:
        risk_level = "moderate"
    elif risk < 2:
        risk_level = "high"
    else:
        risk_level = "extreme"

    return OwnerPersonalitySummary(
        primary_style=style,
        key_traits=key_traits[:5],
        working_relationship=relationship,
        risk_level=risk_level,
    )


def get_archetype_description(archetype: Archetype) -> str:
    return ARCHETYPE_PROFILES[Archetype(archetype)].description


__all__ = [
    "ARCHETYPE_PROFILES",
    "Archetype",
    "ArchetypeProfile",
    "MARKET_INFLUENCE",
    "NET_WORTH_WEIGHTS",
    "OwnerHistory",
    "OwnerPersonalitySummary",
    "generate_intervention_triggers",
    "generate_net_worth",
    "generate_owner",
    "generate_owner_history",
    "generate_owner_personality",
    "generate_owner_traits",
    "generate_secondary_traits",
    "get_archetype_description",
    "get_owner_personality_summary",
    "has_trait_conflict",
    "select_archetype_from_context",
]

"""GM job market: openings, team interest in the player, and owner previews."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models import MarketSize, Owner, SecondaryTrait, clamp, round_half_up, to_plain
from ..rng import RandomSource


class OpeningReason(str, Enum):
    FIRED = "fired"
    RETIRED = "retired"
    RESIGNED = "resigned"
    PROMOTED = "promoted"
    EXPANSION = "expansion"
    NEW_OWNERSHIP = "newOwnership"


class TeamSituation(str, Enum):
    CONTENDER = "contender"
    PLAYOFF_TEAM = "playoff_team"
    REBUILDING = "rebuilding"
    FULL_REBUILD = "full_rebuild"
    MEDIOCRE = "mediocre"


class InterestLevel(str, Enum):
    ELITE = "elite"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    NONE = "none"


# Reputation tiers share the interest ladder's labels.
ReputationTier = InterestLevel

_SITUATION_DESCRIPTIONS = {
    TeamSituation.CONTENDER: "Championship contender with Super Bowl expectations",
    TeamSituation.PLAYOFF_TEAM: "Solid playoff team looking to take next step",
    TeamSituation.REBUILDING: "Team in rebuild mode with young talent",
    TeamSituation.FULL_REBUILD: "Full rebuild required - starting from scratch",
    TeamSituation.MEDIOCRE: "Middle-of-the-pack team with unclear direction",
}

_REPUTATION_DESCRIPTIONS = {
    ReputationTier.ELITE: "Top candidate - multiple teams interested",
    ReputationTier.HIGH: "Strong interest from contending teams",
    ReputationTier.MODERATE: "Some interest from rebuilding teams",
    ReputationTier.LOW: "Limited interest - may need to take less desirable jobs",
    ReputationTier.NONE: "No current interest from any teams",
}


@dataclass
class TeamSnapshot:
    """What the job market needs to know about a franchise."""

    id: str
    city: str
    nickname: str
    conference: str
    division: str
    wins: int
    losses: int
    prestige: int
    market_size: MarketSize = MarketSize.MEDIUM
    playoff_seed: Optional[int] = None
    championships: int = 0
    last_championship_year: Optional[int] = None


@dataclass
class JobOpening:
    id: str
    team_id: str
    team_name: str
    team_city: str
    conference: str
    division: str
    reason: OpeningReason
    date_opened: int
    year_opened: int
    situation: TeamSituation
    last_season_wins: int
    last_season_losses: int
    playoff_appearances_last_5_years: int
    championships_last_10_years: int
    current_roster_talent: int
    owner_name: str
    owner_patience: str
    owner_spending: str
    owner_control: str
    market_size: MarketSize
    prestige: int
    fanbase_expectations: str
    is_filled: bool = False
    filled_by_player_id: Optional[str] = None


@dataclass
class TeamInterest:
    opening_id: str
    team_id: str
    team_name: str
    interest_level: InterestLevel
    reasons_for_interest: List[str] = field(default_factory=list)
    reasons_against_interest: List[str] = field(default_factory=list)
    has_requested_interview: bool = False
    interview_scheduled: bool = False


@dataclass
class JobMarketState:
    current_year: int
    openings: List[JobOpening] = field(default_factory=list)
    team_interests: List[TeamInterest] = field(default_factory=list)
    player_reputation_score: float = 50
    player_reputation_tier: ReputationTier = ReputationTier.MODERATE

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobMarketState":
        openings = []
        for item in data.get("openings", []):
            payload = dict(item)
            payload["reason"] = OpeningReason(payload["reason"])
            payload["situation"] = TeamSituation(payload["situation"])
            payload["market_size"] = MarketSize(payload["market_size"])
            openings.append(JobOpening(**payload))
        interests = []
        for item in data.get("team_interests", []):
            payload = dict(item)
            payload["interest_level"] = InterestLevel(payload["interest_level"])
            interests.append(TeamInterest(**payload))
        score = data.get("player_reputation_score", 50)
        return cls(
            current_year=data["current_year"],
            openings=openings,
            team_interests=interests,
            player_reputation_score=score,
            player_reputation_tier=get_reputation_tier(score),
        )


@dataclass
class OwnerPreview:
    full_name: str
    years_as_owner: int
    previous_gms_fired: int
    championships_won: int
    patience_level: str
    spending_level: str
    control_level: str
    key_quote: str
    warnings: List[str] = field(default_factory=list)


def get_reputation_tier(score: float) -> ReputationTier:
    if score >= 85:
        return ReputationTier.ELITE
    if score >= 70:
        return ReputationTier.HIGH
    if score >= 50:
        return ReputationTier.MODERATE
    if score >= 30:
        return ReputationTier.LOW
    return ReputationTier.NONE


def get_reputation_tier_description(tier: ReputationTier) -> str:
    return _REPUTATION_DESCRIPTIONS[ReputationTier(tier)]


def create_job_market_state(year: int, reputation_score: float) -> JobMarketState:
    return JobMarketState(
        current_year=year,
        player_reputation_score=reputation_score,
        player_reputation_tier=get_reputation_tier(reputation_score),
    )


def assess_team_situation(team: TeamSnapshot) -> TeamSituation:
    games = team.wins + team.losses
    win_pct = team.wins / (games or 1)
    if team.playoff_seed is not None and team.playoff_seed <= 3:
        return TeamSituation.CONTENDER
    if team.playoff_seed is not None:
        return TeamSituation.PLAYOFF_TEAM
    if win_pct < 0.25:
        return TeamSituation.FULL_REBUILD
    if win_pct < 0.4:
        return TeamSituation.REBUILDING
    return TeamSituation.MEDIOCRE


def calculate_roster_talent(team: TeamSnapshot) -> int:
    """Prestige and last season's wins as a stand-in for roster ratings."""

    return int(clamp(round_half_up(team.prestige + team.wins / 17 * 20 - 10), 1, 100))


def categorize_trait_value(value: int) -> str:
    if value <= 35:
        return "low"
    if value <= 65:
        return "moderate"
    return "high"


def determine_fanbase_expectations(team: TeamSnapshot) -> str:
    if team.championships > 0 and team.last_championship_year is not None:
        return "championship"
    if team.prestige >= 70:
        return "high"
    if team.prestige >= 40:
        return "moderate"
    return "low"


def generate_job_opening(
    team: TeamSnapshot, owner: Owner, reason: OpeningReason, year: int, week: int
) -> JobOpening:
    """Public listing for a GM vacancy; owner traits only appear as coarse buckets."""

    traits = owner.personality.traits
    return JobOpening(
        id=f"opening-{team.id}-{year}",
        team_id=team.id,
        team_name=team.nickname,
        team_city=team.city,
        conference=team.conference,
        division=team.division,
        reason=OpeningReason(reason),
        date_opened=week,
        year_opened=year,
        situation=assess_team_situation(team),
        last_season_wins=team.wins,
        last_season_losses=team.losses,
        playoff_appearances_last_5_years=0,
        championships_last_10_years=1 if team.championships > 0 else 0,
        current_roster_talent=calculate_roster_talent(team),
        owner_name=owner.full_name,
        owner_patience=categorize_trait_value(traits.patience),
        owner_spending=categorize_trait_value(traits.spending),
        owner_control=categorize_trait_value(traits.control),
        market_size=team.market_size,
        prestige=team.prestige,
        fanbase_expectations=determine_fanbase_expectations(team),
    )


def get_interest_level_from_score(score: float) -> InterestLevel:
    if score >= 80:
        return InterestLevel.ELITE
    if score >= 60:
        return InterestLevel.HIGH
    if score >= 40:
        return InterestLevel.MODERATE
    if score >= 20:
        return InterestLevel.LOW
    return InterestLevel.NONE


def calculate_team_interest(
    opening: JobOpening,
    reputation_score: float,
    career_championships: int,
    career_win_percentage: float,
    times_fired: int,
) -> TeamInterest:
    reasons_for: List[str] = []
    reasons_against: List[str] = []
    score = reputation_score / 2

    if career_championships > 0:
        score += 15 * min(career_championships, 3)
        plural = "s" if career_championships > 1 else ""
        reasons_for.append(f"{career_championships} championship{plural} won")

    if career_win_percentage >= 0.55:
        score += 10
        reasons_for.append("Proven winning record")
    elif career_win_percentage < 0.45:
        score -= 10
        reasons_against.append("Losing career record")

    if times_fired >= 3:
        score -= 15
        reasons_against.append("Multiple firings raise concerns")
    elif times_fired >= 2:
        score -= 8
        reasons_against.append("Prior firing history")

    if opening.situation is TeamSituation.CONTENDER:
        if career_win_percentage >= 0.55:
            score += 10
            reasons_for.append("Experience fits contending team needs")
        else:
            score -= 5
            reasons_against.append("Contending team prefers proven winner")
    elif opening.situation is TeamSituation.FULL_REBUILD and times_fired <= 1:
        score += 5
        reasons_for.append("Fresh perspective for rebuild")

    # Prestigious franchises are pickier.
    if opening.prestige >= 70:
        score -= 10
    elif opening.prestige <= 30:
        score += 10

    return TeamInterest(
        opening_id=opening.id,
        team_id=opening.team_id,
        team_name=f"{opening.team_city} {opening.team_name}",
        interest_level=get_interest_level_from_score(score),
        reasons_for_interest=reasons_for,
        reasons_against_interest=reasons_against,
    )


def add_opening(state: JobMarketState, opening: JobOpening) -> JobMarketState:
    return replace(state, openings=[*state.openings, opening])


def fill_opening(state: JobMarketState, opening_id: str, filled_by: Optional[str]) -> JobMarketState:
    return replace(
        state,
        openings=[
            replace(o, is_filled=True, filled_by_player_id=filled_by) if o.id == opening_id else o
            for o in state.openings
        ],
    )


def calculate_all_interests(
    state: JobMarketState, career_championships: int, career_win_percentage: float, times_fired: int
) -> JobMarketState:
    interests = [
        calculate_team_interest(
            opening,
            state.player_reputation_score,
            career_championships,
            career_win_percentage,
            times_fired,
        )
        for opening in state.openings
        if not opening.is_filled
    ]
    return replace(state, team_interests=interests)


def get_available_openings(state: JobMarketState) -> List[JobOpening]:
    interested = {
        interest.team_id for interest in state.team_interests if interest.interest_level is not InterestLevel.NONE
    }
    return [o for o in state.openings if not o.is_filled and o.team_id in interested]


def get_interest_for_opening(state: JobMarketState, opening_id: str) -> Optional[TeamInterest]:
    for interest in state.team_interests:
        if interest.opening_id == opening_id:
            return interest
    return None


def get_team_situation_description(situation: TeamSituation) -> str:
    return _SITUATION_DESCRIPTIONS[TeamSituation(situation)]


def get_opening_description(opening: JobOpening) -> str:
    record = f"{opening.last_season_wins}-{opening.last_season_losses}"
    situation = get_team_situation_description(opening.situation)
    return f"The {opening.team_city} {opening.team_name} ({record}) - {situation}"


def simulate_other_hires(
    state: JobMarketState, rng: RandomSource, exclude_opening_id: Optional[str] = None
) -> JobMarketState:
    """Other GMs take open jobs; each opening fills with chance ``prestige / 200``."""

    openings = []
    for opening in state.openings:
        if opening.is_filled or opening.id == exclude_opening_id:
            openings.append(opening)
        elif rng.random() < opening.prestige / 200:
            openings.append(replace(opening, is_filled=True, filled_by_player_id=None))
        else:
            openings.append(opening)
    return replace(state, openings=openings)


def cleanup_old_openings(state: JobMarketState) -> JobMarketState:
    return replace(
        state,
        openings=[
            o for o in state.openings if not o.is_filled and o.year_opened >= state.current_year - 1
        ],
    )


def update_reputation(state: JobMarketState, new_score: float) -> JobMarketState:
    return replace(
        state,
        player_reputation_score=new_score,
        player_reputation_tier=get_reputation_tier(new_score),
    )


def _level(value: int, labels: List[str]) -> str:
    for ceiling, label in zip((20, 40, 60, 80), labels):
        if value <= ceiling:
            return label
    return labels[-1]


def _owner_quote(owner: Owner) -> str:
    personality = owner.personality
    traits = personality.traits
    if personality.has_trait(SecondaryTrait.CHAMPIONSHIP_OR_BUST):
        return "I'm not interested in playoff appearances. Championships are all that matter."
    if personality.has_trait(SecondaryTrait.ANALYTICS_BELIEVER):
        return "I believe in a data-driven approach to building a roster."
    if personality.has_trait(SecondaryTrait.OLD_SCHOOL):
        return "I trust football people who understand the game's fundamentals."
    if traits.patience >= 70:
        return "I understand building a winner takes time. I'm committed to the process."
    if traits.patience <= 30:
        return "Our fans deserve better, and I expect results soon."
    if traits.control >= 70:
        return "I like to be involved in major decisions. We work as a team here."
    if traits.spending >= 70:
        return "I'm willing to invest whatever it takes to win."
    return "I'm looking for a GM who shares my vision for this franchise."


def generate_owner_preview(owner: Owner) -> OwnerPreview:
    """What a candidate learns about the owner during an interview."""

    traits = owner.personality.traits
    warnings: List[str] = []
    if traits.patience <= 30:
        warnings.append("Known for having a short leash with GMs")
    if traits.control >= 70:
        warnings.append("Heavily involved in personnel decisions")
    if owner.previous_gms_fired >= 3:
        warnings.append(f"Has fired {owner.previous_gms_fired} GMs in their tenure")
    if traits.spending <= 30:
        warnings.append("Reluctant to spend on premium free agents")

    return OwnerPreview(
        full_name=owner.full_name,
        years_as_owner=owner.years_as_owner,
        previous_gms_fired=owner.previous_gms_fired,
        championships_won=owner.championships_won,
        patience_level=_level(
            traits.patience, ["very_impatient", "impatient", "moderate", "patient", "very_patient"]
        ),
        spending_level=_level(
            traits.spending, ["frugal", "budget_conscious", "moderate", "generous", "lavish"]
        ),
        control_level=_level(
            traits.control, ["hands_off", "occasional_input", "involved", "controlling", "micromanager"]
        ),
        key_quote=_owner_quote(owner),
        warnings=warnings,
    )


def validate_job_market_state(state: JobMarketState) -> bool:
    if not isinstance(state.current_year, int) or state.current_year < 2000:
        return False
    if not isinstance(state.openings, list) or not isinstance(state.team_interests, list):
        return False
    return 0 <= state.player_reputation_score <= 100


__all__ = [
    "InterestLevel",
    "JobMarketState",
    "JobOpening",
    "OpeningReason",
    "OwnerPreview",
    "ReputationTier",
    "TeamInterest",
    "TeamSituation",
    "TeamSnapshot",
    "add_opening",
    "assess_team_situation",
    "calculate_all_interests",
    "calculate_roster_talent",
    "calculate_team_interest",
    "categorize_trait_value",
    "cleanup_old_openings",
    "create_job_market_state",
    "determine_fanbase_expectations",
    "fill_opening",
    "generate_job_opening",
    "generate_owner_preview",
    "get_available_openings",
    "get_interest_for_opening",
    "get_interest_level_from_score",
    "get_opening_description",
    "get_reputation_tier",
    "get_reputation_tier_description",
    "get_team_situation_description",
    "simulate_other_hires",
    "update_reputation",
    "validate_job_market_state",
]

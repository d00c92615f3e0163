"""Translate game and season outcomes into patience meter changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..models import Owner, round_half_up
from ..patience import (
    JobSecurityLevel,
    calculate_patience_impact,
    get_job_security_level,
    get_patience_modifier,
)
from ..rng import RandomSource
from .patience_meter import (
    PatienceMeterState,
    apply_personality_modifiers,
    get_impact_description,
    update_patience_value,
)

# Events outside the primary patience table: (min, max) impact.
ADDITIONAL_EVENT_IMPACTS: Dict[str, Tuple[int, int]] = {
    "superBowlLoss": (5, 15),
    "conferenceChampionshipWin": (15, 25),
    "conferenceChampionshipLoss": (3, 10),
    "divisionalWin": (10, 18),
    "divisionalLoss": (0, 5),
    "wildCardWin": (8, 15),
    "wildCardLoss": (-5, 2),
    "missedPlayoffs": (-15, -5),
    "blowoutWin": (2, 5),
    "rivalryWin": (3, 8),
    "rivalryLoss": (-8, -3),
    "winningStreak5Plus": (5, 12),
    "tradedForStar": (3, 10),
    "tradedAwayStar": (-15, -5),
    "metExpectations": (2, 8),
    "missedExpectations": (-18, -8),
    "positiveMediaCoverage": (2, 6),
    "negativeMediaCoverage": (-8, -2),
    "playerScandal": (-12, -4),
    "communityInvolvement": (1, 5),
    "demandComplied": (5, 12),
    "demandPartiallyMet": (0, 5),
    "winlessStreak": (-20, -10),
}

SUPPORTED_EVENT_TYPES: Tuple[str, ...] = (
    "superBowlWin",
    "superBowlLoss",
    "conferenceChampionshipWin",
    "conferenceChampionshipLoss",
    "divisionalWin",
    "divisionalLoss",
    "wildCardWin",
    "wildCardLoss",
    "playoffAppearance",
    "missedPlayoffs",
    "winningSeason",
    "losingSeason",
    "winlessStreak",
    "blowoutWin",
    "blowoutLoss",
    "rivalryWin",
    "rivalryLoss",
    "losingStreak5Plus",
    "winningStreak5Plus",
    "majorFASigningWorks",
    "majorFASigningBusts",
    "draftPickBecomesStar",
    "topDraftPickBusts",
    "tradedForStar",
    "tradedAwayStar",
    "exceededExpectations",
    "metExpectations",
    "missedExpectedPlayoffs",
    "missedExpectations",
    "positiveMediaCoverage",
    "negativeMediaCoverage",
    "playerScandal",
    "communityInvolvement",
    "badPR",
    "demandComplied",
    "defiedOwner",
    "demandPartiallyMet",
)

PLAYOFF_RESULTS: Dict[str, str] = {
    "superBowlWin": "Won the Super Bowl!",
    "superBowlLoss": "Lost in the Super Bowl",
    "conferenceChampionshipWin": "Won the conference championship",
    "conferenceChampionshipLoss": "Lost in the conference championship",
    "divisionalWin": "Won divisional playoff game",
    "divisionalLoss": "Lost in divisional round",
    "wildCardWin": "Won wild card game",
    "wildCardLoss": "Lost in wild card round",
}

_PERSONNEL_DESCRIPTIONS = {
    "majorFASigningWorks": "Free agent signing {name} is performing well",
    "majorFASigningBusts": "Free agent signing {name} has been a disappointment",
    "draftPickBecomesStar": "Draft pick {name} has become a star",
    "topDraftPickBusts": "Top draft pick {name} has failed to develop",
    "tradedForStar": "Trade acquisition {name} has been a success",
    "tradedAwayStar": "Trading away {name} is being questioned",
}


@dataclass
class PatienceEvent:
    type: str
    week: int
    season: int
    description: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PatienceEventResult:
    event: PatienceEvent
    impact_value: int
    impact_description: str
    new_state: PatienceMeterState
    previous_level: JobSecurityLevel
    new_level: JobSecurityLevel
    level_changed: bool
    would_be_fired: bool


@dataclass
class SeasonResultContext:
    wins: int
    losses: int
    expected_wins: int
    season: int
    playoff_result: Optional[str] = None  # a PLAYOFF_RESULTS key or "missedPlayoffs"


@dataclass
class CumulativeImpact:
    total_impact: int
    net_description: str
    positive_events: int
    negative_events: int


def get_event_impact_range(event_type: str) -> Optional[Tuple[int, int]]:
    modifier = get_patience_modifier(event_type)
    if modifier is not None:
        return modifier.min_impact, modifier.max_impact
    return ADDITIONAL_EVENT_IMPACTS.get(event_type)


def calculate_event_impact(event_type: str, owner: Owner, random_factor: float) -> int:
    """Primary table first, then the secondary table, else no impact.

    The primary lookup is a presence check, so a primary row whose impact
    happens to round to zero never falls through to the secondary table.
    """

    patience = owner.personality.traits.patience
    if get_patience_modifier(event_type) is not None:
        return calculate_patience_impact(event_type, patience, random_factor)

    bounds = ADDITIONAL_EVENT_IMPACTS.get(event_type)
    if bounds is None:
        return 0
    low, high = bounds
    base = low + (high - low) * random_factor
    return apply_personality_modifiers(round_half_up(base), patience)


def process_patience_event(
    event: PatienceEvent,
    state: PatienceMeterState,
    owner: Owner,
    rng: RandomSource,
    history_cap: Optional[int] = None,
) -> PatienceEventResult:
    previous = get_job_security_level(state.current_value)
    impact = calculate_event_impact(event.type, owner, rng.random())
    new_state = update_patience_value(
        state, impact, event.week, event.season, event.description, history_cap
    )
    current = get_job_security_level(new_state.current_value)
    return PatienceEventResult(
        event=event,
        impact_value=impact,
        impact_description=get_impact_description(impact),
        new_state=new_state,
        previous_level=previous,
        new_level=current,
        level_changed=previous is not current,
        would_be_fired=current is JobSecurityLevel.FIRED,
    )


def process_multiple_events(
    events: List[PatienceEvent],
    state: PatienceMeterState,
    owner: Owner,
    rng: RandomSource,
    history_cap: Optional[int] = None,
) -> List[PatienceEventResult]:
    results: List[PatienceEventResult] = []
    current = state
    for event in events:
        result = process_patience_event(event, current, owner, rng, history_cap)
        results.append(result)
        current = result.new_state
    return results


def generate_season_events(
    context: SeasonResultContext, end_of_season_week: int = 18
) -> List[PatienceEvent]:
    """Chronological patience events for a finished season."""

    events: List[PatienceEvent] = []
    record = f"{context.wins}-{context.losses}"
    season = context.season

    if context.wins > context.losses:
        events.append(PatienceEvent(
            "winningSeason", end_of_season_week, season,
            f"Finished season with {record} record",
            {"wins": context.wins, "losses": context.losses},
        ))
    elif context.losses > context.wins:
        events.append(PatienceEvent(
            "losingSeason", end_of_season_week, season,
            f"Finished season with {record} record",
            {"wins": context.wins, "losses": context.losses},
        ))

    difference = context.wins - context.expected_wins
    if difference >= 4:
        events.append(PatienceEvent(
            "exceededExpectations", end_of_season_week, season,
            f"Exceeded expectations with {difference} more wins than projected",
            {"win_difference": difference},
        ))
    elif difference >= 0:
        events.append(PatienceEvent(
            "metExpectations", end_of_season_week, season,
            "Met preseason expectations", {"win_difference": difference},
        ))
    elif difference <= -4:
        events.append(PatienceEvent(
            "missedExpectations", end_of_season_week, season,
            f"Fell {abs(difference)} wins short of expectations",
            {"win_difference": difference},
        ))

    if context.playoff_result is None:
        return events

    playoff_week = end_of_season_week + 4
    if context.playoff_result == "missedPlayoffs":
        if context.expected_wins >= 9:
            events.append(PatienceEvent(
                "missedExpectedPlayoffs", playoff_week, season,
                "Failed to make playoffs despite expectations",
            ))
        else:
            events.append(PatienceEvent(
                "missedPlayoffs", playoff_week, season, "Did not qualify for playoffs"
            ))
        return events

    events.append(PatienceEvent("playoffAppearance", playoff_week, season, "Qualified for playoffs"))
    events.append(PatienceEvent(
        context.playoff_result, playoff_week + 1, season,
        PLAYOFF_RESULTS.get(context.playoff_result, "Playoff result"),
    ))
    return events


def process_season_end(
    context: SeasonResultContext,
    state: PatienceMeterState,
    owner: Owner,
    rng: RandomSource,
    end_of_season_week: int = 18,
    history_cap: Optional[int] = None,
) -> List[PatienceEventResult]:
    events = generate_season_events(context, end_of_season_week)
    return process_multiple_events(events, state, owner, rng, history_cap)


def create_demand_compliance_event(
    demand_id: str, demand_description: str, complied: bool, week: int, season: int
) -> PatienceEvent:
    if complied:
        event_type = "demandComplied"
        description = f"Complied with owner demand: {demand_description}"
    else:
        event_type = "defiedOwner"
        description = f"Defied owner demand: {demand_description}"
    return PatienceEvent(
        event_type, week, season, description, {"demand_id": demand_id, "complied": complied}
    )


def create_pr_event(
    positive: bool, description: str, week: int, season: int, severity: str = "moderate"
) -> PatienceEvent:
    if positive:
        event_type = "positiveMediaCoverage" if severity == "major" else "communityInvolvement"
    elif severity == "major":
        event_type = "badPR"
    elif severity == "moderate":
        event_type = "negativeMediaCoverage"
    else:
        event_type = "playerScandal"
    return PatienceEvent(
        event_type, week, season, description, {"positive": positive, "severity": severity}
    )


def create_personnel_event(event_type: str, player_name: str, week: int, season: int) -> PatienceEvent:
    template = _PERSONNEL_DESCRIPTIONS.get(event_type, "Personnel event: {name}")
    return PatienceEvent(
        event_type, week, season, template.format(name=player_name), {"player_name": player_name}
    )


def create_game_result_event(
    result: str, week: int, season: int, opponent: Optional[str] = None
) -> PatienceEvent:
    descriptions = {
        "blowoutWin": f"Dominated {opponent}" if opponent else "Blowout victory",
        "blowoutLoss": f"Embarrassing loss to {opponent}" if opponent else "Blowout loss",
        "rivalryWin": f"Beat rival {opponent}" if opponent else "Rivalry game victory",
        "rivalryLoss": f"Lost to rival {opponent}" if opponent else "Rivalry game loss",
        "losingStreak5Plus": "Extended losing streak continues",
        "winningStreak5Plus": "Extended winning streak continues",
    }
    return PatienceEvent(
        result, week, season, descriptions.get(result, "Game result"), {"opponent": opponent}
    )


def calculate_cumulative_impact(results: List[PatienceEventResult]) -> CumulativeImpact:
    total = sum(result.impact_value for result in results)
    return CumulativeImpact(
        total_impact=total,
        net_description=get_impact_description(total),
        positive_events=sum(1 for r in results if r.impact_value > 0),
        negative_events=sum(1 for r in results if r.impact_value < 0),
    )


def get_supported_event_types() -> List[str]:
    return list(SUPPORTED_EVENT_TYPES)


def validate_patience_event(event: PatienceEvent) -> bool:
    if event.type not in SUPPORTED_EVENT_TYPES:
        return False
    if not isinstance(event.week, int) or event.week < 0:
        return False
    if not isinstance(event.season, int) or event.season < 0:
        return False
    return isinstance(event.description, str) and len(event.description) > 0


__all__ = [
    "ADDITIONAL_EVENT_IMPACTS",
    "CumulativeImpact",
    "PLAYOFF_RESULTS",
    "PatienceEvent",
    "PatienceEventResult",
    "SUPPORTED_EVENT_TYPES",
    "SeasonResultContext",
    "calculate_cumulative_impact",
    "calculate_event_impact",
    "create_demand_compliance_event",
    "create_game_result_event",
    "create_personnel_event",
    "create_pr_event",
    "generate_season_events",
    "get_event_impact_range",
    "get_supported_event_types",
    "process_multiple_events",
    "process_patience_event",
    "process_season_end",
    "validate_patience_event",
]

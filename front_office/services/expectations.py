"""Owner expectations: season targets, multi-year timeline, evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..models import Owner, SecondaryTrait, clamp, round_half_up, to_plain


class TeamPhase(str, Enum):
    REBUILD = "rebuild"
    DEVELOPING = "developing"
    COMPETITIVE = "competitive"
    CONTENDER = "contender"
    DYNASTY = "dynasty"


class PlayoffRound(str, Enum):
    NONE = "none"
    WILD_CARD = "wildCard"
    DIVISIONAL = "divisional"
    CONFERENCE = "conference"
    SUPER_BOWL = "superBowl"

    @property
    def index(self) -> int:
        return list(PlayoffRound).index(self)


class ExpectationUrgency(str, Enum):
    PATIENT = "patient"
    NORMAL = "normal"
    PRESSING = "pressing"
    URGENT = "urgent"
    CRITICAL = "critical"


BASE_WIN_EXPECTATIONS: Dict[TeamPhase, Tuple[int, int]] = {
    TeamPhase.REBUILD: (3, 6),
    TeamPhase.DEVELOPING: (6, 8),
    TeamPhase.COMPETITIVE: (8, 10),
    TeamPhase.CONTENDER: (10, 12),
    TeamPhase.DYNASTY: (11, 14),
}

_PHASE_DESCRIPTIONS = {
    TeamPhase.REBUILD: "Building for the future",
    TeamPhase.DEVELOPING: "Developing young talent",
    TeamPhase.COMPETITIVE: "Pushing for playoffs",
    TeamPhase.CONTENDER: "Championship window open",
    TeamPhase.DYNASTY: "Sustaining excellence",
}

_URGENCY_DESCRIPTIONS = {
    ExpectationUrgency.PATIENT: "Owner is patient with the process",
    ExpectationUrgency.NORMAL: "Standard expectations",
    ExpectationUrgency.PRESSING: "Owner expects progress soon",
    ExpectationUrgency.URGENT: "Owner demands results this season",
    ExpectationUrgency.CRITICAL: "Your job is on the line",
}

_TIMELINE_GOALS: Dict[TeamPhase, Tuple[str, ...]] = {
    TeamPhase.COMPETITIVE: ("Push for playoffs", "Make playoffs and win a game", "Compete for division title"),
    TeamPhase.CONTENDER: ("Win division and advance in playoffs", "Deep playoff run", "Compete for championship"),
    TeamPhase.DYNASTY: ("Win championship", "Repeat as champions", "Sustain excellence"),
}


@dataclass
class SeasonGoal:
    id: str
    type: str  # wins, playoffs, division, draft, development, salary, other
    description: str
    is_required: bool
    deadline: Optional[int] = None


@dataclass
class SeasonExpectation:
    minimum_wins: int
    target_wins: int
    expected_playoffs: bool
    minimum_playoff_round: Optional[PlayoffRound]
    priority_goals: List[SeasonGoal] = field(default_factory=list)
    flexibility_level: str = "moderate"


@dataclass
class ExpectationTimeline:
    year1_goal: str
    year2_goal: str
    year3_goal: str
    year4_goal: Optional[str]
    year5_goal: Optional[str]
    current_year: int = 1
    total_years: int = 3


@dataclass
class LongTermExpectation:
    phase: TeamPhase
    years_to_contend: int
    ultimate_goal: str  # superBowl, playoffs, competitive, rebuild
    timeline: ExpectationTimeline
    tolerance: int


@dataclass
class ExpectationHistory:
    season: int
    expectation: SeasonExpectation
    met: bool
    owner_reaction: str


@dataclass
class SeasonOutcome:
    wins: int
    made_playoffs: bool = False
    playoff_round: PlayoffRound = PlayoffRound.NONE
    goals_achieved: List[str] = field(default_factory=list)


@dataclass
class SeasonEvaluation:
    score: float
    met: bool
    exceeded: bool
    reaction: str
    summary: str


@dataclass
class ExpectationsViewModel:
    current_phase: TeamPhase
    phase_description: str
    season_goal: str
    urgency_description: str
    years_remaining: Optional[int]
    progress_description: str
    owner_message: str


def _season_expectation_from_dict(data: Dict[str, Any]) -> SeasonExpectation:
    round_value = data.get("minimum_playoff_round")
    return SeasonExpectation(
        minimum_wins=data["minimum_wins"],
        target_wins=data["target_wins"],
        expected_playoffs=data["expected_playoffs"],
        minimum_playoff_round=PlayoffRound(round_value) if round_value else None,
        priority_goals=[SeasonGoal(**goal) for goal in data.get("priority_goals", [])],
        flexibility_level=data.get("flexibility_level", "moderate"),
    )


@dataclass
class ExpectationsState:
    owner_id: str
    team_id: str
    current_season: int
    short_term: SeasonExpectation
    long_term: LongTermExpectation
    urgency: ExpectationUrgency
    last_updated: int
    history_of_expectations: List[ExpectationHistory] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpectationsState":
        long_term = data["long_term"]
        return cls(
            owner_id=data["owner_id"],
            team_id=data["team_id"],
            current_season=data["current_season"],
            short_term=_season_expectation_from_dict(data["short_term"]),
            long_term=LongTermExpectation(
                phase=TeamPhase(long_term["phase"]),
                years_to_contend=long_term["years_to_contend"],
                ultimate_goal=long_term["ultimate_goal"],
                timeline=ExpectationTimeline(**long_term["timeline"]),
                tolerance=long_term["tolerance"],
            ),
            urgency=ExpectationUrgency(data["urgency"]),
            last_updated=data.get("last_updated", data["current_season"]),
            history_of_expectations=[
                ExpectationHistory(
                    season=item["season"],
                    expectation=_season_expectation_from_dict(item["expectation"]),
                    met=item["met"],
                    owner_reaction=item["owner_reaction"],
                )
                for item in data.get("history_of_expectations", [])
            ],
        )


def _wants_now(owner: Owner) -> Tuple[bool, bool]:
    personality = owner.personality
    return (
        personality.has_trait(SecondaryTrait.WIN_NOW),
        personality.has_trait(SecondaryTrait.CHAMPIONSHIP_OR_BUST),
    )


def generate_season_goals(phase: TeamPhase, owner: Owner) -> List[SeasonGoal]:
    specs: List[Tuple[str, str, bool]] = []
    if phase is TeamPhase.REBUILD:
        specs += [("development", "Develop young talent", True), ("draft", "Build through the draft", True)]
    elif phase is TeamPhase.DEVELOPING:
        specs += [
            ("wins", "Show improvement in win total", True),
            ("development", "Continue player development", False),
        ]
    elif phase is TeamPhase.COMPETITIVE:
        specs.append(("playoffs", "Compete for playoff spot", owner.personality.traits.patience < 50))
    elif phase is TeamPhase.CONTENDER:
        specs += [("playoffs", "Make playoffs", True), ("division", "Compete for division title", False)]
    else:
        specs.append(("playoffs", "Deep playoff run", True))

    if owner.personality.has_trait(SecondaryTrait.PR_OBSESSED):
        specs.append(("other", "Maintain positive media presence", False))
    if owner.personality.has_trait(SecondaryTrait.ANALYTICS_BELIEVER):
        specs.append(("other", "Embrace analytics in decision-making", False))

    return [
        SeasonGoal(id=f"goal-{index}", type=kind, description=text, is_required=required)
        for index, (kind, text, required) in enumerate(specs, start=1)
    ]


def generate_season_expectations(
    owner: Owner, team_phase: TeamPhase, previous_season_wins: int, roster_strength: float
) -> SeasonExpectation:
    """Win targets and playoff requirements for the coming season.

    ``previous_season_wins`` is accepted for call-site symmetry with
    :func:`advance_expectations`; targets depend on phase and roster only.
    """

    team_phase = TeamPhase(team_phase)
    patience = owner.personality.traits.patience
    win_now, championship_or_bust = _wants_now(owner)

    base_min, base_target = BASE_WIN_EXPECTATIONS[team_phase]
    roster_modifier = (roster_strength - 50) / 50
    minimum = int(clamp(round_half_up(base_min + roster_modifier * 2), 0, 17))
    target = int(max(minimum, min(17, round_half_up(base_target + roster_modifier * 2))))

    if win_now or championship_or_bust:
        minimum = min(17, minimum + 2)
        target = min(17, target + 2)
    if patience <= 30:
        minimum = min(17, minimum + 1)
    elif patience >= 70:
        minimum = max(0, minimum - 1)

    expected_playoffs = team_phase in (TeamPhase.CONTENDER, TeamPhase.DYNASTY) or (
        team_phase is TeamPhase.COMPETITIVE and (win_now or championship_or_bust)
    )

    minimum_round: Optional[PlayoffRound] = None
    if team_phase is TeamPhase.DYNASTY:
        minimum_round = PlayoffRound.CONFERENCE if championship_or_bust else PlayoffRound.DIVISIONAL
    elif team_phase is TeamPhase.CONTENDER:
        minimum_round = PlayoffRound.DIVISIONAL if championship_or_bust else PlayoffRound.WILD_CARD
    elif expected_playoffs:
        minimum_round = PlayoffRound.WILD_CARD

    if patience >= 70 and not championship_or_bust:
        flexibility = "flexible"
    elif patience <= 30 or championship_or_bust:
        flexibility = "strict"
    else:
        flexibility = "moderate"

    return SeasonExpectation(
        minimum_wins=minimum,
        target_wins=target,
        expected_playoffs=expected_playoffs,
        minimum_playoff_round=minimum_round,
        priority_goals=generate_season_goals(team_phase, owner),
        flexibility_level=flexibility,
    )


def _timeline_goals(phase: TeamPhase, years_to_contend: int) -> List[Optional[str]]:
    if phase is TeamPhase.REBUILD:
        return [
            "Establish foundation and acquire draft capital",
            "Develop young core players",
            "Become competitive and push for .500 record",
            "Compete for playoff spot" if years_to_contend > 3 else None,
            "Make playoffs and compete" if years_to_contend > 4 else None,
        ]
    if phase is TeamPhase.DEVELOPING:
        return [
            "Show improvement and develop talent",
            "Compete for playoff spot",
            "Make playoffs",
            "Deep playoff run" if years_to_contend > 2 else None,
            None,
        ]
    return [*_TIMELINE_GOALS[phase], None, None]


def generate_timeline(phase: TeamPhase, years_to_contend: int) -> ExpectationTimeline:
    goals = _timeline_goals(phase, years_to_contend)
    return ExpectationTimeline(
        year1_goal=goals[0] or "Establish direction",
        year2_goal=goals[1] or "Continue progress",
        year3_goal=goals[2] or "Achieve objectives",
        year4_goal=goals[3],
        year5_goal=goals[4],
        current_year=1,
        total_years=max(3, years_to_contend + 1),
    )


def generate_long_term_expectations(owner: Owner, current_phase: TeamPhase) -> LongTermExpectation:
    current_phase = TeamPhase(current_phase)
    patience = owner.personality.traits.patience
    win_now, championship_or_bust = _wants_now(owner)
    long_term_thinker = owner.personality.has_trait(SecondaryTrait.LONG_TERM_THINKER)

    if current_phase is TeamPhase.REBUILD:
        years = 4 if long_term_thinker else 2 if win_now else 3
    elif current_phase is TeamPhase.DEVELOPING:
        years = 3 if long_term_thinker else 1 if win_now else 2
    elif current_phase is TeamPhase.COMPETITIVE:
        years = 1
    else:
        years = 0

    if patience >= 70:
        years = min(5, years + 1)
    elif patience <= 30:
        years = max(0, years - 1)

    if championship_or_bust or win_now or current_phase in (TeamPhase.CONTENDER, TeamPhase.DYNASTY):
        ultimate = "superBowl"
    elif current_phase is TeamPhase.COMPETITIVE:
        ultimate = "playoffs"
    elif current_phase is TeamPhase.DEVELOPING:
        ultimate = "competitive"
    else:
        ultimate = "rebuild"

    if patience >= 70 and long_term_thinker:
        tolerance = 80
    elif patience <= 30 or championship_or_bust:
        tolerance = 30
    elif patience >= 50:
        tolerance = 60
    else:
        tolerance = 45

    return LongTermExpectation(
        phase=current_phase,
        years_to_contend=years,
        ultimate_goal=ultimate,
        timeline=generate_timeline(current_phase, years),
        tolerance=tolerance,
    )


def calculate_urgency(long_term: LongTermExpectation, current_year: int) -> ExpectationUrgency:
    remaining = long_term.timeline.total_years - current_year
    tolerance = long_term.tolerance

    if remaining <= 0:
        return ExpectationUrgency.CRITICAL if tolerance < 50 else ExpectationUrgency.URGENT
    if remaining == 1:
        if tolerance < 40:
            return ExpectationUrgency.URGENT
        if tolerance < 60:
            return ExpectationUrgency.PRESSING
        return ExpectationUrgency.NORMAL
    if remaining == 2:
        return ExpectationUrgency.PRESSING if tolerance < 30 else ExpectationUrgency.NORMAL
    if tolerance >= 70:
        return ExpectationUrgency.PATIENT
    return ExpectationUrgency.NORMAL


def create_expectations_state(
    owner: Owner,
    team_id: str,
    current_season: int,
    team_phase: TeamPhase,
    previous_season_wins: int,
    roster_strength: float,
) -> ExpectationsState:
    long_term = generate_long_term_expectations(owner, team_phase)
    return ExpectationsState(
        owner_id=owner.id,
        team_id=team_id,
        current_season=current_season,
        short_term=generate_season_expectations(owner, team_phase, previous_season_wins, roster_strength),
        long_term=long_term,
        urgency=calculate_urgency(long_term, 1),
        last_updated=current_season,
    )


def evaluate_season_expectations(
    expectations: SeasonExpectation, result: SeasonOutcome
) -> SeasonEvaluation:
    """Score a season from wins (up to 45), playoffs (up to 45) and required goals (up to 20).

    ``met`` starts at 60 while the reaction only reaches ``satisfied`` at 65.
    """

    score: float = 0
    if result.wins >= expectations.target_wins:
        score += 45
    elif result.wins >= expectations.minimum_wins:
        score += 35
    elif result.wins >= expectations.minimum_wins - 2:
        score += 20
    else:
        score += 5

    if expectations.expected_playoffs:
        if result.made_playoffs:
            score += 35
            minimum = expectations.minimum_playoff_round or PlayoffRound.NONE
            if PlayoffRound(result.playoff_round).index >= minimum.index:
                score += 10
    else:
        score += 45 if result.made_playoffs else 30

    required = [goal for goal in expectations.priority_goals if goal.is_required]
    if required:
        achieved = sum(1 for goal in required if goal.id in result.goals_achieved)
        score += achieved / len(required) * 20
    else:
        score += 15

    met = score >= 60
    exceeded = score >= 85
    if score >= 90:
        reaction = "pleased"
    elif score >= 65:
        reaction = "satisfied"
    elif score >= 45:
        reaction = "disappointed"
    else:
        reaction = "angry"

    if exceeded:
        summary = "Season exceeded all expectations"
    elif met:
        summary = "Season met expectations"
    elif score >= 45:
        summary = "Season fell short of expectations"
    else:
        summary = "Season was a significant disappointment"

    return SeasonEvaluation(score=score, met=met, exceeded=exceeded, reaction=reaction, summary=summary)


def advance_expectations(
    state: ExpectationsState,
    result: SeasonOutcome,
    owner: Owner,
    new_team_phase: TeamPhase,
    new_roster_strength: float,
    history_cap: Optional[int] = None,
) -> ExpectationsState:
    evaluation = evaluate_season_expectations(state.short_term, result)
    entry = ExpectationHistory(
        season=state.current_season,
        expectation=state.short_term,
        met=evaluation.met,
        owner_reaction=evaluation.reaction,
    )

    next_year = state.long_term.timeline.current_year + 1
    tolerance = state.long_term.tolerance
    if evaluation.exceeded and owner.personality.traits.patience >= 40:
        tolerance = min(100, tolerance + 10)
    if evaluation.reaction in ("disappointed", "angry"):
        tolerance = max(0, tolerance - 15)

    long_term = replace(
        state.long_term,
        phase=TeamPhase(new_team_phase),
        timeline=replace(state.long_term.timeline, current_year=next_year),
        tolerance=tolerance,
    )
    history = [*state.history_of_expectations, entry]
    if history_cap is not None:
        history = history[-history_cap:]

    return replace(
        state,
        current_season=state.current_season + 1,
        short_term=generate_season_expectations(owner, new_team_phase, result.wins, new_roster_strength),
        long_term=long_term,
        urgency=calculate_urgency(long_term, next_year),
        last_updated=state.current_season + 1,
        history_of_expectations=history,
    )


def _progress_description(state: ExpectationsState) -> str:
    recent = state.history_of_expectations[-3:]
    if not recent:
        return "First season with current ownership"
    ratio = sum(1 for entry in recent if entry.met) / len(recent)
    if ratio >= 0.8:
        return "Consistently meeting or exceeding expectations"
    if ratio >= 0.5:
        return "Mixed results relative to expectations"
    return "Struggling to meet expectations"


def _owner_message(state: ExpectationsState, owner: Owner) -> str:
    name = owner.full_name
    if state.urgency is ExpectationUrgency.CRITICAL:
        quote = "I need to see significant improvement immediately."
    elif state.urgency is ExpectationUrgency.URGENT:
        quote = "This season is crucial. We need results."
    elif state.urgency is ExpectationUrgency.PRESSING:
        quote = "I expect to see progress this year."
    elif state.long_term.phase is TeamPhase.DYNASTY:
        quote = "Let's keep this winning tradition alive."
    elif state.long_term.phase is TeamPhase.CONTENDER:
        quote = "Our window is now. Let's make the most of it."
    elif state.long_term.phase is TeamPhase.REBUILD:
        quote = "I understand we're building. Just show me progress."
    else:
        quote = "I trust you to guide this team in the right direction."
    return f'{name}: "{quote}"'


def create_expectations_view_model(state: ExpectationsState, owner: Owner) -> ExpectationsViewModel:
    short = state.short_term
    if short.expected_playoffs:
        season_goal = f"Win {short.minimum_wins}+ games and make playoffs"
    else:
        season_goal = f"Win {short.minimum_wins}+ games"
    remaining = state.long_term.timeline.total_years - state.long_term.timeline.current_year
    return ExpectationsViewModel(
        current_phase=state.long_term.phase,
        phase_description=_PHASE_DESCRIPTIONS[state.long_term.phase],
        season_goal=season_goal,
        urgency_description=_URGENCY_DESCRIPTIONS[state.urgency],
        years_remaining=remaining if remaining > 0 else None,
        progress_description=_progress_description(state),
        owner_message=_owner_message(state, owner),
    )


def get_current_year_goal(timeline: ExpectationTimeline) -> str:
    goals = [
        timeline.year1_goal,
        timeline.year2_goal,
        timeline.year3_goal,
        timeline.year4_goal,
        timeline.year5_goal,
    ]
    index = timeline.current_year - 1
    if 0 <= index < len(goals) and goals[index]:
        return goals[index]
    return "Continue progress toward goals"


def validate_expectations_state(state: ExpectationsState) -> bool:
    if not state.owner_id or not state.team_id:
        return False
    if state.current_season < 1:
        return False
    if state.short_term is None or state.long_term is None:
        return False
    if not 0 <= state.short_term.minimum_wins <= 17:
        return False
    if state.short_term.target_wins < state.short_term.minimum_wins:
        return False
    if not 0 <= state.long_term.tolerance <= 100:
        return False
    return isinstance(state.history_of_expectations, list)


def determine_team_phase(wins: int, roster_strength: float, recent_playoff_appearances: int) -> TeamPhase:
    """Classify a team from its last record, roster strength and playoff trips over three years."""

    if wins >= 12 and roster_strength >= 75 and recent_playoff_appearances >= 3:
        return TeamPhase.DYNASTY
    if wins >= 10 and roster_strength >= 65 and recent_playoff_appearances >= 2:
        return TeamPhase.CONTENDER
    if wins >= 7 and roster_strength >= 50:
        return TeamPhase.COMPETITIVE
    if wins >= 4 or roster_strength >= 40:
        return TeamPhase.DEVELOPING
    return TeamPhase.REBUILD


__all__ = [
    "BASE_WIN_EXPECTATIONS",
    "ExpectationHistory",
    "ExpectationTimeline",
    "ExpectationUrgency",
    "ExpectationsState",
    "ExpectationsViewModel",
    "LongTermExpectation",
    "PlayoffRound",
    "SeasonEvaluation",
    "SeasonExpectation",
    "SeasonGoal",
    "SeasonOutcome",
    "TeamPhase",
    "advance_expectations",
    "calculate_urgency",
    "create_expectations_state",
    "create_expectations_view_model",
    "determine_team_phase",
    "evaluate_season_expectations",
    "generate_long_term_expectations",
    "generate_season_expectations",
    "generate_season_goals",
    "generate_timeline",
    "get_current_year_goal",
    "validate_expectations_state",
]

"""Tests for owner season and long-term expectations."""
from __future__ import annotations

from dataclasses import replace

import pytest

from front_office.models import OwnerTraits, SecondaryTrait, create_default_owner
from front_office.services.expectations import (
    ExpectationsState,
    ExpectationUrgency,
    LongTermExpectation,
    PlayoffRound,
    SeasonOutcome,
    TeamPhase,
    advance_expectations,
    calculate_urgency,
    create_expectations_state,
    create_expectations_view_model,
    determine_team_phase,
    evaluate_season_expectations,
    generate_long_term_expectations,
    generate_season_expectations,
    generate_timeline,
    get_current_year_goal,
    validate_expectations_state,
)


def build_owner(patience: int = 50, secondary=()):
    owner = create_default_owner("owner-1", "team-1")
    personality = replace(
        owner.personality,
        traits=OwnerTraits(patience=patience, spending=50, control=50, loyalty=50, ego=50),
        secondary_traits=list(secondary),
    )
    return replace(owner, personality=personality)


def build_long_term(phase: TeamPhase, years: int, tolerance: int) -> LongTermExpectation:
    return LongTermExpectation(
        phase=phase,
        years_to_contend=years,
        ultimate_goal="playoffs",
        timeline=generate_timeline(phase, years),
        tolerance=tolerance,
    )


def test_rebuild_expectations_for_average_owner():
    expectations = generate_season_expectations(build_owner(), TeamPhase.REBUILD, 4, 50)
    assert (expectations.minimum_wins, expectations.target_wins) == (3, 6)
    assert not expectations.expected_playoffs
    assert expectations.minimum_playoff_round is None
    assert expectations.flexibility_level == "moderate"
    assert [goal.type for goal in expectations.priority_goals] == ["development", "draft"]
    assert all(goal.is_required for goal in expectations.priority_goals)


def test_roster_strength_moves_win_targets():
    strong = generate_season_expectations(build_owner(), TeamPhase.REBUILD, 4, 100)
    assert (strong.minimum_wins, strong.target_wins) == (5, 8)
    weak = generate_season_expectations(build_owner(), TeamPhase.REBUILD, 4, 0)
    assert (weak.minimum_wins, weak.target_wins) == (1, 4)


def test_championship_or_bust_owner_raises_the_bar():
    owner = build_owner(secondary=[SecondaryTrait.CHAMPIONSHIP_OR_BUST])
    expectations = generate_season_expectations(owner, TeamPhase.CONTENDER, 11, 50)
    assert (expectations.minimum_wins, expectations.target_wins) == (12, 14)
    assert expectations.expected_playoffs
    assert expectations.minimum_playoff_round is PlayoffRound.DIVISIONAL
    assert expectations.flexibility_level == "strict"


def test_owner_temperament_shifts_minimum():
    patient = generate_season_expectations(build_owner(patience=80), TeamPhase.REBUILD, 4, 50)
    assert patient.minimum_wins == 2
    assert patient.flexibility_level == "flexible"
    impatient = generate_season_expectations(build_owner(patience=20), TeamPhase.REBUILD, 4, 50)
    assert impatient.minimum_wins == 4


def test_win_targets_stay_in_season_bounds():
    owner = build_owner(patience=10, secondary=[SecondaryTrait.WIN_NOW])
    expectations = generate_season_expectations(owner, TeamPhase.DYNASTY, 15, 100)
    assert expectations.target_wins <= 17
    assert expectations.minimum_wins <= expectations.target_wins


def test_hitting_the_minimum_meets_expectations():
    expectations = generate_season_expectations(build_owner(), TeamPhase.REBUILD, 4, 50)
    at_minimum = evaluate_season_expectations(expectations, SeasonOutcome(wins=expectations.minimum_wins))
    assert at_minimum.score == 65
    assert at_minimum.met
    assert at_minimum.reaction == "satisfied"

    short = evaluate_season_expectations(expectations, SeasonOutcome(wins=expectations.minimum_wins - 1))
    assert short.score < at_minimum.score
    assert not short.met
    assert short.reaction == "disappointed"


def test_deep_playoff_run_exceeds_expectations():
    owner = build_owner(secondary=[SecondaryTrait.CHAMPIONSHIP_OR_BUST])
    expectations = generate_season_expectations(owner, TeamPhase.CONTENDER, 11, 50)
    outcome = SeasonOutcome(
        wins=14, made_playoffs=True, playoff_round=PlayoffRound.SUPER_BOWL, goals_achieved=["goal-1"]
    )
    evaluation = evaluate_season_expectations(expectations, outcome)
    assert evaluation.score == 110
    assert evaluation.exceeded
    assert evaluation.reaction == "pleased"

    early_exit = replace(outcome, playoff_round=PlayoffRound.WILD_CARD)
    assert evaluate_season_expectations(expectations, early_exit).score == 100


def test_missing_expected_playoffs_is_a_disappointment():
    expectations = generate_season_expectations(build_owner(), TeamPhase.CONTENDER, 11, 50)
    evaluation = evaluate_season_expectations(expectations, SeasonOutcome(wins=5))
    assert evaluation.score == 5
    assert evaluation.reaction == "angry"
    assert evaluation.summary == "Season was a significant disappointment"


def test_long_term_expectations_for_average_rebuild():
    long_term = generate_long_term_expectations(build_owner(), TeamPhase.REBUILD)
    assert long_term.years_to_contend == 3
    assert long_term.ultimate_goal == "rebuild"
    assert long_term.tolerance == 60
    assert long_term.timeline.total_years == 4
    assert long_term.timeline.year4_goal is None


def test_patient_long_term_thinker():
    owner = build_owner(patience=80, secondary=[SecondaryTrait.LONG_TERM_THINKER])
    long_term = generate_long_term_expectations(owner, TeamPhase.REBUILD)
    assert long_term.years_to_contend == 5
    assert long_term.tolerance == 80
    assert long_term.timeline.year5_goal == "Make playoffs and compete"


@pytest.mark.parametrize(
    "year, tolerance, urgency",
    [
        (3, 20, ExpectationUrgency.CRITICAL),
        (3, 60, ExpectationUrgency.URGENT),
        (2, 30, ExpectationUrgency.URGENT),
        (2, 50, ExpectationUrgency.PRESSING),
        (2, 70, ExpectationUrgency.NORMAL),
        (1, 20, ExpectationUrgency.PRESSING),
        (1, 80, ExpectationUrgency.NORMAL),
    ],
)
def test_urgency_by_years_remaining(year, tolerance, urgency):
    long_term = build_long_term(TeamPhase.COMPETITIVE, 1, tolerance)
    assert long_term.timeline.total_years == 3
    assert calculate_urgency(long_term, year) is urgency


def test_long_runway_with_high_tolerance_is_patient():
    assert calculate_urgency(build_long_term(TeamPhase.REBUILD, 4, 80), 1) is ExpectationUrgency.PATIENT


def test_advance_rolls_the_season_forward():
    owner = build_owner()
    state = create_expectations_state(owner, "team-1", 1, TeamPhase.REBUILD, 4, 50)
    assert state.urgency is ExpectationUrgency.NORMAL

    advanced = advance_expectations(state, SeasonOutcome(wins=2), owner, TeamPhase.REBUILD, 55)
    assert advanced.current_season == 2
    assert advanced.last_updated == 2
    assert advanced.long_term.timeline.current_year == 2
    assert advanced.long_term.tolerance == 45
    assert len(advanced.history_of_expectations) == 1
    entry = advanced.history_of_expectations[0]
    assert (entry.season, entry.met, entry.owner_reaction) == (1, False, "disappointed")
    assert advanced.urgency is ExpectationUrgency.NORMAL


def test_advance_caps_history():
    owner = build_owner()
    state = create_expectations_state(owner, "team-1", 1, TeamPhase.DEVELOPING, 6, 50)
    for _ in range(4):
        state = advance_expectations(state, SeasonOutcome(wins=7), owner, TeamPhase.DEVELOPING, 50, history_cap=2)
    assert [entry.season for entry in state.history_of_expectations] == [3, 4]


def test_view_model_for_fresh_rebuild():
    owner = build_owner()
    state = create_expectations_state(owner, "team-1", 1, TeamPhase.REBUILD, 4, 50)
    view = create_expectations_view_model(state, owner)
    assert view.season_goal == "Win 3+ games"
    assert view.years_remaining == 3
    assert view.progress_description == "First season with current ownership"
    assert view.owner_message == 'John Smith: "I understand we\'re building. Just show me progress."'


def test_current_year_goal_falls_back():
    timeline = generate_timeline(TeamPhase.REBUILD, 3)
    assert get_current_year_goal(timeline) == "Establish foundation and acquire draft capital"
    assert get_current_year_goal(replace(timeline, current_year=4)) == "Continue progress toward goals"


@pytest.mark.parametrize(
    "wins, roster, playoffs, phase",
    [
        (13, 80, 3, TeamPhase.DYNASTY),
        (11, 70, 2, TeamPhase.CONTENDER),
        (11, 70, 1, TeamPhase.COMPETITIVE),
        (5, 30, 0, TeamPhase.DEVELOPING),
        (2, 30, 0, TeamPhase.REBUILD),
    ],
)
def test_determine_team_phase(wins, roster, playoffs, phase):
    assert determine_team_phase(wins, roster, playoffs) is phase


def test_state_round_trip_and_validation():
    owner = build_owner(secondary=[SecondaryTrait.WIN_NOW])
    state = create_expectations_state(owner, "team-1", 1, TeamPhase.COMPETITIVE, 8, 60)
    state = advance_expectations(state, SeasonOutcome(wins=10, made_playoffs=True), owner, TeamPhase.CONTENDER, 70)
    assert ExpectationsState.from_dict(state.to_dict()) == state
    assert validate_expectations_state(state)
    broken = replace(state, short_term=replace(state.short_term, target_wins=state.short_term.minimum_wins - 1))
    assert not validate_expectations_state(broken)

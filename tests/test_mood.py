"""Tests for owner mood tracking."""
from __future__ import annotations

from dataclasses import replace

import pytest

from front_office.models import OwnerTraits, SecondaryTrait, create_default_owner
from front_office.services.mood import (
    MOOD_EVENT_IMPACTS,
    MoodEventType,
    OwnerMood,
    OwnerMoodState,
    WeeklyMood,
    apply_mood_decay,
    apply_personality_modifiers,
    create_mood_event,
    create_owner_mood_state,
    get_mood_from_value,
    get_mood_trend,
    get_owner_sentiment,
    get_recent_events_summary,
    get_streak_description,
    process_mood_event,
    should_make_public_statement,
)


def build_owner(patience: int = 50, loyalty: int = 50, ego: int = 50, secondary=()):
    owner = create_default_owner("owner-1", "team-1")
    personality = replace(
        owner.personality,
        traits=OwnerTraits(patience=patience, spending=50, control=50, loyalty=loyalty, ego=ego),
        secondary_traits=list(secondary),
    )
    return replace(owner, personality=personality)


def fold(state, owner, event_type, week=1):
    event = create_mood_event(event_type, event_type.value, owner, week, 1)
    return process_mood_event(state, owner, event)


def test_win_then_loss_flips_the_streak():
    owner = build_owner()
    outcome = fold(create_owner_mood_state(), owner, MoodEventType.WIN)
    assert outcome.state.satisfaction_streak == 1
    assert outcome.state.mood_value == 55
    assert outcome.patience_meter == 52
    assert outcome.trust_level == 51

    owner = outcome.apply_to(owner)
    outcome = fold(outcome.state, owner, MoodEventType.LOSS, week=2)
    assert outcome.state.satisfaction_streak == -1
    assert outcome.state.mood_value == 50
    assert outcome.patience_meter == 49


def test_processing_does_not_touch_the_owner():
    owner = build_owner()
    fold(create_owner_mood_state(), owner, MoodEventType.SCANDAL)
    assert owner.patience_meter == 50
    assert owner.trust_level == 50


def test_mood_value_is_clamped():
    owner = build_owner()
    state = OwnerMoodState(mood_value=90)
    outcome = fold(state, owner, MoodEventType.SUPER_BOWL_WIN)
    assert outcome.state.mood_value == 100
    assert outcome.state.current_mood is OwnerMood.ELATED


def test_recent_events_are_capped():
    owner = build_owner()
    state = create_owner_mood_state()
    for week in range(1, 15):
        event = create_mood_event(MoodEventType.WIN, "win", owner, week, 1)
        state = process_mood_event(state, owner, event, recent_events_cap=10, weekly_history_cap=5).state
    assert len(state.recent_events) == 10
    assert state.recent_events[0].week == 5
    assert [entry.week for entry in state.weekly_mood_history] == [10, 11, 12, 13, 14]


def test_decay_from_high_mood_settles_above_neutral():
    state = OwnerMoodState(mood_value=80)
    values = []
    for _ in range(40):
        state = apply_mood_decay(state)
        values.append(state.mood_value)
    assert values[0] == 77
    assert all(later <= earlier for earlier, later in zip(values, values[1:]))
    assert min(values) >= 50
    assert values[-1] == 55


def test_decay_from_low_mood_rises():
    assert apply_mood_decay(OwnerMoodState(mood_value=20)).mood_value == 23


@pytest.mark.parametrize(
    "value, mood",
    [(90, OwnerMood.ELATED), (89, OwnerMood.PLEASED), (60, OwnerMood.CONTENT), (45, OwnerMood.NEUTRAL),
     (44, OwnerMood.CONCERNED), (25, OwnerMood.FRUSTRATED), (15, OwnerMood.ANGRY), (14, OwnerMood.FURIOUS)],
)
def test_mood_ladder(value, mood):
    assert get_mood_from_value(value) is mood


def test_patient_owner_dampens_bad_news():
    base = MOOD_EVENT_IMPACTS[MoodEventType.SCANDAL]
    calm = apply_personality_modifiers(build_owner(patience=80), MoodEventType.SCANDAL, base)
    assert (calm.mood, calm.patience) == (-23, -11)
    hot = apply_personality_modifiers(build_owner(patience=10), MoodEventType.SCANDAL, base)
    assert (hot.mood, hot.patience) == (-28, -13)


def test_pr_obsessed_owner_reacts_to_media():
    owner = build_owner(secondary=[SecondaryTrait.PR_OBSESSED])
    impact = apply_personality_modifiers(
        owner, MoodEventType.MEDIA_NEGATIVE, MOOD_EVENT_IMPACTS[MoodEventType.MEDIA_NEGATIVE]
    )
    assert (impact.mood, impact.patience, impact.trust) == (-15, -6, -3)


def test_loyal_owner_amplifies_positive_trust():
    impact = apply_personality_modifiers(
        build_owner(loyalty=80), MoodEventType.PLAYOFF_WIN, MOOD_EVENT_IMPACTS[MoodEventType.PLAYOFF_WIN]
    )
    assert impact.trust == 7


@pytest.mark.parametrize(
    "value, streak, expected",
    [(85, 0, "praise"), (75, 3, "support"), (30, 0, "concern"), (20, 0, "criticism"), (10, 0, "warning")],
)
def test_public_statement_thresholds(value, streak, expected):
    trigger = should_make_public_statement(OwnerMoodState(mood_value=value, satisfaction_streak=streak))
    assert trigger.should_speak
    assert trigger.type == expected


@pytest.mark.parametrize("value, streak", [(75, 2), (50, 0), (31, -4)])
def test_owner_stays_quiet_in_between(value, streak):
    assert not should_make_public_statement(OwnerMoodState(mood_value=value, satisfaction_streak=streak)).should_speak


def test_trend_and_sentiment():
    history = [WeeklyMood(week, get_mood_from_value(value), value) for week, value in [(1, 40), (2, 50), (3, 60)]]
    state = OwnerMoodState(mood_value=72, weekly_mood_history=history)
    assert get_mood_trend(state) == "improving"
    sentiment = get_owner_sentiment(state)
    assert sentiment.trend == "Things are looking up"
    assert sentiment.outlook == "The owner is confident in your leadership"
    assert get_mood_trend(OwnerMoodState(weekly_mood_history=history[:2])) == "stable"


def test_recent_events_summary_counts_sentiment():
    owner = build_owner()
    state = create_owner_mood_state()
    for event_type in (MoodEventType.WIN, MoodEventType.LOSS, MoodEventType.LOSS):
        state = fold(state, owner, event_type).state
    summary = get_recent_events_summary(state)
    assert (summary.positive_events, summary.negative_events) == (1, 2)
    assert summary.net_sentiment == "negative"


@pytest.mark.parametrize("streak, text", [(5, "hot streak"), (2, "doing well"), (0, "neutral"), (-2, "struggling"), (-6, "cold streak")])
def test_streak_descriptions(streak, text):
    assert get_streak_description(streak) == text


def test_mood_state_round_trip():
    owner = build_owner()
    state = fold(create_owner_mood_state(), owner, MoodEventType.RIVALRY_WIN).state
    data = state.to_dict()
    assert data["current_mood"] == state.current_mood.value
    assert OwnerMoodState.from_dict(data) == state

"""Tests for owner personality generation."""
from __future__ import annotations

from dataclasses import replace

import pytest

from front_office.models import (
    TRAIT_CONFLICTS,
    FanbasePassion,
    HistoricalSuccess,
    MarketSize,
    OwnerTraits,
    PerformanceTier,
    TeamContext,
    create_default_owner,
    validate_owner,
    validate_owner_personality,
)
from front_office.personality import (
    ARCHETYPE_PROFILES,
    Archetype,
    generate_intervention_triggers,
    generate_owner,
    generate_owner_traits,
    generate_secondary_traits,
    get_archetype_description,
    get_owner_personality_summary,
)
from front_office.rng import DeterministicRNG


class ScriptedRNG:
    def __init__(self, *values: float, default: float = 0.5) -> None:
        self._values = list(values)
        self._default = default

    def random(self) -> float:
        return self._values.pop(0) if self._values else self._default


@pytest.mark.parametrize("seed", range(25))
def test_generated_owners_are_valid(seed):
    context = TeamContext(
        team_id="team-7",
        market_size=list(MarketSize)[seed % 4],
        historical_success=list(HistoricalSuccess)[seed % 4],
        recent_performance=list(PerformanceTier)[seed % 5],
    )
    owner = generate_owner("owner-7", "Ada", "Lovelace", context, DeterministicRNG(seed))
    assert owner.team_id == "team-7"
    assert validate_owner(owner)
    assert validate_owner_personality(owner.personality)


def test_generation_is_replayable():
    context = TeamContext(team_id="team-1")
    first = generate_owner("o", "A", "B", context, DeterministicRNG(99))
    second = generate_owner("o", "A", "B", context, DeterministicRNG(99))
    assert first == second


def test_market_offsets_apply_to_drawn_traits():
    # Lowest draw everywhere: the profile minimum plus the market offset.
    traits = generate_owner_traits(Archetype.BALANCED, MarketSize.MEGA, ScriptedRNG(default=0.0))
    assert traits == OwnerTraits(patience=25, spending=55, control=50, loyalty=40, ego=55)


def test_traits_never_leave_range():
    traits = generate_owner_traits(Archetype.HANDS_OFF_OWNER, MarketSize.SMALL, ScriptedRNG(default=0.0))
    assert traits.control == 1
    traits = generate_owner_traits(Archetype.WIN_NOW_SPENDER, MarketSize.MEGA, ScriptedRNG(default=0.999))
    assert traits.spending == 100


def test_secondary_traits_never_conflict():
    for seed in range(200):
        rng = DeterministicRNG(seed)
        for archetype in Archetype:
            traits = generate_secondary_traits(archetype, rng)
            for trait in traits:
                assert TRAIT_CONFLICTS.get(trait) not in traits


def test_single_preference_is_always_taken():
    traits = generate_secondary_traits(Archetype.PENNY_PINCHER, ScriptedRNG(0.1))
    assert traits == list(ARCHETYPE_PROFILES[Archetype.PENNY_PINCHER].preferred_secondary)


def test_intervention_triggers_follow_traits():
    patient = OwnerTraits(patience=100, spending=50, control=50, loyalty=50, ego=50)
    triggers = generate_intervention_triggers(patient, FanbasePassion.MODERATE)
    assert triggers.losing_streak_length == 7
    assert triggers.fan_approval_floor == 50
    assert triggers.media_scrutiny_threshold == 50

    meddler = OwnerTraits(patience=1, spending=50, control=100, loyalty=50, ego=95)
    triggers = generate_intervention_triggers(meddler, FanbasePassion.RABID)
    assert triggers.losing_streak_length == 2
    assert triggers.fan_approval_floor == 35
    assert triggers.media_scrutiny_threshold == 20


def test_personality_summary_flags_risky_owners():
    owner = create_default_owner("owner-1", "team-1")
    risky = replace(
        owner,
        personality=replace(
            owner.personality,
            traits=OwnerTraits(patience=10, spending=50, control=90, loyalty=10, ego=80),
        ),
        previous_gms_fired=5,
    )
    summary = get_owner_personality_summary(risky)
    assert summary.risk_level == "extreme"
    assert summary.primary_style.startswith("Hands-on")
    assert "Demands quick results" in summary.key_traits
    assert len(summary.key_traits) <= 5


def test_archetype_descriptions_exist_for_all():
    for archetype in Archetype:
        assert get_archetype_description(archetype)

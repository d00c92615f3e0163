"""Tests for league ownership changes."""
from __future__ import annotations

import re
from dataclasses import replace

import pytest

from front_office.models import (
    MarketSize,
    PerformanceTier,
    TeamContext,
    create_default_owner,
    create_default_owner_personality,
    validate_owner,
)
from front_office.rng import DeterministicRNG
from front_office.services.ownership import (
    LeagueOwnershipState,
    OwnerNameBank,
    OwnershipChangeType,
    calculate_ownership_change_probability,
    check_league_ownership_changes,
    create_league_ownership_state,
    create_new_owner,
    determine_change_type,
    generate_owner_id,
    generate_owner_name,
    get_ownership_change_summary,
    get_team_ownership_history,
    gm_retention_probability,
    initialize_team_ownership,
    process_ownership_change,
)


class ScriptedRNG:
    def __init__(self, *values: float, default: float = 0.5) -> None:
        self._values = list(values)
        self._default = default

    def random(self) -> float:
        return self._values.pop(0) if self._values else self._default


@pytest.fixture
def namebank(tmp_path):
    (tmp_path / "owner_names.yaml").write_text(
        "given:\n  - Vera\n  - Otto\nsurname:\n  - Kessler\n  - Marsh\n", encoding="utf-8"
    )
    return OwnerNameBank(tmp_path)


def seeded_league(namebank, teams=("team-1", "team-2")) -> LeagueOwnershipState:
    state = create_league_ownership_state()
    for index, team_id in enumerate(teams):
        state = initialize_team_ownership(
            state, team_id, TeamContext(team_id=team_id), 2025, DeterministicRNG(index), namebank
        )
    return state


def test_probability_grows_with_time_since_change():
    owner = create_default_owner("owner-1", "team-1")
    context = TeamContext(team_id="team-1")
    values = [
        calculate_ownership_change_probability(owner, context, season, 2000)
        for season in range(2000, 2040)
    ]
    assert all(later >= earlier for earlier, later in zip(values, values[1:]))
    assert values[0] == pytest.approx(0.008)
    assert values[20] == pytest.approx(0.028)
    assert max(values) == pytest.approx(0.05)


def test_probability_falls_back_to_tenure_and_is_capped():
    owner = replace(create_default_owner("owner-1", "team-1"), years_as_owner=35)
    context = TeamContext(team_id="team-1", recent_performance=PerformanceTier.TERRIBLE)
    assert calculate_ownership_change_probability(owner, context, 2030, None) == pytest.approx(0.05)

    short = create_default_owner("owner-1", "team-1")
    poor_small = TeamContext(team_id="team-1", market_size=MarketSize.SMALL, recent_performance=PerformanceTier.POOR)
    assert calculate_ownership_change_probability(short, poor_small, 2030, None) == pytest.approx(0.010)


def test_change_type_lottery():
    owner = create_default_owner("owner-1", "team-1")
    assert determine_change_type(owner, ScriptedRNG(0.0)) is OwnershipChangeType.SALE
    assert determine_change_type(owner, ScriptedRNG(0.999)) is OwnershipChangeType.GROUP_PURCHASE


def test_gm_retention_probability_is_bounded():
    personality = create_default_owner_personality()
    assert gm_retention_probability(OwnershipChangeType.SALE, personality, PerformanceTier.AVERAGE) == pytest.approx(0.5)
    assert gm_retention_probability(
        OwnershipChangeType.FAMILY_TRANSFER, personality, PerformanceTier.EXCELLENT
    ) == pytest.approx(0.95)
    assert gm_retention_probability(
        OwnershipChangeType.FORCED_SALE, personality, PerformanceTier.TERRIBLE
    ) == pytest.approx(0.1)

    meddler = replace(personality, traits=replace(personality.traits, control=80, patience=80))
    assert gm_retention_probability(OwnershipChangeType.SALE, meddler, PerformanceTier.AVERAGE) == pytest.approx(0.45)


def test_owner_ids_and_names(namebank):
    assert re.fullmatch(r"owner-[0-9a-f]{12}", generate_owner_id(DeterministicRNG(3)))
    assert generate_owner_name(ScriptedRNG(0.0, 0.99), namebank) == ("Vera", "Marsh")
    first, last = generate_owner_name(DeterministicRNG(11))
    assert first and last


def test_namebank_requires_both_lists(tmp_path):
    (tmp_path / "owner_names.yaml").write_text("given:\n  - Vera\nsurname: []\n", encoding="utf-8")
    with pytest.raises(ValueError):
        OwnerNameBank(tmp_path)


def test_new_owner_starts_fresh(namebank):
    context = TeamContext(team_id="ignored")
    owner = create_new_owner("team-5", context, OwnershipChangeType.SALE, DeterministicRNG(8), namebank)
    assert owner.team_id == "team-5"
    assert owner.years_as_owner == 1
    assert owner.previous_gms_fired == 0
    assert owner.championships_won == 0
    assert 55 <= owner.patience_meter <= 74
    assert 45 <= owner.trust_level <= 59
    assert validate_owner(owner)


def test_initialize_backdates_last_change(namebank):
    state = seeded_league(namebank, teams=("team-1",))
    owner = state.owners["team-1"]
    assert state.last_change_per_team["team-1"] == 2025 - owner.years_as_owner
    assert state.mood_states["team-1"].mood_value == 50
    assert state.interference_states["team-1"].team_id == "team-1"


def test_change_requires_a_team_context(namebank):
    state = create_league_ownership_state()
    with pytest.raises(ValueError, match="No team context found for team team-3"):
        process_ownership_change(
            state, "team-3", create_default_owner("o", "team-3"), 2026, PerformanceTier.AVERAGE,
            DeterministicRNG(1), namebank,
        )


def test_process_change_replaces_owner_and_resets_relationship(namebank):
    state = seeded_league(namebank)
    previous = state.owners["team-1"]
    state.mood_states["team-1"].mood_value = 12

    result = process_ownership_change(
        state, "team-1", previous, 2026, PerformanceTier.GOOD, DeterministicRNG(5), namebank
    )
    assert result.state.owners["team-1"] is result.new_owner
    assert result.new_owner.id != previous.id
    assert result.state.last_change_per_team["team-1"] == 2026
    assert result.state.mood_states["team-1"].mood_value == 50
    assert result.event.previous_owner_id == previous.id
    assert result.event.team_id == "team-1"
    assert result.event.expectations_reset
    assert result.state.owners["team-2"] == state.owners["team-2"]


def test_league_check_rolls_every_team_with_context(namebank):
    state = seeded_league(namebank)
    stray = create_default_owner("stray", "team-x")
    state = replace(state, owners={**state.owners, "team-x": stray})

    updated, changes = check_league_ownership_changes(
        state, 2026, {}, DeterministicRNG(9), namebank, base=1.0, cap=1.0
    )
    assert sorted(event.team_id for event in changes) == ["team-1", "team-2"]
    assert updated.owners["team-x"] is stray
    assert len(updated.ownership_history) == 2

    quiet, none = check_league_ownership_changes(state, 2026, {}, DeterministicRNG(9), namebank, base=0.0, cap=0.0)
    assert none == []
    assert quiet == state


def test_history_is_filtered_per_team_and_capped(namebank):
    state = seeded_league(namebank)
    for season in (2026, 2027, 2028):
        for team_id in ("team-1", "team-2"):
            state = process_ownership_change(
                state, team_id, state.owners[team_id], season, PerformanceTier.AVERAGE,
                DeterministicRNG(season), namebank, history_cap=4,
            ).state
    assert len(state.ownership_history) == 4
    assert [e.season for e in get_team_ownership_history(state, "team-1")] == [2027, 2028]
    assert get_team_ownership_history(state, "team-404") == []


def test_summary_reflects_gm_status(namebank):
    state = seeded_league(namebank)
    event = process_ownership_change(
        state, "team-1", state.owners["team-1"], 2026, PerformanceTier.AVERAGE, DeterministicRNG(2), namebank
    ).event
    retained = get_ownership_change_summary(replace(event, gm_retained=True, type=OwnershipChangeType.DEATH))
    assert retained.headline == "Ownership Transition Following Passing"
    assert retained.gm_status == "You have been retained by the new ownership"
    dismissed = get_ownership_change_summary(replace(event, gm_retained=False))
    assert dismissed.gm_status == "New ownership has decided to make a change at GM"
    assert dismissed.subtext == event.description


def test_state_round_trip(namebank):
    state = seeded_league(namebank)
    state = process_ownership_change(
        state, "team-2", state.owners["team-2"], 2026, PerformanceTier.POOR, DeterministicRNG(4), namebank
    ).state
    assert LeagueOwnershipState.from_dict(state.to_dict()) == state

"""Tests for owner demand generation."""
from __future__ import annotations

from dataclasses import replace

import pytest

from front_office.models import (
    DemandType,
    Owner,
    OwnerDemand,
    OwnerTraits,
    SecondaryTrait,
    Severity,
    TriggerType,
    create_default_owner,
)
from front_office.rng import DeterministicRNG
from front_office.services.demands import (
    CONSEQUENCES,
    CoachInfo,
    CompletedAction,
    DemandContext,
    PlayerInfo,
    ProspectInfo,
    calculate_demand_weights,
    determine_deadline_offset,
    generate_demand,
    generate_draft_player_demand,
    generate_fire_coach_demand,
    generate_sign_player_demand,
    get_demand_display_info,
    get_demand_urgency,
    is_demand_satisfied,
)
from front_office.services.interference import InterventionTrigger


class ScriptedRNG:
    def __init__(self, *values: float, default: float = 0.5) -> None:
        self._values = list(values)
        self._default = default

    def random(self) -> float:
        return self._values.pop(0) if self._values else self._default


def build_owner(patience: int = 50, spending: int = 50, ego: int = 50, secondary=()) -> Owner:
    owner = create_default_owner("owner-1", "team-1")
    personality = replace(
        owner.personality,
        traits=OwnerTraits(patience=patience, spending=spending, control=50, loyalty=50, ego=ego),
        secondary_traits=list(secondary),
    )
    return replace(owner, personality=personality)


def build_player(player_id: str, overall: int, **flags) -> PlayerInfo:
    return PlayerInfo(
        id=player_id, first_name="Sam", last_name=player_id.title(), position="WR", overall=overall, **flags
    )


def build_demand(demand_type: DemandType, target_id=None, deadline: int = 8) -> OwnerDemand:
    return OwnerDemand(
        id="demand-1",
        type=demand_type,
        description="Do something",
        target_id=target_id,
        deadline=deadline,
        consequence="The owner will be disappointed",
        issued_week=4,
    )


def test_missing_coaches_and_prospects_zero_their_weights():
    weights = calculate_demand_weights(build_owner(), None, DemandContext(current_week=5))
    assert weights[DemandType.FIRE_COACH] == 0
    assert weights[DemandType.DRAFT_PLAYER] == 0
    assert weights[DemandType.SIGN_PLAYER] == 25


def test_trigger_and_personality_shift_weights():
    coaches = [CoachInfo(id="c1", first_name="Pat", last_name="Riley", role="OC")]
    context = DemandContext(current_week=5, available_coaches=coaches)
    trigger = InterventionTrigger(True, TriggerType.LOSING_STREAK, Severity.SEVERE)

    # 25 + 40, minus 30 because nobody on staff is struggling.
    weights = calculate_demand_weights(build_owner(), trigger, context)
    assert weights[DemandType.FIRE_COACH] == 35

    coaches[0].is_struggling = True
    weights = calculate_demand_weights(
        build_owner(spending=80, secondary=[SecondaryTrait.WIN_NOW]), trigger, context
    )
    assert weights[DemandType.FIRE_COACH] == 65
    assert weights[DemandType.SIGN_PLAYER] == 25 + 30 + 20 + 15
    assert weights[DemandType.TRADE_FOR] == 20 + 30 + 10 + 25


def test_late_season_draft_weight_is_floored():
    context = DemandContext(
        current_week=18,
        draft_prospects=[ProspectInfo(id="p1", first_name="Cam", last_name="Ward", position="QB")],
    )
    assert calculate_demand_weights(build_owner(), None, context)[DemandType.DRAFT_PLAYER] == 5


def test_generated_demand_shape():
    context = DemandContext(current_week=5, current_season=2)
    # Type lottery, id token, deadline draw, consequence pick.
    rng = ScriptedRNG(0.0, 0.5, 0.5, 0.0)
    demand = generate_demand(build_owner(), context, None, rng)
    assert demand.type is DemandType.SIGN_PLAYER
    assert demand.id == "demand-2-5-80000000"
    assert demand.target_id is None
    assert demand.description == "Make a significant free agent signing"
    assert demand.issued_week == 5
    assert demand.deadline == 9
    assert demand.consequence == CONSEQUENCES[Severity.MILD][0]


@pytest.mark.parametrize("seed", range(30))
def test_generated_deadlines_are_in_the_future(seed):
    context = DemandContext(current_week=6)
    demand = generate_demand(build_owner(patience=1), context, None, DeterministicRNG(seed))
    assert demand is not None
    assert demand.deadline > demand.issued_week
    assert demand.type in (DemandType.SIGN_PLAYER, DemandType.TRADE_FOR, DemandType.OTHER)


def test_deadline_offset_patience_bonus():
    assert determine_deadline_offset(build_owner(patience=100), DemandType.DRAFT_PLAYER, ScriptedRNG(0.0)) == 6
    assert determine_deadline_offset(build_owner(patience=1), DemandType.FIRE_COACH, ScriptedRNG(0.0)) == 1
    assert determine_deadline_offset(build_owner(), DemandType.TRADE_FOR, ScriptedRNG(0.99)) == 4


def test_sign_player_targets_free_agents():
    context = DemandContext(
        current_week=3,
        available_players=[
            build_player("rostered", 90),
            build_player("vet", 82, is_free_agent=True),
            build_player("rookie", 60, is_free_agent=True),
        ],
    )
    demand = generate_sign_player_demand(build_owner(), context, None, ScriptedRNG(0.0))
    assert demand.target_id == "vet"
    assert demand.description == "Sign Sam Vet (WR)"

    frugal = generate_sign_player_demand(build_owner(spending=20), context, None, ScriptedRNG(0.0))
    assert frugal.target_id == "rookie"


def test_fire_coach_prefers_struggling_staff():
    context = DemandContext(
        current_week=3,
        available_coaches=[
            CoachInfo(id="c1", first_name="Ok", last_name="Coach", role="DC"),
            CoachInfo(id="c2", first_name="Bad", last_name="Coach", role="OC", is_struggling=True),
        ],
    )
    demand = generate_fire_coach_demand(build_owner(), context, None, ScriptedRNG(0.0))
    assert demand.target_id == "c2"
    assert generate_fire_coach_demand(build_owner(), DemandContext(current_week=3), None, ScriptedRNG()) is None


def test_draft_demand_for_egotistical_owner_chases_hype():
    prospects = [
        ProspectInfo(id="p1", first_name="A", last_name="One", position="OT", hype_level="sleeper"),
        ProspectInfo(id="p2", first_name="B", last_name="Two", position="QB", hype_level="generational"),
    ]
    context = DemandContext(current_week=3, draft_prospects=prospects)
    demand = generate_draft_player_demand(build_owner(ego=85), context, None, ScriptedRNG(0.0))
    assert demand.target_id == "p2"
    quant = build_owner(secondary=[SecondaryTrait.ANALYTICS_BELIEVER])
    assert generate_draft_player_demand(quant, context, None, ScriptedRNG(0.0)).target_id == "p1"


@pytest.mark.parametrize(
    "week, urgency, label",
    [(8, "critical", "Overdue!"), (7, "urgent", "Urgent"), (5, "soon", "Soon"), (4, "relaxed", "When convenient")],
)
def test_urgency_ladder(week, urgency, label):
    demand = build_demand(DemandType.OTHER, deadline=8)
    assert get_demand_urgency(demand, week) == urgency
    assert get_demand_display_info(demand, week).urgency == label


def test_display_info_never_shows_negative_weeks():
    assert get_demand_display_info(build_demand(DemandType.OTHER, deadline=8), 11).weeks_remaining == 0


def test_demand_satisfaction_matches_type_and_target():
    targeted = build_demand(DemandType.SIGN_PLAYER, target_id="player-1")
    assert is_demand_satisfied(targeted, [CompletedAction(DemandType.SIGN_PLAYER, "player-1")])
    assert not is_demand_satisfied(targeted, [CompletedAction(DemandType.SIGN_PLAYER, "player-2")])
    assert not is_demand_satisfied(targeted, [CompletedAction(DemandType.TRADE_FOR, "player-1")])

    open_ended = build_demand(DemandType.TRADE_FOR)
    assert is_demand_satisfied(open_ended, [CompletedAction(DemandType.TRADE_FOR, "anyone")])
    assert not is_demand_satisfied(open_ended, [])

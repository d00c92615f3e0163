"""Tests for the owner aggregate and its helpers."""
from __future__ import annotations

from dataclasses import replace

import pytest

from front_office.models import (
    DemandType,
    NetWorth,
    Owner,
    OwnerDemand,
    OwnerTraits,
    SecondaryTrait,
    add_owner_demand,
    create_default_owner,
    get_net_worth_budget_multiplier,
    remove_owner_demand,
    round_half_up,
    update_patience_meter,
    update_trust_level,
    validate_owner,
    validate_owner_demand,
    validate_owner_personality,
    validate_owner_traits,
)
from front_office.views import (
    create_owner_view_model,
    get_control_description,
    get_patience_description,
)


def build_demand(demand_id: str = "demand-1", deadline: int = 6) -> OwnerDemand:
    return OwnerDemand(
        id=demand_id,
        type=DemandType.SIGN_PLAYER,
        description="Sign a star receiver",
        target_id="player-9",
        deadline=deadline,
        consequence="Trust will be affected",
        issued_week=3,
    )


def test_default_owner_is_valid():
    owner = create_default_owner("owner-1", "team-1")
    assert owner.full_name == "John Smith"
    assert owner.years_as_owner == 5
    assert owner.previous_gms_fired == 1
    assert validate_owner(owner)


def test_round_half_up_matches_game_rounding():
    assert round_half_up(4.5) == 5
    assert round_half_up(-19.5) == -19
    assert round_half_up(-2.6) == -3


def test_patience_and_trust_updates_clamp_and_round():
    owner = create_default_owner("owner-1", "team-1")
    assert update_patience_meter(owner, 140).patience_meter == 100
    assert update_patience_meter(owner, -3).patience_meter == 0
    assert update_trust_level(owner, 61.5).trust_level == 62
    # Original record is untouched.
    assert owner.patience_meter == 50


def test_add_and_remove_demand_return_new_owners():
    owner = create_default_owner("owner-1", "team-1")
    with_demand = add_owner_demand(owner, build_demand())
    assert [d.id for d in with_demand.active_demands] == ["demand-1"]
    assert owner.active_demands == []
    assert remove_owner_demand(with_demand, "demand-1").active_demands == []
    assert remove_owner_demand(with_demand, "missing").active_demands == with_demand.active_demands


def test_trait_validation_rejects_out_of_range():
    assert validate_owner_traits(OwnerTraits(1, 100, 50, 50, 50))
    assert not validate_owner_traits(OwnerTraits(0, 50, 50, 50, 50))
    assert not validate_owner_traits(OwnerTraits(50, 50, 101, 50, 50))


def test_personality_validation_rejects_conflicting_traits():
    owner = create_default_owner("owner-1", "team-1")
    conflicting = replace(
        owner.personality,
        secondary_traits=[SecondaryTrait.WIN_NOW, SecondaryTrait.LONG_TERM_THINKER],
    )
    assert not validate_owner_personality(conflicting)
    unknown = replace(owner.personality, secondary_traits=["moneyball"])
    assert not validate_owner_personality(unknown)


def test_owner_validation_checks_tenure_bounds():
    owner = create_default_owner("owner-1", "team-1")
    assert not validate_owner(replace(owner, years_as_owner=101))
    assert not validate_owner(replace(owner, previous_gms_fired=51))
    assert not validate_owner(replace(owner, championships_won=31))
    assert not validate_owner(replace(owner, first_name=""))


def test_demand_validation():
    assert validate_owner_demand(build_demand())
    assert not validate_owner_demand(replace(build_demand(), description=""))
    assert not validate_owner_demand(replace(build_demand(), deadline=-1))


@pytest.mark.parametrize(
    "net_worth, multiplier",
    [
        (NetWorth.MODEST, 0.8),
        (NetWorth.WEALTHY, 1.0),
        (NetWorth.BILLIONAIRE, 1.2),
        (NetWorth.OLIGARCH, 1.5),
    ],
)
def test_net_worth_budget_multiplier(net_worth, multiplier):
    assert get_net_worth_budget_multiplier(net_worth) == multiplier


def test_owner_round_trips_through_plain_dict():
    owner = add_owner_demand(create_default_owner("owner-1", "team-1"), build_demand())
    owner = replace(
        owner,
        personality=replace(owner.personality, secondary_traits=[SecondaryTrait.PR_OBSESSED]),
        net_worth=NetWorth.OLIGARCH,
    )
    data = owner.to_dict()
    assert data["net_worth"] == "oligarch"
    assert data["active_demands"][0]["type"] == "signPlayer"
    assert data["personality"]["secondary_traits"] == ["prObsessed"]
    assert Owner.from_dict(data) == owner


def test_view_model_only_exposes_labels():
    owner = create_default_owner("owner-1", "team-1")
    owner = replace(owner, patience_meter=30)
    view = create_owner_view_model(owner)
    assert view.job_security_status == "hot seat"
    assert view.patience_description == "moderate"
    assert "patience_meter" not in view.to_dict()
    assert "trust_level" not in view.to_dict()


@pytest.mark.parametrize(
    "value, label", [(20, "very impatient"), (21, "impatient"), (60, "moderate"), (81, "very patient")]
)
def test_patience_description_quintiles(value, label):
    assert get_patience_description(value) == label


def test_control_description_top_bucket():
    assert get_control_description(95) == "micromanager"

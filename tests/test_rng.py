"""Tests for the deterministic random helpers."""
from __future__ import annotations

import pytest

from front_office.rng import DeterministicRNG, pick, random_int, token, weighted_choice


class FixedRNG:
    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


def test_same_seed_replays_the_same_stream():
    first = DeterministicRNG(1234)
    second = DeterministicRNG(1234)
    assert [first.random() for _ in range(10)] == [second.random() for _ in range(10)]


def test_spawned_streams_are_independent_and_stable():
    parent = DeterministicRNG(42)
    assert parent.spawn(1).random() == DeterministicRNG(42).spawn(1).random()
    assert parent.spawn(1).random() != parent.spawn(2).random()


def test_seed_is_masked_to_32_bits():
    assert DeterministicRNG(-1).seed == 0xFFFFFFFF


@pytest.mark.parametrize("value, expected", [(0.0, 3), (0.5, 6), (0.999, 8)])
def test_random_int_is_inclusive(value, expected):
    assert random_int(FixedRNG(value), 3, 8) == expected


def test_pick_maps_sample_onto_sequence():
    assert pick(FixedRNG(0.0), ["a", "b", "c"]) == "a"
    assert pick(FixedRNG(0.99), ["a", "b", "c"]) == "c"


def test_weighted_choice_skips_non_positive_weights():
    weights = {"never": 0, "also-never": -5, "always": 3}
    assert weighted_choice(FixedRNG(0.0), weights) == "always"
    assert weighted_choice(FixedRNG(0.99), weights) == "always"


def test_weighted_choice_walks_cumulative_weights():
    weights = {"a": 1, "b": 3}
    assert weighted_choice(FixedRNG(0.2), weights) == "a"
    assert weighted_choice(FixedRNG(0.3), weights) == "b"


def test_weighted_choice_requires_a_candidate():
    with pytest.raises(ValueError):
        weighted_choice(FixedRNG(0.5), {"a": 0})


def test_token_is_fixed_width_hex():
    assert token(FixedRNG(0.0)) == "00000000"
    assert token(FixedRNG(0.5), width=4) == "8000"
    assert len(token(DeterministicRNG(7))) == 8

"""Deterministic random utilities."""

from __future__ import annotations

import math
import random
from typing import Dict, Iterator, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything that yields uniform floats in [0, 1)."""

    def random(self) -> float:
        ...


class DeterministicRNG:
    """Wraps :mod:`random` with deterministic replay support."""

    def __init__(self, seed: int) -> None:
        self._seed = seed & 0xFFFFFFFF
        # nosec B311 - deterministic pseudo-RNG acceptable for game mechanics
        self._random = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def random(self) -> float:
        return self._random.random()

    def choice(self, seq):
        return self._random.choice(seq)

    def randint(self, a: int, b: int) -> int:
        return self._random.randint(a, b)

    def uniform(self, a: float, b: float) -> float:
        return self._random.uniform(a, b)

    def spawn(self, index: int) -> "DeterministicRNG":
        """Derive an independent stream, e.g. one per team."""

        return DeterministicRNG((self._seed ^ (index * 0x9E3779B9)) & 0xFFFFFFFF)

    def stream(self) -> Iterator[float]:
        while True:
            yield self._random.random()


def random_int(rng: RandomSource, low: int, high: int) -> int:
    """Inclusive integer draw from a single uniform sample."""

    return low + int(math.floor(rng.random() * (high - low + 1)))


def pick(rng: RandomSource, seq: Sequence[T]) -> T:
    return seq[int(math.floor(rng.random() * len(seq)))]


def weighted_choice(rng: RandomSource, weights: Dict[str, float]) -> str:
    """Cumulative-weight lottery against one uniform sample.

    Entries with a non-positive weight are never selected.
    """

    candidates = [(key, weight) for key, weight in weights.items() if weight > 0]
    if not candidates:
        raise ValueError("weighted_choice requires at least one positive weight")
    total = sum(weight for _, weight in candidates)
    target = rng.random() * total
    for key, weight in candidates:
        target -= weight
        if target <= 0:
            return key
    return candidates[-1][0]


def token(rng: RandomSource, width: int = 8) -> str:
    """Short hex token drawn from the rng, for replayable identifiers."""

    return format(int(rng.random() * (16**width)), f"0{width}x")


__all__ = [
    "DeterministicRNG",
    "RandomSource",
    "pick",
    "random_int",
    "token",
    "weighted_choice",
]

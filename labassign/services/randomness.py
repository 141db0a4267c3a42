# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Injectable randomness — pure computation, no side effects.

Every random decision made by the generators goes through a ``RandomSource``
so callers can pin the outcome (seeded runs, replayed sequences in tests).
"""

import random
from typing import Iterable, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def next_float(self) -> float:
        """Return a float in [0, 1)."""
        ...


class SystemRandomSource:
    """``random.Random`` backed source; a seed makes runs reproducible."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def next_float(self) -> float:
        return self._rng.random()


class SequenceRandomSource:
    """Replays a fixed list of floats, cycling when it runs out."""

    def __init__(self, values: Iterable[float]) -> None:
        self._values = list(values)
        if not self._values:
            raise ValueError("SequenceRandomSource needs at least one value")
        for v in self._values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Random values must lie in [0, 1), got {v}")
        self._index = 0

    def next_float(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


def rand_int(source: RandomSource, low: int, high: int) -> int:
    """Uniform integer in the inclusive range [low, high]."""
    if low > high:
        raise ValueError(f"Empty range [{low}, {high}]")
    # Clamped: float rounding can push the product to high - low + 1
    return min(low + int(source.next_float() * (high - low + 1)), high)


def shuffled(items: Sequence[T], source: RandomSource) -> list[T]:
    """Fisher–Yates shuffle of a copy of ``items``."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rand_int(source, 0, i)
        result[i], result[j] = result[j], result[i]
    return result


def choice(items: Sequence[T], source: RandomSource) -> T:
    """Uniformly pick one element of a non-empty sequence."""
    if not items:
        raise ValueError("Cannot choose from an empty sequence")
    return items[rand_int(source, 0, len(items) - 1)]

"""Seeded pseudo-random source and sampling helpers.

Every function that samples takes the generator explicitly so that a seed
fully determines the output.
"""

from __future__ import annotations

import hashlib
import math
from typing import Callable, Optional, Sequence, TypeVar

from .exceptions import InvariantViolation

T = TypeVar("T")

Rng = Callable[[], float]

_MASK_32 = 0xFFFFFFFF
_MULBERRY_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(left: int, right: int) -> int:
    return (left * right) & _MASK_32


def create_seeded_rng(seed: int) -> Rng:
    """Return a Mulberry32 generator producing floats in ``[0, 1)``."""

    state = seed & _MASK_32

    def _next() -> float:
        nonlocal state
        state = (state + _MULBERRY_INCREMENT) & _MASK_32
        value = _imul(state ^ (state >> 15), 1 | state)
        value ^= (value + _imul(value ^ (value >> 7), 61 | value)) & _MASK_32
        return ((value ^ (value >> 14)) & _MASK_32) / _TWO_POW_32

    return _next


def seed_from_text(text: str) -> int:
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], byteorder="big", signed=False)


def select_random(items: Sequence[T], rng: Rng) -> T:
    if not items:
        raise InvariantViolation("select_random called with an empty sequence")
    return items[random_int_inclusive(0, len(items) - 1, rng)]


def pick_random(items: Sequence[T], rng: Rng) -> Optional[T]:
    if not items:
        return None
    return items[random_int_inclusive(0, len(items) - 1, rng)]


def shuffle(items: Sequence[T], rng: Rng) -> list[T]:
    """Fisher-Yates shuffle returning a new list."""

    result = list(items)
    for index in range(len(result) - 1, 0, -1):
        swap = random_int_inclusive(0, index, rng)
        result[index], result[swap] = result[swap], result[index]
    return result


def select_random_n(items: Sequence[T], count: int, rng: Rng) -> list[T]:
    if count > len(items):
        raise InvariantViolation(
            f"cannot select {count} items from a sequence of {len(items)}"
        )
    if count <= 0:
        return []
    return shuffle(items, rng)[:count]


def random_int_inclusive(low: int, high: int, rng: Rng) -> int:
    if high < low:
        raise InvariantViolation(f"empty integer range [{low}, {high}]")
    return low + math.floor(rng() * (high - low + 1))


def roll_chance(chance: Optional[float], rng: Rng) -> bool:
    if chance is None:
        return True
    return rng() <= chance

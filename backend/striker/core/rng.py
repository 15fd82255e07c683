"""
Seeded random source (mulberry32).

Every generated bank is reproducible from (version, seed), so this stream has
to match the reference mulberry32 bit for bit: all arithmetic is done on
unsigned 32-bit integers and masked after every add/multiply. Any change here
changes every item id, prompt and hash in a compiled bank.
"""
from __future__ import annotations

import secrets
from typing import MutableSequence, Protocol, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296


class RandomSource(Protocol):
    def next(self) -> float:
        ...


def _imul(a: int, b: int) -> int:
    """32-bit wraparound multiply (low 32 bits, unsigned)."""
    return (a * b) & _MASK32


class SeededRandom:
    """Deterministic number stream from a 32-bit integer seed."""

    def __init__(self, seed: int):
        self.seed = seed & _MASK32
        self._state = self.seed

    def next(self) -> float:
        """Next float in [0, 1)."""
        self._state = (self._state + _INCREMENT) & _MASK32
        s = self._state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32

    def int(self, lo: int, hi: int) -> int:
        """Integer in [lo, hi], both ends inclusive."""
        return int(self.next() * (hi - lo + 1)) + lo

    def pick(self, items: Sequence[T]) -> T:
        return items[self.int(0, len(items) - 1)]

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Fisher–Yates in place; returns the same list."""
        for i in range(len(items) - 1, 0, -1):
            j = self.int(0, i)
            items[i], items[j] = items[j], items[i]
        return items


def entropy_rng() -> SeededRandom:
    """Non-reproducible stream for serve-time draws when the caller injects none."""
    return SeededRandom(secrets.randbits(32))

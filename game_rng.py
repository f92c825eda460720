"""Deterministic random source shared by map generation and the simulation.

The generator is Mulberry32: a single 32-bit state advanced by a fixed
add/xorshift/multiply step.  Two instances built from the same seed and called
in the same order produce bit-identical sequences on every platform, which is
what lets a whole town (and a whole run) be reproduced from one integer.

All arithmetic is carried out on Python ints and masked back to 32 bits after
every step that could overflow, mirroring the wraparound of the reference
algorithm exactly.
"""

from __future__ import annotations

import math
from typing import Any, Dict, MutableSequence, Optional, Sequence, TypeVar

T = TypeVar("T")

MASK_32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply, returned as an unsigned value."""
    return (a * b) & MASK_32


class SeededRandom:
    """Mulberry32 pseudo-random generator with a few gameplay helpers."""

    def __init__(self, seed: int) -> None:
        self.initial_seed: int = int(seed)
        self.state: int = self.initial_seed & MASK_32

    # ------------------------------------------------------------------
    # core step
    # ------------------------------------------------------------------
    def next(self) -> float:
        """Return the next float in ``[0, 1)`` and advance the state."""
        self.state = (self.state + MULBERRY_INCREMENT) & MASK_32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32
        return ((t ^ (t >> 14)) & MASK_32) / TWO_POW_32

    # ------------------------------------------------------------------
    # derived helpers
    # ------------------------------------------------------------------
    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        """Uniform float in ``[a, b)``."""
        return a + self.next() * (b - a)

    def get_int(self, a: int, b: int) -> int:
        """Uniform integer in ``[a, b]`` (both ends inclusive)."""
        if a > b:
            raise ValueError("a <= b")
        return math.floor(self.get_float(a, b + 1))

    def chance(self, probability: float) -> bool:
        return self.next() < probability

    def pick(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("cannot pick from an empty sequence")
        return seq[math.floor(self.next() * len(seq))]

    def shuffle(self, seq: MutableSequence[Any]) -> None:
        """In-place Fisher-Yates shuffle drawing from this stream."""
        for i in range(len(seq) - 1, 0, -1):
            j = math.floor(self.next() * (i + 1))
            seq[i], seq[j] = seq[j], seq[i]

    # ------------------------------------------------------------------
    # state management
    # ------------------------------------------------------------------
    def get_state(self) -> Dict[str, Any]:
        return {"initial_seed": self.initial_seed, "state": self.state}

    def set_state(self, state: Dict[str, Any]) -> None:
        if "initial_seed" in state:
            self.initial_seed = int(state["initial_seed"])
        if "state" in state:
            self.state = int(state["state"]) & MASK_32

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.initial_seed = int(seed)
        self.state = self.initial_seed & MASK_32


__all__ = ["SeededRandom", "MASK_32"]

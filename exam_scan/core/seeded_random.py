"""
Reproducible randomness for exam rows.

Printed answer keys must stay re-derivable from their seed string forever,
so the hash and the generator below are fixed bit for bit.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - 0x100000000 if value & 0x80000000 else value


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a * b."""
    return (a * b) & _MASK32


def simple_hash(text: str) -> int:
    """
    Polynomial rolling hash ``h = h * 31 + unit`` over the UTF-16 code units
    of ``text``, wrapped to a signed 32-bit integer.
    """
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = _to_int32((h << 5) - h + unit)
    return h


class Mulberry32:
    """
    Small deterministic 32-bit generator (Mulberry32).
    Every call advances the state by 0x6D2B79F5 and mixes it.
    """

    INCREMENT = 0x6D2B79F5

    def __init__(self, seed: int):
        self.state = seed & _MASK32

    def next_uint32(self) -> int:
        self.state = (self.state + self.INCREMENT) & _MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self.next_uint32() / 4294967296


def seeded_shuffle(items: Sequence[T], seed: str) -> List[T]:
    """Fisher-Yates shuffle driven by ``Mulberry32(simple_hash(seed))``; returns a new list."""
    rng = Mulberry32(simple_hash(seed))
    shuffled = list(items)
    current = len(shuffled)

    while current != 0:
        pick = int(rng.random() * current)
        current -= 1
        shuffled[current], shuffled[pick] = shuffled[pick], shuffled[current]

    return shuffled

"""core/rng.py — Seeded random streams.

A stream is a zero-argument callable returning floats in [0, 1).  The
sequence is a 32-bit linear congruential generator, so the same seed
gives the same draws bit-for-bit on every platform::

    draw = create_stream(42)
    draw(), draw(), draw()

Cow appearance is generated from one stream at creation.  Behaviour
uses another stream built from the cow's current seed, which is
re-rolled on every load, so only generation has to be reproducible.
"""

from __future__ import annotations
import secrets
from typing import Callable

Stream = Callable[[], float]

_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_MODULUS = 2 ** 32


def create_stream(seed: int) -> Stream:
    """Return a deterministic float stream for *seed*."""
    state = int(seed) % _MODULUS

    def draw() -> float:
        nonlocal state
        state = (state * _MULTIPLIER + _INCREMENT) % _MODULUS
        return state / _MODULUS

    return draw


def random_seed() -> int:
    """Fresh 48-bit seed for a new cow or a re-seed on load."""
    return secrets.randbits(48)


def weighted_pick(draw: Stream, weights: dict):
    """Cumulative-probability scan over *weights* (key → weight).

    One draw is compared against the running cumulative share.  Falls
    back to the last key if rounding lets the scan run off the end.
    """
    total = sum(weights.values())
    roll = draw()
    cumulative = 0.0
    last = None
    for key, weight in weights.items():
        last = key
        cumulative += weight / total
        if roll <= cumulative:
            return key
    return last


def uniform(draw: Stream, low: float, high: float) -> float:
    return low + draw() * (high - low)

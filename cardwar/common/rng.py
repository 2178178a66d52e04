"""Seeded random number source for deterministic War games.

A game's RNG is a plain callable returning floats in ``[0.0, 1.0)``. It is
passed explicitly to everything that needs randomness so that replays and tests
can supply identical streams without touching the module-level generator.
"""

from __future__ import annotations

import random
from typing import Callable

RNG = Callable[[], float]


def create_seeded_rng(seed: str) -> RNG:
    """Return a deterministic float stream for *seed*.

    The stream is backed by a private :class:`random.Random` instance, whose
    output for a given string seed is stable across platforms and releases.

    >>> a, b = create_seeded_rng("demo"), create_seeded_rng("demo")
    >>> [a() for _ in range(3)] == [b() for _ in range(3)]
    True
    """
    if not isinstance(seed, str):
        raise TypeError(f"seed must be a string, got {type(seed).__name__}")
    return random.Random(seed).random

"""
Injectable random source.

Every stochastic step of the engine draws from a ``RandomSource``: a
zero-argument callable returning a float in ``[0, 1)``.  Tests pass a
seeded or scripted source; production code gets the platform PRNG.
"""

from __future__ import annotations

import random
from typing import Callable, Iterable, Optional

from trainplan.core.config import settings

RandomSource = Callable[[], float]


def default_random_source(seed: Optional[int] = None) -> RandomSource:
    """Return a PRNG-backed source.

    ``seed`` falls back to ``settings.RANDOM_SEED``; when both are unset the
    source is unseeded and runs are not reproducible.
    """
    if seed is None:
        seed = settings.RANDOM_SEED
    return random.Random(seed).random


def sequence_random_source(values: Iterable[float]) -> RandomSource:
    """Return a source that replays ``values`` in a loop.

    Useful for pinning individual draws in tests.
    """
    pool = [float(v) for v in values]
    if not pool:
        raise ValueError("sequence_random_source needs at least one value")
    state = {"i": 0}

    def _next() -> float:
        value = pool[state["i"] % len(pool)]
        state["i"] += 1
        return value

    return _next

"""Injectable randomness for the schedulers.

Production runs stay genuinely random (an unseeded `random.Random`), while
tests pass a seed or their own generator to get a reproducible schedule.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def resolve_rng(rng: Optional[random.Random] = None, seed: Optional[int] = None) -> random.Random:
    """An explicit generator wins over a seed; with neither, draw from OS entropy."""

    if rng is not None:
        return rng
    return random.Random(seed)


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    out = list(items)
    rng.shuffle(out)
    return out

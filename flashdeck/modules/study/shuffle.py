from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

_rng = random.Random()


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """Return a uniformly random permutation of ``items`` (Fisher-Yates).

    The input is never mutated; a new list is always returned.
    """
    rng = rng or _rng
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out

"""Injectable source of randomness shared by the simulation engines."""

from typing import Protocol

import numpy as np


class RandomSource(Protocol):
    """Sampling interface used by every engine.

    ``numpy.random.Generator`` satisfies it, so a seeded generator can be
    passed anywhere a source is expected.
    """

    def random(self) -> float:
        """Draw from [0, 1)."""
        ...

    def uniform(self, low: float, high: float) -> float:
        """Draw from [low, high)."""
        ...

    def integers(self, low: int, high: int) -> int:
        """Draw an integer from [low, high)."""
        ...


def default_rng(seed: int | None = None) -> np.random.Generator:
    """Create the default random source."""
    return np.random.default_rng(seed)

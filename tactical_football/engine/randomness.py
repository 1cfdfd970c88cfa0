"""
Single injectable source of randomness for the simulation.

Every probabilistic decision in the engine goes through ``RandomSource.random``,
so a seeded source replays a match exactly and a test double overriding
``random`` controls every draw.
"""

from typing import Optional, Sequence, TypeVar

import numpy as np

T = TypeVar('T')


class RandomSource:
    """
    Seedable random source backed by ``numpy.random.Generator``.

    Derived helpers (``uniform``, ``randint``, ``choice``, ``roulette``) are all
    built on top of ``random`` so that overriding that one method is enough to
    script a simulation.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def random(self) -> float:
        """Uniform draw in [0, 1)."""
        return float(self._rng.random())

    def uniform(self, low: float, high: float) -> float:
        """Uniform draw in [low, high)."""
        return low + (high - low) * self.random()

    def randint(self, low: int, high: int) -> int:
        """Uniform integer draw in [low, high] (both inclusive)."""
        span = high - low + 1
        return low + min(span - 1, int(self.random() * span))

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element uniformly."""
        if not items:
            raise ValueError("cannot choose from an empty sequence")
        return items[min(len(items) - 1, int(self.random() * len(items)))]

    def roulette(self, weights: Sequence[float]) -> int:
        """
        Roulette-wheel selection.

        Returns:
            int: index of the interval containing a draw in [0, sum(weights))
        """
        total = float(sum(weights))
        if total <= 0:
            return 0
        draw = self.random() * total
        cumulative = 0.0
        for index, weight in enumerate(weights):
            cumulative += weight
            if draw < cumulative:
                return index
        return len(weights) - 1

    def normal(self, mean: float, std: float) -> float:
        """Gaussian draw, used only for squad generation."""
        return float(self._rng.normal(mean, std))

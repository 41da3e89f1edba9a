"""
RNG - Seedable Spawn Roller
===========================

All randomness in a session flows through one SpawnRoller so that a seed fully
determines obstacle heights, pickup rolls and hazard spawns.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


class SpawnRoller:
    """
    Explicit pseudo-random source for spawn decisions.

    Wraps a private random.Random so sessions never touch the global generator.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the roller.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        if probability <= 0.0:
            return False
        if probability >= 1.0:
            return True
        return self._rng.random() < probability

    def uniform(self, low: float, high: float) -> float:
        """Uniform float in [low, high]."""
        if high <= low:
            return low
        return self._rng.uniform(low, high)

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high]."""
        if high <= low:
            return low
        return self._rng.randint(low, high)

    def weighted_choice(self, weighted: Sequence[Tuple[T, float]]) -> T:
        """
        Choose a key from (key, weight) pairs proportionally to weight.

        Args:
            weighted: Non-empty sequence of (key, weight) with weight >= 0.

        Returns:
            The chosen key.
        """
        if not weighted:
            raise ValueError("weighted_choice requires at least one option")
        total = sum(max(0.0, w) for _, w in weighted)
        if total <= 0:
            return weighted[0][0]
        r = self._rng.random() * total
        cumulative = 0.0
        for key, weight in weighted:
            cumulative += max(0.0, weight)
            if r < cumulative:
                return key
        return weighted[-1][0]

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Restart the sequence.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)

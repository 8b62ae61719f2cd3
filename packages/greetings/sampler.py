from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class WeightedSampler:
    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def choose(self, entries: Sequence[tuple[T, float]]) -> T | None:
        """Pick one id with probability proportional to its weight.

        Returns None when no entry has a positive weight. Ties fall to list
        order, so a fixed seed and fixed weights always give the same pick.
        """
        positive = [(item, weight) for item, weight in entries if weight > 0]
        total = sum(weight for _, weight in positive)
        if total <= 0:
            return None
        point = self.rng.random() * total
        cumulative = 0.0
        for item, weight in positive:
            cumulative += weight
            if cumulative > point:
                return item
        # Float rounding can leave point == cumulative on the last entry.
        return positive[-1][0]

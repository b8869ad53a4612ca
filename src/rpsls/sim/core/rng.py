from __future__ import annotations

import math
import random
from typing import Optional, Sequence, TypeVar

from pygame.math import Vector2

T = TypeVar("T")


class SimulationRng:
    """Random source for spawning. Unseeded unless a seed is given."""

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return low + self._random.random() * (high - low)

    def next_unit_circle(self) -> Vector2:
        angle = self._random.random() * 2 * math.pi
        return Vector2(math.cos(angle), math.sin(angle))

    def choice(self, items: Sequence[T]) -> T:
        return items[int(self._random.random() * len(items))]

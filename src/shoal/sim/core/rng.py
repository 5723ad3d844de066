from __future__ import annotations

import math
import random
from typing import Optional, Sequence

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: Optional[int]):
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
        return self._random.uniform(low, high)

    def next_bool(self, probability: float) -> bool:
        if probability <= 0.0:
            return False
        if probability >= 1.0:
            return True
        return self._random.random() < probability

    def next_unit_circle(self) -> Vector2:
        angle = self._random.uniform(0, 2 * math.pi)
        vector = Vector2()
        vector.from_polar((1, math.degrees(angle)))
        return vector

    def next_point(self, width: float, height: float) -> Vector2:
        return Vector2(self._random.uniform(0.0, width), self._random.uniform(0.0, height))

    def sample_ids(self, ids: Sequence[int], count: int) -> list[int]:
        count = max(0, min(count, len(ids)))
        return self._random.sample(list(ids), count)

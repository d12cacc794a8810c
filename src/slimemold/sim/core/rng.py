from __future__ import annotations

import math
import random
from typing import Optional


class DeterministicRng:
    """Seedable random source shared by every stochastic decision of a world.

    ``seed=None`` draws from OS entropy, so runs are not reproducible.
    """

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

    def next_centered(self) -> float:
        return self._random.random() - 0.5

    def next_sign(self) -> float:
        return -1.0 if self._random.random() < 0.5 else 1.0

    def next_angle(self) -> float:
        return self._random.uniform(0.0, 2.0 * math.pi)

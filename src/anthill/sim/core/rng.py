from __future__ import annotations

import random


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_step_delta(self) -> int:
        """Uniform draw from {-1, 0, 1}."""
        return self._random.randrange(3) - 1

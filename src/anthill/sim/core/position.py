from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from .rng import DeterministicRng


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


@dataclass(frozen=True, slots=True)
class Position:
    """Integer grid cell. Coordinates are unbounded in both directions."""

    x: int
    y: int

    @property
    def key(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def plus_delta(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def direction_step_toward(self, target: "Position") -> "Position":
        """
        Return the neighbouring cell one step closer to `target`.

        Shallow slopes (|dy/dx| < 0.5) move along x only, steep slopes (> 2) along y only,
        anything in between moves diagonally.
        """

        dx = target.x - self.x
        dy = target.y - self.y
        if dx == 0 and dy == 0:
            return self
        if dx == 0:
            return self.plus_delta(0, _sign(dy))
        if dy == 0:
            return self.plus_delta(_sign(dx), 0)
        ratio = abs(dy / dx)
        if ratio < 0.5:
            return self.plus_delta(_sign(dx), 0)
        if ratio > 2:
            return self.plus_delta(0, _sign(dy))
        return self.plus_delta(_sign(dx), _sign(dy))

    def random_step(self, rng: "DeterministicRng") -> "Position":
        dx = rng.next_step_delta()
        dy = rng.next_step_delta()
        return self.plus_delta(dx, dy)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


ORIGIN = Position(0, 0)

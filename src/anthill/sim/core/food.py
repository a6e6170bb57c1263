from __future__ import annotations

from dataclasses import dataclass

from .position import Position


@dataclass(slots=True)
class FoodSource:
    position: Position
    remaining_units: int

    def __post_init__(self) -> None:
        if self.remaining_units < 0:
            self.remaining_units = 0

    @property
    def is_exhausted(self) -> bool:
        return self.remaining_units == 0

    def consume(self) -> None:
        # Exhausted sources stay at zero.
        if self.remaining_units > 0:
            self.remaining_units -= 1

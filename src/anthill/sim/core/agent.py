from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ..utils.math2d import _heading_from_velocity, _step_vector
from .food import FoodSource
from .position import Position

if TYPE_CHECKING:
    from .rng import DeterministicRng


class AgentState(str, Enum):
    WANDERING = "Wandering"
    SEEKING_FOOD = "SeekingFood"
    RETURNING_HOME = "ReturningHome"


@dataclass(slots=True)
class Agent:
    id: int
    position: Position
    home: Position
    known_food_position: Optional[Position] = None
    carrying_food: bool = False
    heading: float = 0.0

    @property
    def state(self) -> AgentState:
        if self.carrying_food:
            return AgentState.RETURNING_HOME
        if self.known_food_position is not None:
            return AgentState.SEEKING_FOOD
        return AgentState.WANDERING

    def move(self, rng: "DeterministicRng") -> None:
        """Take exactly one step according to the current state."""
        previous = self.position
        if self.carrying_food:
            self.position = previous.direction_step_toward(self.home)
            if self.position == self.home:
                # Delivered; the remembered food position is kept.
                self.carrying_food = False
        elif self.known_food_position is not None:
            self.position = previous.direction_step_toward(self.known_food_position)
            if self.position == self.known_food_position:
                self.known_food_position = None
        else:
            self.position = previous.random_step(rng)
        step = _step_vector(previous.x, previous.y, self.position.x, self.position.y)
        self.heading = _heading_from_velocity(step, fallback=self.heading)

    def consume(self, food: FoodSource) -> None:
        food.consume()
        self.known_food_position = food.position
        self.carrying_food = True

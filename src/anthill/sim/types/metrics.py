from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    wandering: int
    seeking_food: int
    returning_home: int
    food_sources: int
    food_units: int
    consumed: int
    exhausted: int
    informed: int
    deliveries: int
    occupied_cells: int
    tick_duration_ms: float = 0.0

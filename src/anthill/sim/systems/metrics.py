from __future__ import annotations

from typing import Iterable, Tuple

from ..core.agent import Agent, AgentState
from ..core.food import FoodSource
from ..types.metrics import TickMetrics


def population_stats(agents: Iterable[Agent]) -> Tuple[int, int, int, int]:
    population = 0
    wandering = 0
    seeking = 0
    returning = 0
    for agent in agents:
        population += 1
        state = agent.state
        if state is AgentState.RETURNING_HOME:
            returning += 1
        elif state is AgentState.SEEKING_FOOD:
            seeking += 1
        else:
            wandering += 1
    return population, wandering, seeking, returning


def create_metrics(
    tick: int,
    agents: Iterable[Agent],
    food_sources: Iterable[FoodSource],
    consumed: int,
    exhausted: int,
    informed: int,
    deliveries: int,
    occupied_cells: int,
    duration_ms: float,
) -> TickMetrics:
    population, wandering, seeking, returning = population_stats(agents)
    source_count = 0
    units = 0
    for food in food_sources:
        source_count += 1
        units += food.remaining_units
    return TickMetrics(
        tick=tick,
        population=population,
        wandering=wandering,
        seeking_food=seeking,
        returning_home=returning,
        food_sources=source_count,
        food_units=units,
        consumed=consumed,
        exhausted=exhausted,
        informed=informed,
        deliveries=deliveries,
        occupied_cells=occupied_cells,
        tick_duration_ms=duration_ms,
    )

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List, Optional, Tuple

from ..systems import communication, foraging, metrics as metrics_system
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata
from .agent import Agent
from .config import SimulationConfig
from .food import FoodSource
from .occupancy import OccupancyGrid
from .position import ORIGIN, Position
from .rng import DeterministicRng

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42


class FoodSourceExistsError(ValueError):
    def __init__(self, position: Position):
        super().__init__(f"a food source already exists at ({position.x}, {position.y})")
        self.position = position


class World:
    """
    Foraging colony on an unbounded integer grid.

    The world owns the agents (fixed count, creation order) and the food index, one source per
    cell. Every call to `iterate` runs movement, grouping, consumption and communication in that
    order, visiting agents in creation order.
    """

    def __init__(self, agent_count: int, rng: Optional[DeterministicRng] = None, home: Position = ORIGIN):
        self._agent_count = max(0, int(agent_count))
        self._rng = rng if rng is not None else DeterministicRng(DEFAULT_SEED)
        self._home = home
        self._agents: List[Agent] = []
        self._food_index: Dict[Tuple[int, int], FoodSource] = {}
        self._grid = OccupancyGrid()
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._config: SimulationConfig | None = None
        self._bootstrap_population()

    @classmethod
    def from_config(cls, config: SimulationConfig, rng: Optional[DeterministicRng] = None) -> "World":
        world = cls(
            config.agent_count,
            rng=rng if rng is not None else DeterministicRng(config.seed),
            home=Position(*config.home),
        )
        world._config = config
        world._seed_configured_food()
        return world

    @property
    def agents(self) -> Tuple[Agent, ...]:
        return tuple(self._agents)

    @property
    def food_sources(self) -> Tuple[FoodSource, ...]:
        return tuple(food for food in self._food_index.values() if not food.is_exhausted)

    @property
    def home(self) -> Position:
        return self._home

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def max_cell_occupancy(self) -> int:
        """Largest number of agents sharing one cell after the last tick."""
        return self._grid.max_occupancy()

    def food_at(self, position: Position) -> Optional[FoodSource]:
        return self._food_index.get(position.key)

    def add_food_source(self, position: Position, initial_units: int) -> Optional[FoodSource]:
        """
        Place a new food source on `position`.

        Non-positive unit counts place nothing and return None. A cell already holding a source is
        rejected with FoodSourceExistsError and the existing source is left untouched.
        """

        if initial_units <= 0:
            logger.debug("ignoring food source at %s with %d units", position.key, initial_units)
            return None
        key = position.key
        if key in self._food_index:
            raise FoodSourceExistsError(position)
        food = FoodSource(position, int(initial_units))
        self._food_index[key] = food
        logger.debug("food source added at %s with %d units", key, initial_units)
        return food

    def reset(self) -> None:
        self._agents.clear()
        self._food_index.clear()
        self._grid.clear()
        self._rng.reset()
        self._tick = 0
        self._metrics = None
        self._bootstrap_population()
        self._seed_configured_food()

    def iterate(self) -> None:
        agents = self._agents
        if not agents:
            return
        start = perf_counter()
        rng = self._rng

        deliveries = 0
        for agent in agents:
            was_carrying = agent.carrying_food
            agent.move(rng)
            if was_carrying and not agent.carrying_food:
                deliveries += 1

        grid = self._grid
        grid.clear()
        for index, agent in enumerate(agents):
            grid.insert(index, agent.position)

        consumed, exhausted = foraging.consume_food(agents, self._food_index)
        informed = communication.share_food_positions(agents, grid.buckets())

        self._tick += 1
        elapsed_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            self._tick,
            agents,
            self._food_index.values(),
            consumed,
            exhausted,
            informed,
            deliveries,
            len(grid),
            elapsed_ms,
        )

    def snapshot(self) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else self._snapshot_metrics_from_state()
        tick_interval = self._config.tick_interval if self._config is not None else 0.0
        metadata = SnapshotMetadata(
            seed=self._rng.seed,
            tick_interval=tick_interval,
            tick_rate=0.0 if tick_interval <= 0 else 1.0 / tick_interval,
            home=self._home.to_dict(),
            agent_count=self._agent_count,
            config_version=self._config.config_version if self._config is not None else "",
        )
        return Snapshot(
            tick=self._tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            food_sources=[self._food_snapshot(food) for food in self.food_sources],
            metadata=metadata,
        )

    def _bootstrap_population(self) -> None:
        for agent_id in range(self._agent_count):
            self._agents.append(Agent(id=agent_id, position=self._home, home=self._home))

    def _seed_configured_food(self) -> None:
        if self._config is None:
            return
        for entry in self._config.food_sources:
            self.add_food_source(Position(*entry.position), entry.units)

    def _snapshot_metrics_from_state(self) -> TickMetrics:
        return metrics_system.create_metrics(
            self._tick,
            self._agents,
            self._food_index.values(),
            consumed=0,
            exhausted=0,
            informed=0,
            deliveries=0,
            occupied_cells=len({agent.position.key for agent in self._agents}),
            duration_ms=0.0,
        )

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, Any]:
        known = agent.known_food_position
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "home": agent.home.to_dict(),
            "behavior_state": agent.state.value,
            "carrying_food": agent.carrying_food,
            "known_food": None if known is None else known.to_dict(),
            "heading": agent.heading,
        }

    @staticmethod
    def _food_snapshot(food: FoodSource) -> Dict[str, Any]:
        return {"x": food.position.x, "y": food.position.y, "remaining": food.remaining_units}

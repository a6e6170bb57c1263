from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional, Sequence

from ..sim.core.config import FoodSourceConfig, SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)


_BASIC_HEADER = [
    "tick",
    "population",
    "wandering",
    "seeking_food",
    "returning_home",
    "food_sources",
    "food_units",
    "consumed",
    "deliveries",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "wandering",
    "seeking_food",
    "returning_home",
    "food_sources",
    "food_units",
    "consumed",
    "exhausted",
    "informed",
    "deliveries",
    "occupied_cells",
    "tick_ms",
    "seeking_ratio",
    "carrying_ratio",
    "avg_agents_per_cell",
    "max_cell_occupancy",
    "avg_distance_from_home",
    "max_distance_from_home",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.wandering,
        metrics.seeking_food,
        metrics.returning_home,
        metrics.food_sources,
        metrics.food_units,
        metrics.consumed,
        metrics.deliveries,
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: TickMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        seeking_ratio = 0.0
        carrying_ratio = 0.0
        avg_agents_per_cell = 0.0
        max_cell_occupancy = 0
        avg_distance = 0.0
        max_distance = 0
    else:
        seeking_ratio = metrics.seeking_food / population
        carrying_ratio = metrics.returning_home / population
        avg_agents_per_cell = population / max(1, metrics.occupied_cells)
        distance_sum = 0
        max_distance = 0
        for agent in world.agents:
            # Chebyshev distance from home.
            distance = max(abs(agent.position.x - agent.home.x), abs(agent.position.y - agent.home.y))
            distance_sum += distance
            max_distance = max(max_distance, distance)
        max_cell_occupancy = world.max_cell_occupancy
        avg_distance = distance_sum / population

    return [
        metrics.tick,
        population,
        metrics.wandering,
        metrics.seeking_food,
        metrics.returning_home,
        metrics.food_sources,
        metrics.food_units,
        metrics.consumed,
        metrics.exhausted,
        metrics.informed,
        metrics.deliveries,
        metrics.occupied_cells,
        f"{tick_ms:.3f}",
        f"{seeking_ratio:.4f}",
        f"{carrying_ratio:.4f}",
        f"{avg_agents_per_cell:.4f}",
        max_cell_occupancy,
        f"{avg_distance:.4f}",
        max_distance,
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    count = len(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / count),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def _build_config(
    seed: Optional[int],
    agent_count: Optional[int],
    food: Optional[Sequence[tuple[int, int, int]]],
    config_path: Optional[Path],
) -> SimulationConfig:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    if agent_count is not None:
        config.agent_count = agent_count
    if food:
        config.food_sources = [FoodSourceConfig(position=(x, y), units=units) for x, y, units in food]
    return config


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
    agent_count: Optional[int] = None,
    food: Optional[Sequence[tuple[int, int, int]]] = None,
    config_path: Optional[Path] = None,
) -> World:
    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    config = _build_config(seed, agent_count, food, config_path)
    world = World.from_config(config)
    logger.info(
        "running %d ticks with %d agents and %d food sources (seed=%d)",
        steps,
        config.agent_count,
        len(world.food_sources),
        config.seed,
    )

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    food_units_series: list[float] = []
    informed_series: list[float] = []
    total_consumed = 0
    total_deliveries = 0
    exhausted_ticks: list[int] = []
    max_returning = (-1, -1)

    try:
        for _ in range(steps):
            world.iterate()
            # Empty worlds never tick, so fall back to the static view.
            metrics = world.metrics if world.metrics is not None else world.snapshot().metrics
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms

            if summary_path:
                tick_ms_series.append(tick_ms)
                food_units_series.append(float(metrics.food_units))
                informed_series.append(float(metrics.seeking_food + metrics.returning_home))
                total_consumed += metrics.consumed
                total_deliveries += metrics.deliveries
                exhausted_ticks.extend([metrics.tick] * metrics.exhausted)
                if metrics.returning_home > max_returning[0]:
                    max_returning = (metrics.returning_home, metrics.tick)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "agent_count": config.agent_count,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "food_units": _summary_stats(food_units_series),
            "informed_agents": _summary_stats(informed_series),
            "totals": {
                "consumed": total_consumed,
                "deliveries": total_deliveries,
                "exhausted_sources": len(exhausted_ticks),
            },
            "exhausted_at_ticks": exhausted_ticks,
            "peaks": {
                "returning_home": {"value": max_returning[0], "tick": max_returning[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "food_units": _summary_stats(food_units_series[tail_slice]),
                "informed_agents": _summary_stats(informed_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
        logger.info("summary written to %s", summary_path)

    return world


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Headless ant foraging simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--agents", type=int, default=None, help="Number of agents (overrides the config).")
    parser.add_argument(
        "--food",
        type=int,
        nargs=3,
        action="append",
        metavar=("X", "Y", "UNITS"),
        default=None,
        help="Place a food source; repeat for several (replaces sources from the config).",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=500,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        agent_count=args.agents,
        food=[tuple(entry) for entry in args.food] if args.food else None,
        config_path=args.config,
    )


if __name__ == "__main__":
    main()

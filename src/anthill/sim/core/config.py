from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import yaml


@dataclass
class FoodSourceConfig:
    position: tuple[int, int] = (0, 0)
    units: int = 200


@dataclass
class SimulationConfig:
    agent_count: int = 500
    tick_interval: float = 0.05
    seed: int = 42
    home: tuple[int, int] = (0, 0)
    default_food_units: int = 200
    config_version: str = "v1"
    food_sources: List[FoodSourceConfig] = field(default_factory=list)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 1


def _pair(value: tuple[int, int] | list[int] | None, default: tuple[int, int]) -> tuple[int, int]:
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return (int(value[0]), int(value[1]))
    return default


def load_config(raw: dict) -> SimulationConfig:
    defaults = SimulationConfig()
    default_units = int(raw.get("default_food_units", defaults.default_food_units))
    food_raw = raw.get("food_sources") or []
    food = [
        FoodSourceConfig(
            position=_pair(entry.get("position"), FoodSourceConfig().position),
            units=int(entry.get("units", default_units)),
        )
        for entry in food_raw
    ]
    sim_values = {k: v for k, v in raw.items() if k not in {"food_sources", "home"}}
    return SimulationConfig(home=_pair(raw.get("home"), defaults.home), food_sources=food, **sim_values)


def load_app_config(raw: dict) -> AppConfig:
    simulation = load_config(raw.get("simulation", {}))
    return AppConfig(simulation=simulation, broadcast_interval=int(raw.get("broadcast_interval", 1)))


def load_app_config_file(path: Path) -> AppConfig:
    data = yaml.safe_load(Path(path).read_text()) or {}
    return load_app_config(data)

import asyncio
import json

import pytest
from fastapi import WebSocketDisconnect

from anthill.app.server import SimulationController
from anthill.sim.core.config import AppConfig, FoodSourceConfig, SimulationConfig
from anthill.sim.core.world import FoodSourceExistsError


class _RecordingSocket:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send_text(self, payload: str) -> None:
        self.sent.append(payload)


class _ClosedSocket:
    async def send_text(self, payload: str) -> None:
        raise WebSocketDisconnect()


def _controller(**overrides) -> SimulationController:
    simulation = SimulationConfig(agent_count=4, seed=1, **overrides)
    return SimulationController(AppConfig(simulation=simulation))


def test_step_once_advances_world_and_broadcasts() -> None:
    controller = _controller()
    client = _RecordingSocket()
    controller.clients.add(client)

    asyncio.run(controller.step_once())

    assert controller.tick == 1
    assert len(client.sent) == 1
    payload = json.loads(client.sent[0])
    assert payload["tick"] == 1
    assert len(payload["agents"]) == 4
    assert payload["metrics"]["population"] == 4
    assert set(payload) == {"tick", "metrics", "agents", "food_sources", "metadata"}


def test_add_food_uses_default_units_and_rejects_duplicates() -> None:
    controller = _controller(default_food_units=150)

    async def exercise() -> None:
        result = await controller.add_food(10, -4)
        assert result == {"added": True, "x": 10, "y": -4, "remaining": 150}
        with pytest.raises(FoodSourceExistsError):
            await controller.add_food(10, -4, 3)
        skipped = await controller.add_food(1, 1, 0)
        assert skipped["added"] is False

    asyncio.run(exercise())
    assert len(controller.world.food_sources) == 1


def test_reset_restores_configured_food() -> None:
    controller = _controller(food_sources=[FoodSourceConfig(position=(3, 3), units=5)])

    async def exercise() -> None:
        await controller.add_food(1, 2, 9)
        await controller.step_once()
        await controller.reset()

    asyncio.run(exercise())
    assert controller.tick == 0
    assert [f.position.key for f in controller.world.food_sources] == [(3, 3)]


def test_disconnected_clients_are_dropped() -> None:
    controller = _controller()
    alive = _RecordingSocket()
    controller.clients.update({alive, _ClosedSocket()})

    asyncio.run(controller._broadcast_snapshot())

    assert controller.clients == {alive}
    assert len(alive.sent) == 1


def test_loop_ticks_only_while_running() -> None:
    controller = _controller(tick_interval=0.001)

    async def exercise() -> None:
        await controller.start()
        await asyncio.sleep(0.05)
        await controller.stop()
        stopped_at = controller.tick
        await asyncio.sleep(0.02)
        assert controller.tick == stopped_at
        await controller.shutdown()

    asyncio.run(exercise())
    assert controller.tick > 0

from __future__ import annotations

import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from pathlib import Path
from typing import AsyncIterator, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from ..sim.core.config import AppConfig, load_app_config_file
from ..sim.core.position import Position
from ..sim.core.world import FoodSourceExistsError, World

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ANTHILL_CONFIG"


class SimulationController:
    """
    Drives a World on a fixed cadence and pushes snapshots to websocket clients.

    The interval is slept after each completed tick, so a slow tick delays the next one instead of
    triggering catch-up ticks. Ticks, food placement and resets are serialised by one lock.
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.world = World.from_config(config.simulation)
        self.broadcast_interval = max(1, config.broadcast_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    @property
    def tick(self) -> int:
        return self.world.tick

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())
        self.running = True
        logger.info("simulation started at tick %d", self.tick)

    async def stop(self) -> None:
        self.running = False
        logger.info("simulation stopped at tick %d", self.tick)

    async def shutdown(self) -> None:
        self.running = False
        task = self._loop_task
        self._loop_task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
        logger.info("simulation reset")
        await self._broadcast_snapshot()

    async def step_once(self) -> None:
        async with self._lock:
            self.world.iterate()
        if self.tick % self.broadcast_interval == 0:
            await self._broadcast_snapshot()

    async def add_food(self, x: int, y: int, units: int | None = None) -> dict:
        amount = self.config.simulation.default_food_units if units is None else units
        async with self._lock:
            food = self.world.add_food_source(Position(x, y), amount)
        if food is None:
            return {"added": False, "x": x, "y": y, "remaining": 0}
        return {"added": True, "x": x, "y": y, "remaining": food.remaining_units}

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.simulation.tick_interval / self.speed_multiplier)
            if not self.running:
                continue
            await self.step_once()

    def _serialize_snapshot(self) -> str:
        snapshot = self.world.snapshot()
        return json.dumps(
            {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "agents": snapshot.agents,
                "food_sources": snapshot.food_sources,
                "metadata": asdict(snapshot.metadata),
            }
        )

    async def _broadcast_snapshot(self) -> None:
        if not self.clients:
            return
        payload = self._serialize_snapshot()
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await client.send_text(payload)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            logger.info("dropped disconnected client")


def _load_app_config() -> AppConfig:
    path = os.environ.get(CONFIG_ENV_VAR)
    if path:
        return load_app_config_file(Path(path))
    return AppConfig()


controller = SimulationController(_load_app_config())


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    await controller.start()
    try:
        yield
    finally:
        await controller.shutdown()


app = FastAPI(title="Anthill Foraging Simulation", lifespan=_lifespan)
static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.get("/")
async def index() -> FileResponse:
    return FileResponse(static_dir / "index.html")


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.world.snapshot()
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "population": len(controller.world.agents),
            "food_sources": len(snapshot.food_sources),
            "metrics": asdict(snapshot.metrics),
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    await controller.start()
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = float(payload.get("multiplier", 1.0))
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/food")
async def add_food(payload: dict) -> JSONResponse:
    try:
        x = int(payload["x"])
        y = int(payload["y"])
        units = payload.get("units")
        units = None if units is None else int(units)
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=f"invalid food payload: {exc}") from exc
    try:
        result = await controller.add_food(x, y, units)
    except FoodSourceExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return JSONResponse(result)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    logger.info("client connected (%d total)", len(controller.clients))
    await controller._broadcast_snapshot()
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        logger.info("client disconnected (%d left)", len(controller.clients))


__all__ = ["app", "controller"]

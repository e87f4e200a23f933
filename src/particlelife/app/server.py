from __future__ import annotations

import asyncio
import json
import logging
import os
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import AsyncIterator, Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.affinity import AffinityMatrix
from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    """Drives a World on the event loop; one tick runs to completion between yields."""

    def __init__(
        self,
        config: SimulationConfig,
        broadcast_interval: int = 1,
        include_partition: bool = False,
        max_queued_snapshots: int = 120,
    ):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.include_partition = include_partition
        self.running = False
        self.tick = 0
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        # Unacknowledged snapshots past this bound are discarded oldest first.
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=max(1, max_queued_snapshots))
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._broadcast_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def shutdown(self) -> None:
        self.running = False
        if self._broadcast_task is not None:
            self._broadcast_task.cancel()
            try:
                await self._broadcast_task
            except asyncio.CancelledError:
                pass
            self._broadcast_task = None

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
            self.tick = 0
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def advance(self) -> None:
        async with self._lock:
            self.world.step(self.tick)
            self.tick += 1
        if self.tick % self.broadcast_interval == 0:
            await self._broadcast_snapshot()

    async def randomize_affinity(self) -> AffinityMatrix:
        async with self._lock:
            return self.world.randomize_affinity()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step / self.speed_multiplier)
            if not self.running:
                continue
            await self.advance()

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot(self.tick, include_partition=self.include_partition)
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "particles": snapshot.particles,
                "world": asdict(snapshot.world),
                "metadata": asdict(snapshot.metadata),
                "partition": snapshot.partition,
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            logger.info("dropping disconnected client")
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


def _load_app_config() -> SimulationConfig:
    path = os.environ.get("PARTICLELIFE_CONFIG")
    config = SimulationConfig.from_yaml(Path(path)) if path else SimulationConfig()
    setup_logging(config.logging)
    return config


controller = SimulationController(_load_app_config())


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    await controller.start()
    yield
    await controller.shutdown()


app = FastAPI(title="Particle Life Simulation", lifespan=_lifespan)


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.world.snapshot(controller.tick)
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "state": controller.world.state.value,
            "population": len(controller.world.particles),
            "metrics": asdict(snapshot.metrics),
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
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


@app.post("/api/control/partition")
async def toggle_partition(payload: dict) -> JSONResponse:
    controller.include_partition = bool(payload.get("enabled", False))
    return JSONResponse({"enabled": controller.include_partition})


@app.post("/api/affinity/randomize")
async def randomize_affinity() -> JSONResponse:
    matrix = await controller.randomize_affinity()
    return JSONResponse({"affinity": matrix.rows()})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)


__all__ = ["app", "controller"]

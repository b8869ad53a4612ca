from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import Any, AsyncIterator, Deque, Dict, List, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World

logger = logging.getLogger(__name__)

MIN_SPEED_MULTIPLIER = 0.1
MAX_SPEED_MULTIPLIER = 5.0


@dataclass(frozen=True)
class QueuedSnapshot:
    frame: int
    payload: str


class SnapshotQueue:
    """Bounded backlog of serialized frames; an ack drops every frame up to it."""

    def __init__(self, max_items: int = 120):
        self._items: Deque[QueuedSnapshot] = deque(maxlen=max(1, max_items))
        self._guard = asyncio.Lock()

    async def push(self, item: QueuedSnapshot) -> None:
        async with self._guard:
            self._items.append(item)

    async def ack(self, frame: int) -> int:
        dropped = 0
        async with self._guard:
            while self._items and self._items[0].frame <= frame:
                self._items.popleft()
                dropped += 1
        return dropped

    async def after(self, frame: int) -> List[QueuedSnapshot]:
        async with self._guard:
            return [item for item in self._items if item.frame > frame]

    async def clear(self) -> None:
        async with self._guard:
            self._items.clear()

    def frames(self) -> List[int]:
        return [item.frame for item in self._items]


class SimulationController:
    """Drives one World on the event loop and fans its frames out to websockets."""

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1, max_queue: int = 120):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.queue = SnapshotQueue(max_queue)
        # websocket -> last frame sent to it
        self._viewers: Dict[WebSocket, int] = {}
        # one tick at a time; resets and resizes wait for the running tick
        self._tick_lock = asyncio.Lock()
        self._loop_task: Optional[asyncio.Task] = None

    @property
    def frame(self) -> int:
        return self.world.frame_count

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._run())
        self.running = True

    async def shutdown(self) -> None:
        self.running = False
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None

    def set_speed(self, multiplier: float) -> float:
        self.speed_multiplier = max(MIN_SPEED_MULTIPLIER, min(MAX_SPEED_MULTIPLIER, multiplier))
        return self.speed_multiplier

    async def reset(self) -> None:
        async with self._tick_lock:
            self.world.reset()
        await self.queue.clear()
        for viewer in self._viewers:
            self._viewers[viewer] = -1
        await self.publish()

    async def resize(self, width: float, height: float) -> None:
        async with self._tick_lock:
            self.world.resize(width, height)

    async def tick(self) -> None:
        async with self._tick_lock:
            self.world.step()
        if self.frame % self.broadcast_interval == 0:
            await self.publish()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(1.0 / (self.config.fps * self.speed_multiplier))
            if self.running:
                await self.tick()

    def encode_frame(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot()
        message = {
            "type": "snapshot",
            "frame": snapshot.frame,
            "payload": asdict(snapshot),
        }
        return QueuedSnapshot(frame=snapshot.frame, payload=json.dumps(message))

    async def attach(self, websocket: WebSocket) -> None:
        self._viewers[websocket] = -1
        await self.catch_up(websocket)

    def detach(self, websocket: WebSocket) -> None:
        self._viewers.pop(websocket, None)

    async def catch_up(self, websocket: WebSocket) -> None:
        last_sent = self._viewers.get(websocket, -1)
        for item in await self.queue.after(last_sent):
            await websocket.send_text(item.payload)
            last_sent = item.frame
        self._viewers[websocket] = last_sent

    async def publish(self) -> None:
        await self.queue.push(self.encode_frame())
        gone: Set[WebSocket] = set()
        for websocket in list(self._viewers):
            try:
                await self.catch_up(websocket)
            except WebSocketDisconnect:
                gone.add(websocket)
        for websocket in gone:
            logger.info("viewer disconnected during publish")
            self.detach(websocket)

    def status(self) -> Dict[str, Any]:
        metrics = self.world.snapshot().metrics
        return {
            "running": self.running,
            "frame": self.frame,
            "speed": self.speed_multiplier,
            "viewers": len(self._viewers),
            "metrics": asdict(metrics),
        }


class SpeedRequest(BaseModel):
    multiplier: float = 1.0


class ResizeRequest(BaseModel):
    width: float
    height: float


controller = SimulationController(SimulationConfig())


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await controller.start()
    try:
        yield
    finally:
        await controller.shutdown()


app = FastAPI(title="RPSLS Ecosystem Simulation", lifespan=lifespan)


@app.get("/api/status")
async def status() -> JSONResponse:
    return JSONResponse(controller.status())


@app.get("/api/config")
async def config() -> JSONResponse:
    return JSONResponse(asdict(controller.config))


@app.get("/api/stats")
async def stats() -> JSONResponse:
    return JSONResponse(
        {
            kind.value: {"count": bucket.count, "avg_health": bucket.avg_health, "weighted": bucket.weighted}
            for kind, bucket in controller.world.stats.items()
        }
    )


@app.get("/api/history")
async def history() -> JSONResponse:
    population = controller.world.history
    return JSONResponse(
        {
            "window_seconds": population.window_seconds,
            "peak": population.peak(),
            "series": population.as_dict(),
        }
    )


@app.get("/api/entities/{entity_id}")
async def entity(entity_id: int) -> JSONResponse:
    found = controller.world.find(entity_id)
    if found is None:
        raise HTTPException(status_code=404, detail=f"no entity {entity_id}")
    return JSONResponse(World.entity_payload(found))


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": controller.running})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": controller.running})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "frame": controller.frame})


@app.post("/api/control/speed")
async def set_speed(request: SpeedRequest) -> JSONResponse:
    return JSONResponse({"multiplier": controller.set_speed(request.multiplier)})


@app.post("/api/control/resize")
async def resize_world(request: ResizeRequest) -> JSONResponse:
    try:
        await controller.resize(request.width, request.height)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse({"width": controller.world.width, "height": controller.world.height})


@app.websocket("/ws")
async def stream(websocket: WebSocket) -> None:
    await websocket.accept()
    await controller.attach(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug("ignoring malformed viewer message")
                continue
            if not isinstance(message, dict) or message.get("type") != "ack":
                continue
            frame = message.get("frame")
            if isinstance(frame, int):
                await controller.queue.ack(frame)
    except WebSocketDisconnect:
        controller.detach(websocket)


__all__ = ["app", "controller", "SimulationController", "SnapshotQueue"]

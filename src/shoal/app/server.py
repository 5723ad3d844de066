from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Set

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..logging_config import configure_logging
from ..sim.core.config import AppConfig, ShoalConfig, validate_config
from ..sim.core.errors import ConfigurationError, ShoalError, UpdateCheckError
from ..sim.core.simulator import ShoalSimulator
from ..sim.types.snapshot import Snapshot
from .runner import SimulationLink
from .updater import CURRENT_VERSION, UpdateChecker, UpdateStatus

logger = logging.getLogger(__name__)

# Stopping the simulator goes through shutdown(), never through a config update.
_READ_ONLY_KEYS = {"running"}


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    """Caller side of the simulator handshake for websocket clients.

    Each frame sends the current config and waits for the next snapshot.
    Pausing keeps the exchange going with ``paused`` set, so the simulator's
    clock never sees one long gap on resume.
    """

    def __init__(self, app_config: AppConfig, frame_interval: float = 1.0 / 60.0):
        self.app_config = app_config
        self.config: ShoalConfig = replace(app_config.simulation)
        self.simulator = ShoalSimulator(self.config, app_config.engine)
        self.link = SimulationLink(self.simulator)
        self.broadcast_interval = max(1, app_config.broadcast_interval)
        self.frame_interval = frame_interval
        self.tick = 0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque()
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return not self.config.paused

    async def start(self) -> None:
        self.link.start()
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())

    async def shutdown(self) -> None:
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
        async with self._lock:
            if self.link.alive:
                final = replace(self.config, running=False)
                try:
                    await asyncio.to_thread(self.link.exchange, final)
                except ShoalError as exc:
                    logger.warning("Simulator did not stop cleanly: %s", exc)
            self.link.close(timeout=1.0)

    def set_paused(self, paused: bool) -> None:
        self.config = replace(self.config, paused=paused)

    def apply_config(self, payload: Dict[str, Any]) -> ShoalConfig:
        values = {k: v for k, v in payload.items() if k not in _READ_ONLY_KEYS}
        try:
            candidate = replace(self.config, **values)
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc
        validate_config(candidate)
        self.config = candidate
        return candidate

    async def reset(self) -> None:
        # The simulator thread is parked on the config channel between exchanges.
        async with self._lock:
            self.simulator.reset()
            self.tick = 0
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1

    async def step_once(self) -> Snapshot:
        async with self._lock:
            snapshot = await asyncio.to_thread(self.link.exchange, self.config)
            self.tick = snapshot.tick
        if self.tick % self.broadcast_interval == 0:
            await self._broadcast_snapshot(snapshot)
        return snapshot

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.frame_interval)
            try:
                await self.step_once()
            except ShoalError as exc:
                logger.error("Simulation stopped: %s", exc)
                return

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    @staticmethod
    def _serialize_snapshot(snapshot: Snapshot) -> QueuedSnapshot:
        payload = {"type": "snapshot", "tick": snapshot.tick, "payload": snapshot.to_payload()}
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self, snapshot: Snapshot) -> None:
        queued = self._serialize_snapshot(snapshot)
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


app = FastAPI(title="Fish Shoal Simulation")
controller = SimulationController(AppConfig())


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await controller.shutdown()


@app.get("/api/status")
async def status() -> JSONResponse:
    metrics = controller.simulator.metrics
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "population": controller.simulator.population,
            "metrics": asdict(metrics) if metrics is not None else None,
        }
    )


@app.get("/api/config")
async def get_config() -> JSONResponse:
    return JSONResponse(asdict(controller.config))


@app.post("/api/config")
async def update_config(payload: dict) -> JSONResponse:
    try:
        config = controller.apply_config(payload)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse(asdict(config))


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.set_paused(False)
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.set_paused(True)
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.get("/api/fish/{fish_id}")
async def focused_fish(fish_id: int) -> JSONResponse:
    async with controller._lock:
        fish = controller.simulator.focused_fish(fish_id)
    if fish is None:
        raise HTTPException(status_code=404, detail=f"no fish with id {fish_id}")
    return JSONResponse(asdict(fish))


@app.get("/api/version")
async def version() -> JSONResponse:
    release_url = controller.app_config.release_url
    if not release_url:
        return JSONResponse(asdict(UpdateStatus(CURRENT_VERSION, None, False, "release check disabled")))
    try:
        status = await UpdateChecker(release_url).check()
    except UpdateCheckError as exc:
        logger.warning("Release check failed: %s", exc)
        status = UpdateStatus(CURRENT_VERSION, None, False, str(exc))
    return JSONResponse(asdict(status))


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


def main() -> None:
    configure_logging(include_uvicorn=True)
    uvicorn.run(app, host="127.0.0.1", port=8000)


__all__ = ["app", "controller", "main"]

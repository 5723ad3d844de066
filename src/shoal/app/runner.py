from __future__ import annotations

import logging
import threading
from typing import Optional

from ..sim.core.config import ShoalConfig
from ..sim.core.errors import ShoalError
from ..sim.core.simulator import ShoalSimulator, TickCallback
from ..sim.types.snapshot import Snapshot
from .channel import Channel

logger = logging.getLogger(__name__)


class SimulatorThread(threading.Thread):
    """Drive a simulator in lock step with a caller.

    Every iteration blocks on the config channel, runs one tick and sends the
    snapshot back. A config with ``running=False`` ends the loop after its
    tick; a closed channel or a failed tick ends it with ``error`` set. The
    snapshot channel is closed on exit so a waiting caller never hangs.
    """

    def __init__(
        self,
        simulator: ShoalSimulator,
        configs: Channel[ShoalConfig],
        snapshots: Channel[Snapshot],
    ) -> None:
        super().__init__(name="shoal-simulator", daemon=True)
        self._simulator = simulator
        self._configs = configs
        self._snapshots = snapshots
        self.error: Optional[ShoalError] = None

    def run(self) -> None:
        logger.info("Simulation loop started")
        try:
            running = True
            while running:
                config = self._configs.recv()
                running = config.running
                self._simulator.run(self._exchange(config))
        except ShoalError as exc:
            self.error = exc
            logger.error("Simulation loop stopped: %s", exc)
        finally:
            self._snapshots.close()
        logger.info("Simulation loop finished after %d ticks", self._simulator.tick)

    def _exchange(self, config: ShoalConfig) -> TickCallback:
        def io(snapshot: Snapshot) -> ShoalConfig:
            self._snapshots.send(snapshot)
            return config

        return io

    def join_result(self, timeout: Optional[float] = None) -> None:
        self.join(timeout)
        if self.error is not None:
            raise self.error


class SimulationLink:
    """Caller side of the handshake: send a config, get the next snapshot."""

    def __init__(self, simulator: ShoalSimulator) -> None:
        self.simulator = simulator
        self.configs: Channel[ShoalConfig] = Channel("config")
        self.snapshots: Channel[Snapshot] = Channel("snapshot")
        self.thread = SimulatorThread(simulator, self.configs, self.snapshots)

    @property
    def alive(self) -> bool:
        return self.thread.is_alive()

    def start(self) -> None:
        if not self.thread.is_alive():
            self.thread.start()

    def exchange(self, config: ShoalConfig) -> Snapshot:
        self.configs.send(config)
        return self.snapshots.recv()

    def close(self, timeout: Optional[float] = None) -> None:
        self.configs.close()
        if self.thread.is_alive():
            self.thread.join(timeout)

from __future__ import annotations

import logging
from dataclasses import replace
from time import perf_counter
from typing import Callable, Optional, Tuple

from ..systems import metrics as metrics_system
from ..systems.pipeline import TICK_STAGES, Stage, run_tick, validate_stages
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot
from ..utils.math2d import vec_to_list
from .config import EngineConfig, ShoalConfig
from .errors import SimulatorCreateError, SimulatorRunError
from .fish import FocusedFish
from .world import ShoalWorld

logger = logging.getLogger(__name__)

TickCallback = Callable[[Snapshot], ShoalConfig]


class ShoalSimulator:
    """Owns the fish store and advances it one tick per :meth:`run` call.

    Each call runs the stage pipeline, hands the resulting snapshot to the
    caller and applies the configuration the caller returns before the next
    tick. A failed tick leaves the instance unusable.
    """

    def __init__(
        self,
        config: Optional[ShoalConfig] = None,
        engine: Optional[EngineConfig] = None,
        clock: Callable[[], float] = perf_counter,
        stages: Tuple[Stage, ...] = TICK_STAGES,
    ) -> None:
        config = replace(config) if config is not None else ShoalConfig()
        engine = engine if engine is not None else EngineConfig()
        try:
            validate_stages(stages)
            world = ShoalWorld(config, engine, clock=clock)
            world.add(config.entity_count)
        except Exception as exc:
            raise SimulatorCreateError(f"failed to create: {exc}") from exc
        self._world = world
        self._stages = stages
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._failed = False
        logger.info(
            "Simulator created with %d fish in a %dx%d arena (seed=%s)",
            len(world),
            config.width,
            config.height,
            engine.seed,
        )

    @property
    def world(self) -> ShoalWorld:
        return self._world

    @property
    def config(self) -> ShoalConfig:
        return self._world.config

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def population(self) -> int:
        return len(self._world)

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def run(self, io: TickCallback) -> Snapshot:
        self.step()
        snapshot = self.snapshot()
        new_config = io(snapshot)
        self.update_config(new_config)
        return snapshot

    def step(self) -> TickMetrics:
        if self._failed:
            raise SimulatorRunError("failed to run: simulator stopped after an earlier failure")
        start = perf_counter()
        try:
            run_tick(self._world, self._stages)
        except Exception as exc:
            self._failed = True
            raise SimulatorRunError(f"failed to run: {exc}") from exc
        self._tick += 1
        elapsed_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(self._world, self._tick, elapsed_ms)
        logger.debug(
            "Tick %d: %d fish, %d social, dt=%.4f, %.2f ms",
            self._tick,
            self._metrics.population,
            self._metrics.social,
            self._world.delta_time.delta,
            elapsed_ms,
        )
        return self._metrics

    def snapshot(self) -> Snapshot:
        snapshot = Snapshot(tick=self._tick, elapsed=self._world.delta_time.delta)
        for fish in self._world.fish:
            snapshot.ids.append(fish.id)
            snapshot.positions.append(vec_to_list(fish.position))
            snapshot.velocities.append(vec_to_list(fish.velocity))
            snapshot.speeds.append(fish.speed)
            snapshot.densities.append(fish.density)
        return snapshot

    def update_config(self, new_config: ShoalConfig) -> None:
        world = self._world
        old_count = len(world)
        world.config = replace(new_config)
        target = max(0, new_config.entity_count)
        if target > old_count:
            added = world.add(target - old_count)
            logger.info("Added %d fish (population %d)", len(added), len(world))
        elif target < old_count:
            removed = world.remove(old_count - target)
            logger.info("Removed %d fish (population %d)", len(removed), len(world))

    def reset(self) -> None:
        world = self._world
        world.clear()
        world.rng.reset()
        world.delta_time.restart()
        world.add(world.config.entity_count)
        self._tick = 0
        self._metrics = None
        self._failed = False
        logger.info("Simulator reset with %d fish", len(world))

    def focused_fish(self, fish_id: int) -> FocusedFish | None:
        fish = self._world.get(fish_id)
        if fish is None:
            return None
        return FocusedFish(
            id=fish.id,
            position=vec_to_list(fish.position),
            velocity=vec_to_list(fish.velocity),
            speed=fish.speed,
            density=fish.density,
            social=fish.social,
        )

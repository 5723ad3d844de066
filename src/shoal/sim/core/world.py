from __future__ import annotations

import heapq
from time import perf_counter
from typing import Callable, Dict, Iterator, List

from pygame.math import Vector2

from .chunks import Chunks
from .config import EngineConfig, ShoalConfig
from .delta_time import DeltaTime
from .fish import Fish
from .rng import DeterministicRng


class ShoalWorld:
    """Per-fish state plus the simulation-wide singletons.

    Stages receive the world explicitly; there is no module-level state.
    """

    def __init__(
        self,
        config: ShoalConfig,
        engine: EngineConfig,
        clock: Callable[[], float] = perf_counter,
    ) -> None:
        self.config = config
        self.engine = engine
        self.rng = DeterministicRng(engine.seed)
        self.delta_time = DeltaTime(clock, max_delta=engine.max_delta_time, fixed_step=engine.fixed_time_step)
        self.chunks = Chunks(config.attraction_radius, config.width, config.height, wrap=engine.wrap_neighbor_cells)
        self._fish: Dict[int, Fish] = {}
        self._free_ids: List[int] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._fish)

    def __iter__(self) -> Iterator[Fish]:
        return iter(self.fish)

    def __contains__(self, fish_id: object) -> bool:
        return fish_id in self._fish

    @property
    def fish(self) -> List[Fish]:
        return [self._fish[fish_id] for fish_id in sorted(self._fish)]

    def ids(self) -> List[int]:
        return sorted(self._fish)

    def get(self, fish_id: int) -> Fish | None:
        return self._fish.get(fish_id)

    def add(self, amount: int) -> List[int]:
        config = self.config
        low, high = self.engine.idle_speed_range
        added = []
        for _ in range(max(0, amount)):
            fish = Fish(
                id=self._allocate_id(),
                position=self.rng.next_point(config.width, config.height),
                velocity=self.rng.next_unit_circle(),
                target_velocity=self.rng.next_unit_circle(),
                speed=0.0,
                target_speed=self.rng.next_range(low, high),
                stress=0.1,
            )
            self._fish[fish.id] = fish
            added.append(fish.id)
        return added

    def remove(self, amount: int) -> List[int]:
        chosen = self.rng.sample_ids(self.ids(), amount)
        for fish_id in chosen:
            self.despawn(fish_id)
        return chosen

    def despawn(self, fish_id: int) -> bool:
        if self._fish.pop(fish_id, None) is None:
            return False
        heapq.heappush(self._free_ids, fish_id)
        return True

    def spawn_at(self, position: Vector2, velocity: Vector2, speed: float = 0.0) -> Fish:
        fish = Fish(
            id=self._allocate_id(),
            position=Vector2(position),
            velocity=Vector2(velocity),
            target_velocity=Vector2(velocity),
            speed=speed,
            target_speed=speed,
        )
        self._fish[fish.id] = fish
        return fish

    def clear(self) -> None:
        self._fish.clear()
        self._free_ids.clear()
        self._next_id = 0
        self.chunks.clear()

    def _allocate_id(self) -> int:
        if self._free_ids:
            return heapq.heappop(self._free_ids)
        fish_id = self._next_id
        self._next_id += 1
        return fish_id

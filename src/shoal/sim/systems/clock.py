from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.world import ShoalWorld


def calculate_delta_time(world: ShoalWorld) -> None:
    world.delta_time.calc(paused=world.config.paused)

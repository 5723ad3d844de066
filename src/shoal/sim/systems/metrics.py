from __future__ import annotations

from typing import TYPE_CHECKING

from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.world import ShoalWorld


def create_metrics(world: ShoalWorld, tick: int, duration_ms: float) -> TickMetrics:
    population = 0
    social = 0
    density_sum = 0
    max_density = 0
    speed_sum = 0.0
    stress_sum = 0.0
    for fish in world.fish:
        population += 1
        if fish.social:
            social += 1
        density_sum += fish.density
        if fish.density > max_density:
            max_density = fish.density
        speed_sum += fish.speed
        stress_sum += fish.stress
    return TickMetrics(
        tick=tick,
        population=population,
        social=social,
        average_density=0.0 if population == 0 else density_sum / population,
        max_density=max_density,
        average_speed=0.0 if population == 0 else speed_sum / population,
        average_stress=0.0 if population == 0 else stress_sum / population,
        occupied_cells=len(world.chunks),
        tick_duration_ms=duration_ms,
    )

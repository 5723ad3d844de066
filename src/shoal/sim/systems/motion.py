from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.world import ShoalWorld


def apply_motion(world: ShoalWorld) -> None:
    dt = world.delta_time.delta
    if dt <= 0.0:
        return
    for fish in world.fish:
        step = fish.speed * dt
        fish.position.update(
            fish.position.x + fish.velocity.x * step,
            fish.position.y + fish.velocity.y * step,
        )


def wrap_out_of_bound(world: ShoalWorld) -> None:
    width = float(world.config.width)
    height = float(world.config.height)
    for fish in world.fish:
        x, y = _wrap(fish.position.x, fish.position.y, width, height)
        fish.position.update(x, y)


def _wrap(x: float, y: float, width: float, height: float) -> tuple[float, float]:
    # Teleport to one unit inside the opposite edge.
    if x <= 0.0:
        x = width - 1.0
    elif x >= width:
        x = 1.0
    if y <= 0.0:
        y = height - 1.0
    elif y >= height:
        y = 1.0
    return x, y

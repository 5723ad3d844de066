from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.world import ShoalWorld


def load_chunks(world: ShoalWorld) -> None:
    config = world.config
    chunks = world.chunks
    chunks.clear()
    # Cells as wide as the largest radius keep every candidate within one ring.
    chunks.resize(config.attraction_radius, config.width, config.height)
    for fish in world.fish:
        chunks.store(fish.position, fish.id)

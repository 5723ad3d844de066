from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Mapping, Set

from pygame.math import Vector2

from ..algo.schooling import MAX_NEIGHBORS, SchoolingMechanism, SchoolingResult

if TYPE_CHECKING:
    from ..core.fish import Fish
    from ..core.world import ShoalWorld

IDLE_SPEED = 50.0
IDLE_STRESS = 0.1


def apply_swarming(world: ShoalWorld) -> None:
    # Every fish reads the others through this snapshot, never through
    # fields another fish may already have rewritten during this stage.
    others_positions: Dict[int, Vector2] = {}
    others_velocities: Dict[int, Vector2] = {}
    for fish in world.fish:
        others_positions[fish.id] = Vector2(fish.position)
        others_velocities[fish.id] = Vector2(fish.target_velocity)

    for fish in world.fish:
        neighbors = find_neighbors(world, fish)
        fish.density = len(neighbors)
        if fish.density == 0:
            fish.social = False
            fish.target_speed = IDLE_SPEED
            fish.stress = IDLE_STRESS
            continue
        fish.social = True
        result = decide(world, fish, neighbors, others_positions, others_velocities)
        if result is not None:
            fish.target_velocity = result.velocity
            fish.target_speed = result.speed
            fish.stress = result.stress


def find_neighbors(world: ShoalWorld, fish: Fish) -> Set[int]:
    neighbors = world.chunks.load_own_cell(fish.position)
    neighbors.discard(fish.id)
    if len(neighbors) < MAX_NEIGHBORS:
        neighbors.update(world.chunks.load_neighbor_cells(fish.position))
        neighbors.discard(fish.id)
    return neighbors


def decide(
    world: ShoalWorld,
    fish: Fish,
    neighbors: Set[int],
    others_positions: Mapping[int, Vector2],
    others_velocities: Mapping[int, Vector2],
) -> SchoolingResult | None:
    config = world.config
    positions = {i: others_positions[i] for i in neighbors if i in others_positions}
    velocities = {i: others_velocities[i] for i in neighbors if i in others_velocities}
    mechanism = SchoolingMechanism(
        position=fish.position,
        velocity=fish.target_velocity,
        speed=fish.target_speed,
        stress=fish.stress,
        others_positions=positions,
        others_velocities=velocities,
        avoidance_radius=config.avoidance_radius,
        alignment_radius=config.alignment_radius,
        attraction_radius=config.attraction_radius,
        alignment_fov=config.alignment_fov,
        attraction_fov=config.attraction_fov,
    )
    return mechanism.decide()

from __future__ import annotations

from typing import TYPE_CHECKING

from ..utils.math2d import _lerp_scalar, _lerp_vec, _safe_normalize

if TYPE_CHECKING:
    from ..core.fish import Fish
    from ..core.world import ShoalWorld


def apply_random_behavior(world: ShoalWorld) -> None:
    for fish in world.fish:
        if fish.velocity == fish.target_velocity:
            randomize_target(world, fish)


def randomize_target(world: ShoalWorld, fish: Fish) -> None:
    """Nudge an idle fish's targets toward fresh random values.

    Each field rolls its own Bernoulli trial; a hit blends the old target
    toward the random one by a random factor instead of replacing it.
    """

    config = world.config
    engine = world.engine
    rng = world.rng
    if rng.next_bool(config.direction_change_prob):
        blended = _lerp_vec(fish.target_velocity, rng.next_unit_circle(), rng.next_float())
        fish.target_velocity = _safe_normalize(blended)
    if rng.next_bool(config.speed_change_prob):
        random_speed = rng.next_range(*engine.idle_speed_range)
        fish.target_speed = _lerp_scalar(fish.target_speed, random_speed, rng.next_float())
    if rng.next_bool(config.stress_change_prob):
        random_stress = rng.next_range(*engine.idle_stress_range)
        fish.stress = _lerp_scalar(fish.stress, random_stress, rng.next_float())

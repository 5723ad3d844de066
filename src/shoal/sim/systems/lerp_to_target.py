from __future__ import annotations

from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..utils.math2d import _lerp_scalar, _lerp_vec, _safe_normalize

if TYPE_CHECKING:
    from ..core.world import ShoalWorld


def lerp_to_target(world: ShoalWorld) -> None:
    dt = world.delta_time.delta
    if dt <= 0.0:
        return
    rate = world.engine.smoothing_rate
    epsilon = world.engine.snap_epsilon
    for fish in world.fish:
        factor = min(1.0, fish.stress * dt * rate)
        fish.velocity = smooth_velocity(fish.velocity, fish.target_velocity, factor, epsilon)
        fish.speed = smooth_speed(fish.speed, fish.target_speed, factor, epsilon)


def smooth_velocity(velocity: Vector2, target: Vector2, factor: float, epsilon: float) -> Vector2:
    blended = _lerp_vec(velocity, target, factor)
    if blended.distance_to(target) < epsilon:
        return Vector2(target)
    if target.length_squared() <= 0.0:
        return blended
    return _safe_normalize(blended)


def smooth_speed(speed: float, target: float, factor: float, epsilon: float) -> float:
    blended = _lerp_scalar(speed, target, factor)
    if abs(target - blended) < epsilon:
        return target
    return blended

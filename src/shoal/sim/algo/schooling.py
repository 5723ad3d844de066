from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from pygame.math import Vector2

from ..utils.math2d import _safe_normalize, _within_fov

MAX_NEIGHBORS = 6


class Behavior(str, Enum):
    AVOIDANCE = "avoidance"
    ALIGNMENT = "alignment"
    ATTRACTION = "attraction"


@dataclass(slots=True)
class SchoolingResult:
    behavior: Behavior
    velocity: Vector2
    speed: float
    stress: float


_AVOIDANCE_STRESS = 0.95
_AVOIDANCE_SPEED = 100.0
_ALIGNMENT_STRESS = 0.33
_ALIGNMENT_SPEED = 75.0
_ATTRACTION_STRESS = 0.5
_ATTRACTION_SPEED = 100.0


def running_mean(mean: Vector2, value: Vector2, count: int) -> Vector2:
    """Fold ``value`` into ``mean`` as the ``count``-th sample."""

    return Vector2(mean.x + (value.x - mean.x) / count, mean.y + (value.y - mean.y) / count)


class SchoolingMechanism:
    """Pick one steering behavior for a fish from its neighbors.

    Avoidance beats alignment, which beats attraction; the first zone that
    holds a neighbor decides. Only the first ``MAX_NEIGHBORS`` neighbors found
    in a zone contribute to its average, in the iteration order of the
    neighbor mappings. Neighbor speed is not an input.
    """

    def __init__(
        self,
        position: Vector2,
        velocity: Vector2,
        speed: float,
        stress: float,
        others_positions: Mapping[int, Vector2],
        others_velocities: Mapping[int, Vector2],
        avoidance_radius: float,
        alignment_radius: float,
        attraction_radius: float,
        alignment_fov: Optional[float] = None,
        attraction_fov: Optional[float] = None,
    ) -> None:
        self.position = position
        self.velocity = velocity
        self.speed = speed
        self.stress = stress
        self.others_positions = others_positions
        self.others_velocities = others_velocities
        self.avoidance_radius = avoidance_radius
        self.alignment_radius = alignment_radius
        self.attraction_radius = attraction_radius
        self.alignment_fov = alignment_fov
        self.attraction_fov = attraction_fov

    def decide(self) -> Optional[SchoolingResult]:
        return self.avoidance() or self.alignment() or self.attraction()

    def avoidance(self) -> Optional[SchoolingResult]:
        position_to_avoid = Vector2()
        count = 0
        for other in self.others_positions.values():
            if count >= MAX_NEIGHBORS:
                break
            if self.position.distance_to(other) <= self.avoidance_radius:
                count += 1
                position_to_avoid = running_mean(position_to_avoid, other, count)
        if count == 0:
            return None
        return SchoolingResult(
            behavior=Behavior.AVOIDANCE,
            velocity=_safe_normalize(self.position - position_to_avoid),
            speed=_AVOIDANCE_SPEED,
            stress=_AVOIDANCE_STRESS,
        )

    def alignment(self) -> Optional[SchoolingResult]:
        heading = Vector2()
        count = 0
        for fish_id, other in self.others_positions.items():
            if count >= MAX_NEIGHBORS:
                break
            other_velocity = self.others_velocities.get(fish_id)
            if other_velocity is None:
                continue
            distance = self.position.distance_to(other)
            if distance <= self.avoidance_radius or distance > self.alignment_radius:
                continue
            if not _within_fov(self.velocity, other - self.position, self.alignment_fov):
                continue
            count += 1
            heading = running_mean(heading, other_velocity, count)
        if count == 0:
            return None
        return SchoolingResult(
            behavior=Behavior.ALIGNMENT,
            velocity=_safe_normalize(heading),
            speed=_ALIGNMENT_SPEED,
            stress=_ALIGNMENT_STRESS,
        )

    def attraction(self) -> Optional[SchoolingResult]:
        position_to_reach = Vector2()
        count = 0
        for other in self.others_positions.values():
            if count >= MAX_NEIGHBORS:
                break
            distance = self.position.distance_to(other)
            if distance <= self.avoidance_radius or distance <= self.alignment_radius:
                continue
            if distance > self.attraction_radius:
                continue
            if not _within_fov(self.velocity, other - self.position, self.attraction_fov):
                continue
            count += 1
            position_to_reach = running_mean(position_to_reach, other, count)
        if count == 0:
            return None
        return SchoolingResult(
            behavior=Behavior.ATTRACTION,
            velocity=_safe_normalize(position_to_reach - self.position),
            speed=_ATTRACTION_SPEED,
            stress=_ATTRACTION_STRESS,
        )

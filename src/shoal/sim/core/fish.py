from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector2


@dataclass(slots=True)
class Fish:
    id: int
    position: Vector2
    velocity: Vector2
    target_velocity: Vector2
    speed: float = 0.0
    target_speed: float = 0.0
    stress: float = 0.1
    density: int = 0
    social: bool = False


@dataclass(slots=True)
class FocusedFish:
    id: int
    position: list[float] = field(default_factory=list)
    velocity: list[float] = field(default_factory=list)
    speed: float = 0.0
    density: int = 0
    social: bool = False

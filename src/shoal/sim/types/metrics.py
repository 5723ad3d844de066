from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    social: int
    average_density: float
    max_density: int
    average_speed: float
    average_stress: float
    occupied_cells: int
    tick_duration_ms: float = 0.0

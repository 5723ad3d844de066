"""The fixed, ordered list of stages that make up one tick.

Order matters:

1. clock, 2. chunk rebuild, then (after the index is complete) 3. motion,
4. boundary wrap, 5. lerp to target, 6. idle randomization, 7. swarming.

Swarming writes target velocity, target speed and stress. Those writes are
first read by the lerp stage of the *next* tick, never within the same one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Tuple

from .clock import calculate_delta_time
from .lerp_to_target import lerp_to_target
from .load_chunks import load_chunks
from .motion import apply_motion, wrap_out_of_bound
from .random_behavior import apply_random_behavior
from .swarming import apply_swarming

if TYPE_CHECKING:
    from ..core.world import ShoalWorld

Stage = Callable[["ShoalWorld"], None]

TICK_STAGES: Tuple[Stage, ...] = (
    calculate_delta_time,
    load_chunks,
    apply_motion,
    wrap_out_of_bound,
    lerp_to_target,
    apply_random_behavior,
    apply_swarming,
)


def validate_stages(stages: Tuple[Stage, ...]) -> None:
    if not stages:
        raise ValueError("tick pipeline has no stages")
    for stage in stages:
        if not callable(stage):
            raise TypeError(f"tick stage {stage!r} is not callable")


def run_tick(world: ShoalWorld, stages: Tuple[Stage, ...] = TICK_STAGES) -> None:
    for stage in stages:
        stage(world)

from __future__ import annotations

from time import perf_counter
from typing import Callable, Optional


class DeltaTime:
    """Elapsed seconds between consecutive ticks.

    The value is only ever used as a scale factor. ``max_delta`` clamps long
    gaps (a stalled caller, a debugger pause) and ``fixed_step`` replaces the
    wall clock entirely for reproducible runs.
    """

    def __init__(
        self,
        clock: Callable[[], float] = perf_counter,
        max_delta: Optional[float] = None,
        fixed_step: Optional[float] = None,
    ) -> None:
        self._clock = clock
        self._max_delta = max_delta
        self._fixed_step = fixed_step
        self._last_time = clock()
        self._delta = 0.0

    @property
    def delta(self) -> float:
        return self._delta

    def calc(self, paused: bool = False) -> float:
        now = self._clock()
        if self._fixed_step is not None:
            delta = self._fixed_step
        else:
            delta = max(0.0, now - self._last_time)
        self._last_time = now
        if self._max_delta is not None and delta > self._max_delta:
            delta = self._max_delta
        self._delta = 0.0 if paused else delta
        return self._delta

    def restart(self) -> None:
        self._last_time = self._clock()
        self._delta = 0.0

    def __mul__(self, other: float) -> float:
        return self._delta * other

    __rmul__ = __mul__

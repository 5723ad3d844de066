from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(slots=True)
class Snapshot:
    """Per-tick export of every live fish; the lists are index aligned."""

    tick: int
    elapsed: float
    ids: List[int] = field(default_factory=list)
    positions: List[List[float]] = field(default_factory=list)
    velocities: List[List[float]] = field(default_factory=list)
    speeds: List[float] = field(default_factory=list)
    densities: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ids)

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)

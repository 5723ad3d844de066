from __future__ import annotations

import math
from typing import Dict, Set, Tuple

from pygame.math import Vector2

_NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
)


class Chunks:
    """Uniform grid hash from cell id to the fish ids inside that cell.

    The index is rebuilt from scratch every tick; ``store`` does not support
    moving an id that is already present.
    """

    def __init__(self, chunk_size: float, width: float = 0.0, height: float = 0.0, wrap: bool = True) -> None:
        self._chunks: Dict[int, Set[int]] = {}
        self._wrap = wrap
        self._chunk_size = chunk_size
        self._columns = 0
        self._rows = 0
        self.resize(chunk_size, width, height)

    @property
    def chunk_size(self) -> float:
        return self._chunk_size

    @property
    def grid_shape(self) -> Tuple[int, int]:
        return self._columns, self._rows

    def __len__(self) -> int:
        return len(self._chunks)

    def clear(self) -> None:
        self._chunks.clear()

    def resize(self, chunk_size: float, width: float | None = None, height: float | None = None) -> None:
        self._chunk_size = max(chunk_size, 1e-6)
        if width is not None:
            self._columns = max(1, int(math.ceil(width / self._chunk_size))) if width > 0 else 0
        if height is not None:
            self._rows = max(1, int(math.ceil(height / self._chunk_size))) if height > 0 else 0

    def store(self, position: Vector2, fish_id: int) -> None:
        bucket = self._chunks.setdefault(self.chunk_id_from_pos(position), set())
        assert fish_id not in bucket, f"Fish {fish_id} already exists in chunk"
        bucket.add(fish_id)

    def remove(self, position: Vector2, fish_id: int) -> None:
        chunk_id = self.chunk_id_from_pos(position)
        bucket = self._chunks.get(chunk_id)
        if bucket is None:
            return
        assert fish_id in bucket, f"Fish {fish_id} was not in chunk"
        bucket.discard(fish_id)
        if not bucket:
            del self._chunks[chunk_id]

    def load_own_cell(self, position: Vector2) -> Set[int]:
        return set(self._chunks.get(self.chunk_id_from_pos(position), ()))

    def load_neighbor_cells(self, position: Vector2) -> Set[int]:
        base_x, base_y = self.chunk_coords(position)
        center = self.chunk_id_from_coords(base_x, base_y)
        data: Set[int] = set()
        for dx, dy in _NEIGHBOR_OFFSETS:
            coords = self._neighbor_coords(base_x + dx, base_y + dy)
            if coords is None:
                continue
            chunk_id = self.chunk_id_from_coords(*coords)
            if chunk_id == center:
                continue
            bucket = self._chunks.get(chunk_id)
            if bucket:
                data.update(bucket)
        return data

    def load(self, position: Vector2) -> Set[int]:
        data = self.load_own_cell(position)
        data.update(self.load_neighbor_cells(position))
        return data

    def chunk_id_from_pos(self, position: Vector2) -> int:
        return self.chunk_id_from_coords(*self.chunk_coords(position))

    def chunk_coords(self, position: Vector2) -> Tuple[int, int]:
        return (
            max(0, int(math.floor(position.x / self._chunk_size))),
            max(0, int(math.floor(position.y / self._chunk_size))),
        )

    @staticmethod
    def chunk_id_from_coords(x: int, y: int) -> int:
        total = x + y
        return (total * (total + 1)) // 2 + y

    def _neighbor_coords(self, x: int, y: int) -> Tuple[int, int] | None:
        if self._wrap and self._columns > 0 and self._rows > 0:
            return x % self._columns, y % self._rows
        if x < 0 or y < 0:
            return None
        return x, y

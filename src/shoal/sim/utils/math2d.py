from __future__ import annotations

import math
from typing import Sequence

from pygame.math import Vector2


def vec_from(pair: Sequence[float]) -> Vector2:
    return Vector2(float(pair[0]), float(pair[1]))


def vec_to_list(vector: Vector2) -> list[float]:
    return [vector.x, vector.y]


def _safe_normalize(vector: Vector2) -> Vector2:
    return _safe_normalize_xy(vector.x, vector.y)


def _safe_normalize_xy(x: float, y: float) -> Vector2:
    # Zero in, zero out; pygame's normalize() raises on a zero vector.
    magnitude_sq = x * x + y * y
    if magnitude_sq <= 0.0:
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def _lerp_vec(start: Vector2, end: Vector2, t: float) -> Vector2:
    t = _clamp_value(t, 0.0, 1.0)
    return Vector2(start.x + (end.x - start.x) * t, start.y + (end.y - start.y) * t)


def _lerp_scalar(start: float, end: float, t: float) -> float:
    t = _clamp_value(t, 0.0, 1.0)
    return start + (end - start) * t


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _within_fov(heading: Vector2, offset: Vector2, fov_degrees: float | None) -> bool:
    """Return True when ``offset`` lies inside the cone of ``fov_degrees`` centered on ``heading``.

    ``None`` means a full circle. A zero heading or a zero offset is always visible.
    """

    if fov_degrees is None or fov_degrees >= 360.0:
        return True
    heading_len_sq = heading.length_squared()
    offset_len_sq = offset.length_squared()
    if heading_len_sq <= 0.0 or offset_len_sq <= 0.0:
        return True
    cos_angle = (heading.x * offset.x + heading.y * offset.y) / math.sqrt(heading_len_sq * offset_len_sq)
    angle = math.degrees(math.acos(_clamp_value(cos_angle, -1.0, 1.0)))
    return angle <= fov_degrees * 0.5

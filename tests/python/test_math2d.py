from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from shoal.sim.utils.math2d import (
    _lerp_scalar,
    _lerp_vec,
    _safe_normalize,
    _within_fov,
    vec_from,
    vec_to_list,
)


def test_safe_normalize_keeps_zero_vector():
    assert _safe_normalize(Vector2()) == Vector2()


def test_safe_normalize_returns_unit_length():
    result = _safe_normalize(Vector2(3.0, 4.0))
    assert result.x == approx(0.6)
    assert result.y == approx(0.8)


def test_lerp_clamps_factor():
    assert _lerp_vec(Vector2(0, 0), Vector2(10, 0), 2.0) == Vector2(10, 0)
    assert _lerp_vec(Vector2(0, 0), Vector2(10, 0), 0.5) == Vector2(5, 0)
    assert _lerp_scalar(0.0, 10.0, -1.0) == 0.0
    assert _lerp_scalar(0.0, 10.0, 0.25) == approx(2.5)


def test_vector_list_conversion():
    vector = vec_from([1, 2])
    assert isinstance(vector, Vector2)
    assert vec_to_list(vector) == [1.0, 2.0]


def test_within_fov():
    heading = Vector2(1.0, 0.0)
    assert _within_fov(heading, Vector2(-1.0, 0.0), None)
    assert _within_fov(heading, Vector2(-1.0, 0.0), 360.0)
    assert _within_fov(heading, Vector2(1.0, 0.5), 90.0)
    assert not _within_fov(heading, Vector2(0.0, 1.0), 90.0)
    assert not _within_fov(heading, Vector2(-1.0, 0.0), 180.0)
    assert _within_fov(heading, Vector2(), 10.0)
    assert _within_fov(Vector2(), Vector2(-1.0, 0.0), 10.0)

from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from shoal.sim.algo.schooling import Behavior, SchoolingMechanism, running_mean


def _mechanism(positions, velocities=None, **kwargs) -> SchoolingMechanism:
    others_positions = dict(enumerate(positions))
    if velocities is None:
        velocities = [Vector2(1.0, 0.0)] * len(positions)
    others_velocities = dict(enumerate(velocities))
    params = dict(
        position=Vector2(0.0, 0.0),
        velocity=Vector2(1.0, 0.0),
        speed=50.0,
        stress=0.1,
        others_positions=others_positions,
        others_velocities=others_velocities,
        avoidance_radius=10.0,
        alignment_radius=30.0,
        attraction_radius=50.0,
    )
    params.update(kwargs)
    return SchoolingMechanism(**params)


def test_running_mean_matches_arithmetic_mean():
    values = [Vector2(1.0, 2.0), Vector2(3.0, 4.0), Vector2(5.0, 0.0)]
    mean = Vector2()
    for count, value in enumerate(values, start=1):
        mean = running_mean(mean, value, count)
    assert mean.x == approx(3.0)
    assert mean.y == approx(2.0)


def test_avoidance_wins_over_attraction():
    result = _mechanism([Vector2(5.0, 0.0), Vector2(40.0, 0.0)]).decide()
    assert result is not None
    assert result.behavior is Behavior.AVOIDANCE
    assert result.velocity == Vector2(-1.0, 0.0)
    assert result.speed == 100.0
    assert result.stress == 0.95


def test_avoidance_includes_boundary_distance():
    result = _mechanism([Vector2(10.0, 0.0)]).decide()
    assert result.behavior is Behavior.AVOIDANCE


def test_alignment_follows_neighbor_heading():
    result = _mechanism([Vector2(20.0, 0.0)], [Vector2(0.0, 1.0)]).decide()
    assert result.behavior is Behavior.ALIGNMENT
    assert result.velocity == Vector2(0.0, 1.0)
    assert result.speed == 75.0
    assert result.stress == 0.33


def test_alignment_wins_over_attraction():
    result = _mechanism(
        [Vector2(30.0, 0.0), Vector2(45.0, 0.0)],
        [Vector2(0.0, -1.0), Vector2(1.0, 0.0)],
    ).decide()
    assert result.behavior is Behavior.ALIGNMENT
    assert result.velocity == Vector2(0.0, -1.0)


def test_attraction_heads_for_neighbor():
    result = _mechanism([Vector2(0.0, 40.0)]).decide()
    assert result.behavior is Behavior.ATTRACTION
    assert result.velocity.x == approx(0.0)
    assert result.velocity.y == approx(1.0)
    assert result.speed == 100.0
    assert result.stress == 0.5


def test_no_neighbor_in_range_gives_no_decision():
    assert _mechanism([Vector2(100.0, 0.0)]).decide() is None
    assert _mechanism([]).decide() is None


def test_only_first_six_neighbors_are_averaged():
    positions = [Vector2(0.0, 2.0)] * 6 + [Vector2(3.0, 0.0)] * 2
    result = _mechanism(positions).avoidance()
    assert result.velocity.x == approx(0.0)
    assert result.velocity.y == approx(-1.0)


def test_attraction_respects_field_of_view():
    behind = [Vector2(-40.0, 0.0)]
    assert _mechanism(behind, attraction_fov=90.0).decide() is None
    assert _mechanism(behind, attraction_fov=None).decide().behavior is Behavior.ATTRACTION


def test_alignment_respects_field_of_view():
    behind = [Vector2(-20.0, 0.0)]
    headings = [Vector2(0.0, 1.0)]
    assert _mechanism(behind, headings, alignment_fov=120.0).alignment() is None
    ahead = [Vector2(20.0, 0.0)]
    assert _mechanism(ahead, headings, alignment_fov=120.0).alignment() is not None

from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from shoal.sim.systems.clock import calculate_delta_time
from shoal.sim.systems.lerp_to_target import lerp_to_target, smooth_speed, smooth_velocity
from shoal.sim.systems.load_chunks import load_chunks
from shoal.sim.systems.motion import apply_motion, wrap_out_of_bound
from shoal.sim.systems.random_behavior import apply_random_behavior
from shoal.sim.systems.swarming import IDLE_SPEED, IDLE_STRESS, apply_swarming


def test_motion_moves_along_velocity(make_world):
    world = make_world(time_step=0.1)
    fish = world.spawn_at(Vector2(100.0, 50.0), Vector2(1.0, 0.0), speed=10.0)
    calculate_delta_time(world)
    apply_motion(world)
    assert fish.position.x == approx(101.0)
    assert fish.position.y == approx(50.0)


def test_paused_world_does_not_move(make_world):
    world = make_world(time_step=0.1, paused=True)
    fish = world.spawn_at(Vector2(100.0, 50.0), Vector2(1.0, 0.0), speed=10.0)
    calculate_delta_time(world)
    assert world.delta_time.delta == 0.0
    apply_motion(world)
    assert fish.position == Vector2(100.0, 50.0)


def test_wrap_out_of_bound_teleports_inside(make_world):
    world = make_world()
    left = world.spawn_at(Vector2(-0.5, 50.0), Vector2(1.0, 0.0))
    corner = world.spawn_at(Vector2(200.0, 103.0), Vector2(1.0, 0.0))
    inside = world.spawn_at(Vector2(20.0, 30.0), Vector2(1.0, 0.0))
    wrap_out_of_bound(world)
    assert left.position == Vector2(199.0, 50.0)
    assert corner.position == Vector2(1.0, 1.0)
    assert inside.position == Vector2(20.0, 30.0)
    for fish in world:
        assert 0.0 < fish.position.x < 200.0
        assert 0.0 < fish.position.y < 100.0


def test_lerp_blends_toward_target(make_world):
    world = make_world(time_step=0.1)
    fish = world.spawn_at(Vector2(50.0, 50.0), Vector2(1.0, 0.0))
    fish.target_velocity = Vector2(0.0, 1.0)
    fish.target_speed = 50.0
    fish.stress = 0.1
    calculate_delta_time(world)
    lerp_to_target(world)
    # factor = stress * dt * rate = 0.1
    expected = Vector2(0.9, 0.1).normalize()
    assert fish.velocity.x == approx(expected.x)
    assert fish.velocity.y == approx(expected.y)
    assert fish.velocity.length() == approx(1.0)
    assert fish.speed == approx(5.0)


def test_lerp_factor_is_capped_at_one(make_world):
    world = make_world(time_step=0.25)
    fish = world.spawn_at(Vector2(50.0, 50.0), Vector2(1.0, 0.0))
    fish.target_velocity = Vector2(0.0, -1.0)
    fish.target_speed = 100.0
    fish.stress = 0.95
    calculate_delta_time(world)
    lerp_to_target(world)
    assert fish.velocity == Vector2(0.0, -1.0)
    assert fish.speed == 100.0


def test_smoothing_snaps_within_epsilon():
    assert smooth_speed(49.9995, 50.0, 0.1, 1e-3) == 50.0
    target = Vector2(0.0, 1.0)
    assert smooth_velocity(Vector2(0.0, 1.0), target, 0.1, 1e-3) == target
    assert smooth_velocity(Vector2(1.0, 0.0), Vector2(), 0.5, 1e-3) == Vector2(0.5, 0.0)


def test_random_behavior_only_touches_settled_fish(make_world):
    world = make_world(direction_change_prob=1.0, speed_change_prob=1.0, stress_change_prob=1.0)
    turning = world.spawn_at(Vector2(50.0, 50.0), Vector2(1.0, 0.0), speed=50.0)
    turning.target_velocity = Vector2(0.0, 1.0)
    settled = world.spawn_at(Vector2(80.0, 50.0), Vector2(1.0, 0.0), speed=50.0)
    settled.stress = 0.3

    apply_random_behavior(world)

    assert turning.target_velocity == Vector2(0.0, 1.0)
    assert turning.target_speed == 50.0
    assert turning.stress == 0.1
    assert settled.target_velocity.length() == approx(1.0)
    assert 10.0 <= settled.target_speed <= 100.0
    assert 0.1 <= settled.stress <= 0.5


def test_random_behavior_with_zero_probabilities_is_a_no_op(make_world):
    world = make_world(direction_change_prob=0.0, speed_change_prob=0.0, stress_change_prob=0.0)
    fish = world.spawn_at(Vector2(50.0, 50.0), Vector2(1.0, 0.0), speed=40.0)
    apply_random_behavior(world)
    assert fish.target_velocity == Vector2(1.0, 0.0)
    assert fish.target_speed == 40.0
    assert fish.stress == 0.1


def test_lone_fish_goes_idle(make_world):
    world = make_world()
    fish = world.spawn_at(Vector2(100.0, 50.0), Vector2(1.0, 0.0), speed=90.0)
    fish.stress = 0.7
    fish.social = True
    load_chunks(world)
    apply_swarming(world)
    assert fish.density == 0
    assert fish.social is False
    assert fish.target_speed == IDLE_SPEED
    assert fish.stress == IDLE_STRESS


def test_close_pair_avoids_each_other(make_world):
    world = make_world()
    left = world.spawn_at(Vector2(100.0, 50.0), Vector2(0.0, 1.0))
    right = world.spawn_at(Vector2(105.0, 50.0), Vector2(0.0, 1.0))
    load_chunks(world)
    apply_swarming(world)
    assert left.density == 1 and right.density == 1
    assert left.social and right.social
    assert left.target_velocity == Vector2(-1.0, 0.0)
    assert right.target_velocity == Vector2(1.0, 0.0)
    assert left.target_speed == 100.0
    assert right.stress == 0.95


def test_swarming_reads_start_of_stage_headings(make_world):
    world = make_world()
    first = world.spawn_at(Vector2(100.0, 50.0), Vector2(0.0, 1.0))
    second = world.spawn_at(Vector2(120.0, 50.0), Vector2(1.0, 0.0))
    load_chunks(world)
    apply_swarming(world)
    assert first.target_velocity == Vector2(1.0, 0.0)
    # The first fish was updated earlier in the stage; its old heading is used.
    assert second.target_velocity == Vector2(0.0, 1.0)
    assert first.target_speed == 75.0
    assert second.stress == 0.33

from __future__ import annotations

import pytest
from pygame.math import Vector2
from pytest import approx

from particlelife.sim.core.region import Region
from particlelife.sim.systems.motion import (
    advance_position,
    apply_out_of_bounds_policy,
    clamp_into,
    integrate_velocity,
    reflect_velocity,
    wrap_into,
)


def test_integrate_velocity_damps_then_adds_scaled_force():
    velocity = Vector2(10.0, -4.0)

    integrate_velocity(velocity, 0.5, -0.25, threshold=100.0, damping=0.9, dt=0.1)

    assert velocity.x == approx(0.9 * 10.0 + 0.5 * 100.0 * 0.1)
    assert velocity.y == approx(0.9 * -4.0 - 0.25 * 100.0 * 0.1)


def test_zero_damping_discards_previous_velocity():
    velocity = Vector2(50.0, 50.0)

    integrate_velocity(velocity, 0.0, 0.0, threshold=100.0, damping=0.0, dt=0.1)

    assert velocity == Vector2(0.0, 0.0)


def test_reflect_flips_each_axis_near_its_walls():
    velocity = Vector2(-3.0, 2.0)

    assert reflect_velocity(Vector2(8.0, 400.0), velocity, 1200.0, 800.0, radius=5.0, margin=5.0)
    assert velocity == Vector2(3.0, 2.0)

    velocity = Vector2(3.0, 2.0)
    assert reflect_velocity(Vector2(600.0, 795.0), velocity, 1200.0, 800.0, radius=5.0, margin=5.0)
    assert velocity == Vector2(3.0, -2.0)

    velocity = Vector2(3.0, 2.0)
    assert reflect_velocity(Vector2(1191.0, 2.0), velocity, 1200.0, 800.0, radius=5.0, margin=5.0)
    assert velocity == Vector2(-3.0, -2.0)


def test_reflect_leaves_interior_particles_alone():
    velocity = Vector2(-3.0, 2.0)

    assert not reflect_velocity(Vector2(600.0, 400.0), velocity, 1200.0, 800.0, radius=5.0, margin=5.0)
    assert velocity == Vector2(-3.0, 2.0)


def test_advance_position_moves_by_velocity_times_dt():
    position = Vector2(10.0, 20.0)

    advance_position(position, Vector2(4.0, -8.0), 0.25)

    assert position == Vector2(11.0, 18.0)


def test_clamp_and_wrap_bring_positions_back_inside():
    bounds = Region(5.0, 5.0, 195.0, 95.0)

    clamped = Vector2(250.0, -10.0)
    clamp_into(clamped, bounds)
    assert clamped == Vector2(200.0, 5.0)

    wrapped = Vector2(210.0, 2.0)
    wrap_into(wrapped, bounds)
    assert wrapped.x == approx(15.0)
    assert wrapped.y == approx(97.0)
    assert bounds.contains(wrapped.x, wrapped.y)


def test_out_of_bounds_policy_reports_whether_particle_stays():
    bounds = Region(0.0, 0.0, 100.0, 100.0)

    dropped = Vector2(120.0, 50.0)
    assert not apply_out_of_bounds_policy(dropped, bounds, "drop")
    assert dropped == Vector2(120.0, 50.0)

    clamped = Vector2(120.0, 50.0)
    assert apply_out_of_bounds_policy(clamped, bounds, "clamp")
    assert clamped == Vector2(100.0, 50.0)

    wrapped = Vector2(120.0, 50.0)
    assert apply_out_of_bounds_policy(wrapped, bounds, "wrap")
    assert wrapped.x == approx(20.0)

    with pytest.raises(ValueError):
        apply_out_of_bounds_policy(Vector2(120.0, 50.0), bounds, "bounce")

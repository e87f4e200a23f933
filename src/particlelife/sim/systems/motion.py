from __future__ import annotations

from pygame.math import Vector2

from ..core.region import Region
from ..utils.math2d import _clamp_value


def integrate_velocity(
    velocity: Vector2, force_x: float, force_y: float, threshold: float, damping: float, dt: float
) -> None:
    # Force is rescaled by the threshold so retuning it does not change overall energy.
    accel_x = force_x * threshold
    accel_y = force_y * threshold
    velocity.update(damping * velocity.x + accel_x * dt, damping * velocity.y + accel_y * dt)


def reflect_velocity(
    position: Vector2, velocity: Vector2, width: float, height: float, radius: float, margin: float
) -> bool:
    """Negate the velocity component for each wall the pre-move position is within reach of."""
    reflected = False
    reach = radius + margin
    if position.x < reach or position.x > width - reach:
        velocity.x = -velocity.x
        reflected = True
    if position.y < reach or position.y > height - reach:
        velocity.y = -velocity.y
        reflected = True
    return reflected


def advance_position(position: Vector2, velocity: Vector2, dt: float) -> None:
    position.update(position.x + velocity.x * dt, position.y + velocity.y * dt)


def clamp_into(position: Vector2, bounds: Region) -> None:
    position.update(
        _clamp_value(position.x, bounds.x, bounds.right),
        _clamp_value(position.y, bounds.y, bounds.bottom),
    )


def wrap_into(position: Vector2, bounds: Region) -> None:
    position.update(
        bounds.x + (position.x - bounds.x) % bounds.width,
        bounds.y + (position.y - bounds.y) % bounds.height,
    )


def apply_out_of_bounds_policy(position: Vector2, bounds: Region, policy: str) -> bool:
    """Bring a rejected position back inside ``bounds``; returns False when the particle is to be dropped."""
    if policy == "drop":
        return False
    if policy == "clamp":
        clamp_into(position, bounds)
    elif policy == "wrap":
        wrap_into(position, bounds)
    else:
        raise ValueError(f"unknown out-of-bounds policy {policy!r}")
    return True

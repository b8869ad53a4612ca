from __future__ import annotations

import math

from pygame.math import Vector2

MIN_DISTANCE = 0.001


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _distance_xy(dx: float, dy: float) -> float:
    return math.sqrt(dx * dx + dy * dy)


def _floored_distance(a: Vector2, b: Vector2) -> tuple[float, float, float]:
    """Offset a-b and its length, floored so callers can divide by it."""
    dx = a.x - b.x
    dy = a.y - b.y
    return dx, dy, max(_distance_xy(dx, dy), MIN_DISTANCE)


def _add_clamped(velocity: Vector2, dx: float, dy: float, limit: float) -> None:
    """Add (dx, dy) to velocity with each component held in [-limit, limit]."""
    velocity.x = _clamp_value(velocity.x + dx, -limit, limit)
    velocity.y = _clamp_value(velocity.y + dy, -limit, limit)


def _clamp_position(position: Vector2, radius: float, width: float, height: float) -> None:
    position.x = _clamp_value(position.x, radius, width - radius)
    position.y = _clamp_value(position.y, radius, height - radius)

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.entity import Entity
from ..utils.math2d import _clamp_position, _clamp_value

if TYPE_CHECKING:
    from ..core.world import World


def apply_edge_force(world: World, entity: Entity) -> None:
    forces = world._config.forces
    position = entity.position
    velocity = entity.velocity
    margin = forces.edge_margin
    push = forces.edge_force
    max_speed = forces.max_speed
    if position.x < margin:
        velocity.x = min(velocity.x + push, max_speed)
    elif position.x > world._width - margin:
        velocity.x = max(velocity.x - push, -max_speed)
    if position.y < margin:
        velocity.y = min(velocity.y + push, max_speed)
    elif position.y > world._height - margin:
        velocity.y = max(velocity.y - push, -max_speed)


def renormalize_speed(world: World, entity: Entity) -> None:
    """Nudge slow entities toward the target speed and cap fast ones at max speed."""
    forces = world._config.forces
    velocity = entity.velocity
    max_speed = forces.max_speed
    speed = max(0.0, velocity.length())
    if speed < forces.target_speed:
        scale = 1.0 + forces.speed_adjust_factor
    elif speed > max_speed:
        scale = max_speed / speed
    else:
        return
    velocity.x = _clamp_value(velocity.x * scale, -max_speed, max_speed)
    velocity.y = _clamp_value(velocity.y * scale, -max_speed, max_speed)


def record_trail(world: World, entity: Entity) -> None:
    trail = entity.trail
    trail.appendleft((entity.position.x, entity.position.y))
    limit = max(0, world._config.history.trail_length)
    while len(trail) > limit:
        trail.pop()


def update_entity(world: World, entity: Entity) -> None:
    radius = world._config.entity_radius
    width = world._width
    height = world._height
    entity.position += entity.velocity
    _clamp_position(entity.position, radius, width, height)
    apply_edge_force(world, entity)
    _clamp_position(entity.position, radius, width, height)
    renormalize_speed(world, entity)
    entity.age = _clamp_value(entity.age + 1, 0.0, entity.max_age)
    record_trail(world, entity)


def update_positions(world: World) -> None:
    for entity in world._entities:
        update_entity(world, entity)

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..core.entity import Entity
from ..utils.math2d import _add_clamped, _clamp_position, _floored_distance
from . import combat, groups, lifecycle

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


def apply_same_group_forces(world: World, e1: Entity, e2: Entity, dist: float, nx: float, ny: float) -> None:
    # (nx, ny) points from e2 toward e1
    config = world._config
    forces = config.forces
    comfort = config.comfort_distance
    limit = forces.max_speed
    if comfort < dist < forces.max_attract_dist:
        pull = forces.same_type_attraction
        _add_clamped(e1.velocity, -nx * pull, -ny * pull, limit)
        _add_clamped(e2.velocity, nx * pull, ny * pull, limit)
    elif dist < comfort:
        push = forces.repulsion_force
        _add_clamped(e1.velocity, nx * push, ny * push, limit)
        _add_clamped(e2.velocity, -nx * push, -ny * push, limit)


def apply_different_group_forces(world: World, e1: Entity, e2: Entity, dist: float, nx: float, ny: float) -> None:
    forces = world._config.forces
    if dist < forces.max_attract_dist:
        pull = forces.attraction_force
        limit = forces.max_speed
        _add_clamped(e1.velocity, -nx * pull, -ny * pull, limit)
        _add_clamped(e2.velocity, nx * pull, ny * pull, limit)


def resolve_overlap(world: World, e1: Entity, e2: Entity, dist: float, nx: float, ny: float) -> None:
    config = world._config
    min_dist = config.min_distance
    if dist >= min_dist:
        return
    # capped at half a contact distance per frame so deep overlaps ease apart
    overlap = min(min_dist - dist, min_dist * 0.5)
    correction_x = nx * overlap / 2
    correction_y = ny * overlap / 2
    e1.position.x += correction_x
    e1.position.y += correction_y
    e2.position.x -= correction_x
    e2.position.y -= correction_y
    _clamp_position(e1.position, config.entity_radius, world._width, world._height)
    _clamp_position(e2.position, config.entity_radius, world._width, world._height)


def apply_contact_damage(world: World, e1: Entity, e2: Entity) -> bool:
    combat_config = world._config.combat
    frame = world._frame_count
    cooldown = combat_config.damage_cooldown_frames
    if frame <= e1.last_damage_frame + cooldown or frame <= e2.last_damage_frame + cooldown:
        return False
    damage = min(e1.max_age * combat_config.damage_percent, e1.max_age * combat_config.max_damage_percent)
    e1.age = min(e1.max_age, e1.age + damage)
    e2.age = min(e2.max_age, e2.age + damage)
    e1.last_damage_frame = frame
    e2.last_damage_frame = frame
    world._damage_events += 1
    return True


def handle_same_type_contact(world: World, e1: Entity, e2: Entity) -> None:
    if e1.group_id == e2.group_id:
        return
    apply_contact_damage(world, e1, e2)
    groups.try_merge_on_contact(world, e1, e2)


def resolve_collisions(world: World) -> None:
    """Pairwise forces, overlap correction and combat over ascending (i, j) pairs.

    Each pair sees every mutation made by the pairs before it. Dead entities are
    replaced at their index once the sweep is complete.
    """
    entities = world._entities
    contact = world._config.min_distance
    count = len(entities)
    for i in range(count):
        for j in range(i + 1, count):
            e1 = entities[i]
            e2 = entities[j]
            dx, dy, dist = _floored_distance(e1.position, e2.position)
            if e1.kind == e2.kind:
                nx = dx / dist
                ny = dy / dist
                if e1.group_id == e2.group_id:
                    apply_same_group_forces(world, e1, e2, dist, nx, ny)
                else:
                    apply_different_group_forces(world, e1, e2, dist, nx, ny)
                resolve_overlap(world, e1, e2, dist, nx, ny)
            if dist < contact:
                if e1.kind == e2.kind:
                    handle_same_type_contact(world, e1, e2)
                combat.handle_interaction(world, e1, e2)
    lifecycle.replace_dead_entities(world)

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..core.entity import Entity, TYPES
from . import effects, groups

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


def spawn_entity(world: World) -> Entity:
    """Create a fresh entity at a random spot. The caller places it in the list."""
    config = world._config
    radius = config.entity_radius
    rng = world._rng
    x = rng.next_range(radius, world._width - radius)
    y = rng.next_range(radius, world._height - radius)
    velocity = rng.next_unit_circle() * config.forces.initial_speed
    kind = rng.choice(TYPES)
    group_id = groups.pick_spawn_group(world, kind)
    entity = Entity(
        id=world._next_id,
        kind=kind,
        group_id=group_id,
        position=Vector2(x, y),
        velocity=velocity,
        max_age=config.max_age_frames,
        trail=deque(maxlen=max(0, config.history.trail_length)),
    )
    world._next_id += 1
    return entity


def bootstrap_population(world: World) -> None:
    for _ in range(world._config.initial_entity_count):
        entity = spawn_entity(world)
        world._entities.append(entity)
        effects.emit_spawn(world, entity)


def replace_dead_entities(world: World) -> int:
    """Swap every dead entity for a new spawn at the same index."""
    entities = world._entities
    replaced = 0
    for index, entity in enumerate(entities):
        if not entity.is_dead():
            continue
        effects.emit_death(world, entity)
        newcomer = spawn_entity(world)
        effects.emit_spawn(world, newcomer)
        entities[index] = newcomer
        replaced += 1
        logger.debug(
            "replaced %s #%d with %s #%d (group %d)",
            entity.kind.value,
            entity.id,
            newcomer.kind.value,
            newcomer.id,
            newcomer.group_id,
        )
    world._deaths += replaced
    return replaced

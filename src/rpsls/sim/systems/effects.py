from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from ..core.entity import Entity
from ..types.events import EffectEvent, EffectKind

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)

GOLDEN_ANGLE_STEP = 137


def group_hue(group_id: int) -> int:
    return (group_id * GOLDEN_ANGLE_STEP) % 360


def group_color(group_id: int) -> str:
    return f"hsl({group_hue(group_id)}, 80%, 50%)"


def emit(
    world: World,
    kind: EffectKind,
    x: float,
    y: float,
    color: str,
    secondary_color: Optional[str] = None,
    entity_id: Optional[int] = None,
) -> EffectEvent:
    event = EffectEvent(
        kind=kind,
        frame=world._frame_count,
        x=x,
        y=y,
        color=color,
        secondary_color=secondary_color,
        entity_id=entity_id,
    )
    world._events.append(event)
    for listener in list(world._listeners):
        listener(event)
    return event


def emit_spawn(world: World, entity: Entity) -> EffectEvent:
    return emit(
        world, EffectKind.SPAWN, entity.position.x, entity.position.y, group_color(entity.group_id), entity_id=entity.id
    )


def emit_death(world: World, entity: Entity) -> EffectEvent:
    return emit(
        world, EffectKind.DEATH, entity.position.x, entity.position.y, group_color(entity.group_id), entity_id=entity.id
    )


def emit_collision_spark(world: World, hunter: Entity, prey: Entity) -> EffectEvent:
    return emit(
        world,
        EffectKind.COLLISION_SPARK,
        (hunter.position.x + prey.position.x) / 2,
        (hunter.position.y + prey.position.y) / 2,
        group_color(hunter.group_id),
        secondary_color=group_color(prey.group_id),
        entity_id=prey.id,
    )


def emit_conversion(world: World, entity: Entity, from_color: str) -> EffectEvent:
    return emit(
        world,
        EffectKind.CONVERSION,
        entity.position.x,
        entity.position.y,
        from_color,
        secondary_color=group_color(entity.group_id),
        entity_id=entity.id,
    )

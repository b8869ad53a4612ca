from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..core.entity import Entity, beats
from . import effects, groups

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


def handle_interaction(world: World, e1: Entity, e2: Entity) -> None:
    if beats(e1.kind, e2.kind):
        process_hunter_prey(world, e1, e2)
    elif beats(e2.kind, e1.kind):
        process_hunter_prey(world, e2, e1)


def process_hunter_prey(world: World, hunter: Entity, prey: Entity) -> bool:
    """Resolve one RPSLS encounter. Returns True when the prey was absorbed.

    If the hunter's group has room for the prey's remaining life, that life is
    shared out evenly as lowered age and the prey dies. Otherwise the prey
    defects to the hunter's type and group, keeping its age.
    """
    effects.emit_collision_spark(world, hunter, prey)
    prey_health = prey.health()
    members = groups.group_members(world, hunter.kind, hunter.group_id)
    group_health = sum(member.health() for member in members)
    max_group_health = float(len(members))

    if group_health + prey_health <= max_group_health:
        health_gain = max(0.0, prey.max_age - prey.age)
        per_member = health_gain / len(members)
        for member in members:
            member.age = max(0.0, member.age - per_member)
        effects.emit_death(world, prey)
        prey.age = prey.max_age
        world._absorptions += 1
        logger.debug(
            "%s #%d absorbed %s #%d into group %d",
            hunter.kind.value,
            hunter.id,
            prey.kind.value,
            prey.id,
            hunter.group_id,
        )
        return True

    from_color = effects.group_color(prey.group_id)
    logger.debug("%s #%d converted to %s group %d", prey.kind.value, prey.id, hunter.kind.value, hunter.group_id)
    prey.kind = hunter.kind
    prey.group_id = hunter.group_id
    effects.emit_conversion(world, prey, from_color)
    world._conversions += 1
    return False

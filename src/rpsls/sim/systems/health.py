from __future__ import annotations

from typing import TYPE_CHECKING

from ..utils.math2d import _clamp_value, _floored_distance

if TYPE_CHECKING:
    from ..core.world import World


def redistribute_health(world: World) -> None:
    """Ease each entity's age toward the mean age of nearby group mates."""
    radius = world._config.forces.align_radius
    factor = world._config.combat.redistribution_factor
    entities = world._entities
    count = len(entities)
    for i in range(count):
        e1 = entities[i]
        age_sum = 0.0
        peers = 0
        for j in range(count):
            if i == j:
                continue
            e2 = entities[j]
            if e1.kind != e2.kind or e1.group_id != e2.group_id:
                continue
            _, _, dist = _floored_distance(e1.position, e2.position)
            if dist < radius:
                age_sum += e2.age
                peers += 1
        if peers > 0:
            avg_age = age_sum / peers
            e1.age = _clamp_value(e1.age + (avg_age - e1.age) * factor, 0.0, e1.max_age)

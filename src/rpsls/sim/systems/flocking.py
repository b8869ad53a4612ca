from __future__ import annotations

from typing import TYPE_CHECKING

from ..utils.math2d import _floored_distance

if TYPE_CHECKING:
    from ..core.world import World


def apply_alignment_and_attraction(world: World) -> None:
    """Align each entity with its group and pull it toward other groups of its type.

    Velocities are updated in place while scanning, so an entity visited later
    averages over neighbours already adjusted this frame. Index order matters.
    """
    forces = world._config.forces
    align_radius = forces.align_radius
    attract_dist = forces.max_attract_dist
    attraction = forces.attraction_force
    align_factor = forces.align_factor
    entities = world._entities
    count = len(entities)
    for i in range(count):
        e1 = entities[i]
        avg_vx = 0.0
        avg_vy = 0.0
        neighbors = 0
        for j in range(count):
            if i == j:
                continue
            e2 = entities[j]
            if e1.kind != e2.kind:
                continue
            dx, dy, dist = _floored_distance(e2.position, e1.position)
            if e1.group_id == e2.group_id:
                if dist < align_radius:
                    avg_vx += e2.velocity.x
                    avg_vy += e2.velocity.y
                    neighbors += 1
            elif dist < attract_dist:
                e1.velocity.x += dx / dist * attraction
                e1.velocity.y += dy / dist * attraction
        if neighbors > 0:
            avg_vx /= neighbors
            avg_vy /= neighbors
            e1.velocity.x += (avg_vx - e1.velocity.x) * align_factor
            e1.velocity.y += (avg_vy - e1.velocity.y) * align_factor

from __future__ import annotations

import logging
import math
from typing import Dict, List, Tuple, TYPE_CHECKING

from ..core.entity import Entity, EntityType

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


def allocate_group_id(world: World) -> int:
    group_id = world._next_group_id
    world._next_group_id += 1
    return group_id


def group_members(world: World, kind: EntityType, group_id: int) -> List[Entity]:
    return [entity for entity in world._entities if entity.kind == kind and entity.group_id == group_id]


def group_size(world: World, kind: EntityType, group_id: int) -> int:
    return sum(1 for entity in world._entities if entity.kind == kind and entity.group_id == group_id)


def group_sizes(world: World) -> Dict[Tuple[EntityType, int], int]:
    sizes: Dict[Tuple[EntityType, int], int] = {}
    for entity in world._entities:
        key = entity.group_key()
        sizes[key] = sizes.get(key, 0) + 1
    return sizes


def split_oversized_groups(world: World) -> int:
    """Halve every group above the size cap; the leading half moves to a fresh id."""
    max_size = world._config.groups.max_group_size
    by_group: Dict[int, List[Entity]] = {}
    for entity in world._entities:
        by_group.setdefault(entity.group_id, []).append(entity)
    splits = 0
    for group_id in sorted(by_group):
        members = by_group[group_id]
        if len(members) <= max_size:
            continue
        half = math.ceil(len(members) / 2)
        new_group = allocate_group_id(world)
        for member in members[:half]:
            member.group_id = new_group
        splits += 1
        logger.debug("split group %d (%d members) -> %d", group_id, len(members), new_group)
    return splits


def merge_groups(world: World, kind: EntityType, from_group: int, into_group: int) -> int:
    moved = 0
    for entity in world._entities:
        if entity.kind == kind and entity.group_id == from_group:
            entity.group_id = into_group
            moved += 1
    return moved


def try_merge_on_contact(world: World, first: Entity, second: Entity) -> bool:
    """Absorb second's whole group into first's when the result fits under the cap."""
    if first.kind != second.kind or first.group_id == second.group_id:
        return False
    first_size = group_size(world, first.kind, first.group_id)
    second_size = group_size(world, second.kind, second.group_id)
    if first_size + second_size > world._config.groups.max_group_size:
        return False
    old_group = second.group_id
    moved = merge_groups(world, first.kind, old_group, first.group_id)
    logger.debug("merged %s group %d into %d (%d moved)", first.kind.value, old_group, first.group_id, moved)
    return True


def pick_spawn_group(world: World, kind: EntityType) -> int:
    counts: Dict[int, int] = {}
    for entity in world._entities:
        if entity.kind == kind:
            counts[entity.group_id] = counts.get(entity.group_id, 0) + 1
    threshold = world._config.groups.min_group_size_for_spawn
    for group_id in sorted(counts):
        if counts[group_id] < threshold:
            return group_id
    return allocate_group_id(world)

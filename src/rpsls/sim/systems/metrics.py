from __future__ import annotations

from typing import Dict, Iterable, TYPE_CHECKING

from ..core.entity import Entity, EntityType, TYPES
from ..types.metrics import TickMetrics, TypeStats
from . import groups

if TYPE_CHECKING:
    from ..core.world import World


def compute_stats(entities: Iterable[Entity]) -> Dict[EntityType, TypeStats]:
    stats = {kind: TypeStats() for kind in TYPES}
    for entity in entities:
        if entity is None or entity.age < 0 or entity.max_age <= 0:
            continue
        bucket = stats[entity.kind]
        bucket.count += 1
        bucket.total_health = max(0.0, bucket.total_health + entity.health())
    for bucket in stats.values():
        if bucket.count > 0:
            bucket.avg_health = max(0.0, min(1.0, bucket.total_health / bucket.count))
        else:
            bucket.avg_health = 0.0
    return stats


def create_metrics(world: World, stats: Dict[EntityType, TypeStats], duration_ms: float) -> TickMetrics:
    sizes = groups.group_sizes(world)
    return TickMetrics(
        frame=world._frame_count,
        time=world.time,
        population=len(world._entities),
        groups=len(sizes),
        largest_group=max(sizes.values(), default=0),
        conversions=world._conversions,
        absorptions=world._absorptions,
        deaths=world._deaths,
        damage_events=world._damage_events,
        by_type={kind.value: TypeStats(bucket.count, bucket.total_health, bucket.avg_health) for kind, bucket in stats.items()},
        tick_duration_ms=duration_ms,
    )

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(slots=True)
class TypeStats:
    count: int = 0
    total_health: float = 0.0
    avg_health: float = 0.0

    @property
    def weighted(self) -> float:
        """Population weighted by average health; the value the graph plots."""
        return max(0.0, self.count * self.avg_health)


@dataclass(slots=True)
class TickMetrics:
    frame: int
    time: float
    population: int
    groups: int
    largest_group: int
    conversions: int
    absorptions: int
    deaths: int
    damage_events: int
    by_type: Dict[str, TypeStats] = field(default_factory=dict)
    tick_duration_ms: float = 0.0

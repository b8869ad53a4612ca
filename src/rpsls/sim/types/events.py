from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EffectKind(str, Enum):
    SPAWN = "spawn"
    DEATH = "death"
    COLLISION_SPARK = "collision_spark"
    CONVERSION = "conversion"


@dataclass(frozen=True, slots=True)
class EffectEvent:
    kind: EffectKind
    frame: int
    x: float
    y: float
    color: str
    secondary_color: Optional[str] = None
    entity_id: Optional[int] = None

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, FrozenSet, Tuple

from pygame.math import Vector2


class EntityType(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"
    LIZARD = "lizard"
    SPOCK = "spock"


TYPES: Tuple[EntityType, ...] = tuple(EntityType)

BEATS: Dict[EntityType, FrozenSet[EntityType]] = {
    EntityType.ROCK: frozenset({EntityType.SCISSORS, EntityType.LIZARD}),
    EntityType.PAPER: frozenset({EntityType.ROCK, EntityType.SPOCK}),
    EntityType.SCISSORS: frozenset({EntityType.PAPER, EntityType.LIZARD}),
    EntityType.LIZARD: frozenset({EntityType.PAPER, EntityType.SPOCK}),
    EntityType.SPOCK: frozenset({EntityType.SCISSORS, EntityType.ROCK}),
}


def beats(attacker: EntityType, defender: EntityType) -> bool:
    return defender in BEATS[attacker]


@dataclass(slots=True)
class Entity:
    id: int
    kind: EntityType
    group_id: int
    position: Vector2
    velocity: Vector2
    max_age: float
    age: float = 0.0
    last_damage_frame: float = float("-inf")
    trail: Deque[Tuple[float, float]] = field(default_factory=deque)

    def is_dead(self) -> bool:
        return self.age >= self.max_age

    def health(self) -> float:
        """Remaining life in [0, 1]; 1 when just spawned."""
        if self.max_age <= 0:
            return 0.0
        return max(0.0, min(1.0, (self.max_age - self.age) / self.max_age))

    def group_key(self) -> Tuple[EntityType, int]:
        return self.kind, self.group_id

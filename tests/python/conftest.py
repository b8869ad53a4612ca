import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from pygame.math import Vector2  # noqa: E402

from rpsls.sim.core.config import SimulationConfig  # noqa: E402
from rpsls.sim.core.entity import Entity, EntityType  # noqa: E402
from rpsls.sim.core.world import World  # noqa: E402


@pytest.fixture
def empty_world() -> World:
    world = World(SimulationConfig(seed=11, initial_entity_count=0))
    world.events.clear()
    # keep hand-picked group ids below freshly allocated ones
    world._next_group_id = 100
    return world


@pytest.fixture
def place(empty_world: World):
    def _place(
        kind: EntityType,
        group_id: int,
        x: float,
        y: float,
        vx: float = 0.0,
        vy: float = 0.0,
        age: float = 0.0,
    ) -> Entity:
        entity = Entity(
            id=empty_world._next_id,
            kind=kind,
            group_id=group_id,
            position=Vector2(x, y),
            velocity=Vector2(vx, vy),
            max_age=empty_world.config.max_age_frames,
            age=age,
        )
        empty_world._next_id += 1
        empty_world.entities.append(entity)
        return entity

    return _place

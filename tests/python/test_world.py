import json
from dataclasses import asdict

import pytest
from pytest import approx

from rpsls.sim.core.config import SimulationConfig
from rpsls.sim.core.entity import EntityType
from rpsls.sim.core.world import World
from rpsls.sim.types.events import EffectKind


def _state(world: World):
    return [
        (e.id, e.kind, e.group_id, round(e.position.x, 6), round(e.position.y, 6), round(e.age, 6))
        for e in world.entities
    ]


def test_population_and_bounds_hold_over_a_long_run():
    config = SimulationConfig(seed=21)
    world = World(config)
    radius = config.entity_radius

    for _ in range(600):
        metrics = world.step()
        assert metrics.population == config.initial_entity_count
        assert len(world.entities) == config.initial_entity_count
        for entity in world.entities:
            assert 0.0 <= entity.age <= entity.max_age
            assert radius <= entity.position.x <= world.width - radius
            assert radius <= entity.position.y <= world.height - radius

    assert world.frame_count == 600
    assert world.time == approx(10.0)


def test_same_seed_gives_same_run():
    first = World(SimulationConfig(seed=5))
    second = World(SimulationConfig(seed=5))

    for _ in range(120):
        first.step()
        second.step()

    assert _state(first) == _state(second)


def test_reset_replays_the_seeded_bootstrap():
    world = World(SimulationConfig(seed=8))
    initial = _state(world)
    for _ in range(30):
        world.step()

    world.reset()

    assert world.frame_count == 0
    assert world.metrics is None
    assert world.history.latest_time is None
    assert _state(world) == initial


def test_history_is_sampled_every_frame():
    world = World(SimulationConfig(seed=2))
    for _ in range(10):
        world.step()

    rock_series = world.history.series(EntityType.ROCK)
    assert len(rock_series) == 10
    # stamped with the time at the start of each frame
    assert rock_series[0][0] == 0.0
    assert rock_series[-1][0] == approx(9 / 60)


def test_stats_cover_every_type():
    world = World(SimulationConfig(seed=3))
    metrics = world.step()

    assert set(metrics.by_type) == {kind.value for kind in EntityType}
    assert sum(bucket.count for bucket in metrics.by_type.values()) == metrics.population
    assert metrics.groups >= 1
    assert metrics.largest_group >= 1


def test_step_reports_replacement_events(empty_world, place):
    seen = []
    empty_world.subscribe(seen.append)
    place(EntityType.SCISSORS, 1, 640.0, 360.0, age=empty_world.config.max_age_frames - 0.5)

    metrics = empty_world.step()

    assert metrics.deaths == 1
    assert [event.kind for event in empty_world.events] == [EffectKind.DEATH, EffectKind.SPAWN]
    assert seen == empty_world.events
    assert len(empty_world.entities) == 1


def test_step_clears_previous_frame_events(empty_world, place):
    place(EntityType.SCISSORS, 1, 640.0, 360.0, age=empty_world.config.max_age_frames - 0.5)
    empty_world.step()

    empty_world.step()

    assert empty_world.events == []


def test_resize_rejects_worlds_smaller_than_an_entity():
    world = World(SimulationConfig(seed=1, initial_entity_count=3))

    with pytest.raises(ValueError):
        world.resize(40.0, 600.0)

    world.resize(800.0, 600.0)
    assert (world.width, world.height) == (800.0, 600.0)


def test_find_looks_up_by_id():
    world = World(SimulationConfig(seed=6, initial_entity_count=4))
    target = world.entities[2]

    assert world.find(target.id) is target
    assert world.find(-1) is None


def test_snapshot_is_json_serializable():
    world = World(SimulationConfig(seed=13))
    for _ in range(5):
        world.step()

    snapshot = world.snapshot()
    payload = json.loads(json.dumps(asdict(snapshot)))

    assert payload["frame"] == 5
    assert len(payload["entities"]) == 30
    entity = payload["entities"][0]
    assert set(entity) == {"id", "x", "y", "vx", "vy", "type", "group", "health", "hue", "trail"}
    assert max(len(item["trail"]) for item in payload["entities"]) == 5
    assert payload["metadata"]["seed"] == 13
    assert payload["metadata"]["max_age_frames"] == 3600
    assert len(payload["history"]["rock"]) == 5


def test_snapshot_before_first_step_has_metrics():
    world = World(SimulationConfig())

    snapshot = world.snapshot()

    assert snapshot.frame == 0
    assert snapshot.metrics.population == 30
    assert snapshot.metadata.seed is None


def test_snapshot_metrics_are_a_copy():
    world = World(SimulationConfig(seed=17))
    world.step()

    snapshot = world.snapshot()
    snapshot.metrics.population = -1
    snapshot.metrics.by_type["rock"].count = -1

    assert world.metrics.population == 30
    assert world.metrics.by_type["rock"].count >= 0
    assert world.snapshot().metrics.population == 30

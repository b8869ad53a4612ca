from pytest import approx

from rpsls.sim.core.entity import EntityType
from rpsls.sim.systems.health import redistribute_health


def test_group_mates_drift_toward_each_other(empty_world, place):
    fresh = place(EntityType.ROCK, 1, 100.0, 100.0, age=0.0)
    worn = place(EntityType.ROCK, 1, 150.0, 100.0, age=1000.0)

    redistribute_health(empty_world)

    assert fresh.age == approx(50.0)
    # updates happen in place, so the second entity sees the first one's new age
    assert worn.age == approx(1000.0 + (50.0 - 1000.0) * 0.05)


def test_other_groups_and_types_are_ignored(empty_world, place):
    lone = place(EntityType.ROCK, 1, 100.0, 100.0, age=0.0)
    place(EntityType.ROCK, 2, 120.0, 100.0, age=3000.0)
    place(EntityType.PAPER, 1, 140.0, 100.0, age=3000.0)

    redistribute_health(empty_world)

    assert lone.age == 0.0


def test_mates_beyond_radius_do_not_share(empty_world, place):
    near = place(EntityType.SPOCK, 3, 100.0, 100.0, age=0.0)
    place(EntityType.SPOCK, 3, 100.0 + empty_world.config.forces.align_radius + 1.0, 100.0, age=3000.0)

    redistribute_health(empty_world)

    assert near.age == 0.0


def test_total_age_is_roughly_conserved_for_a_pair(empty_world, place):
    first = place(EntityType.LIZARD, 5, 100.0, 100.0, age=400.0)
    second = place(EntityType.LIZARD, 5, 130.0, 100.0, age=2400.0)
    before = first.age + second.age

    for _ in range(50):
        redistribute_health(empty_world)

    assert abs(first.age - second.age) < 100.0
    assert first.age + second.age == approx(before, rel=0.05)

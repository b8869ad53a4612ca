from pathlib import Path

import pytest
from pytest import approx

from rpsls.sim.core.config import SimulationConfig, load_config

ROOT = Path(__file__).resolve().parents[2]


def test_default_derived_values():
    config = SimulationConfig()

    assert config.max_age_frames == 3600
    assert config.min_distance == approx(38.4)
    assert config.comfort_distance == approx(46.08)
    assert config.forces.max_attract_dist == approx(192.0)
    assert config.forces.max_speed == approx(2.4)


def test_bundled_yaml_matches_defaults():
    loaded = SimulationConfig.from_yaml(ROOT / "configs" / "default.yaml")
    defaults = SimulationConfig()

    assert loaded.initial_entity_count == defaults.initial_entity_count
    assert loaded.hitbox_radius == approx(defaults.hitbox_radius)
    assert loaded.max_age_frames == approx(defaults.max_age_frames)
    assert loaded.forces.align_radius == approx(defaults.forces.align_radius)
    assert loaded.groups == defaults.groups
    assert loaded.combat == defaults.combat
    assert loaded.seed is None


def test_load_config_overrides_nested_sections():
    config = load_config({"fps": 30, "seed": 9, "forces": {"edge_margin": 50.0}, "groups": {"max_group_size": 4}})

    assert config.max_age_frames == 1800
    assert config.seed == 9
    assert config.forces.edge_margin == 50.0
    assert config.forces.edge_force == 0.05
    assert config.groups.max_group_size == 4


def test_from_yaml_reads_partial_file(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("initial_entity_count: 5\ncombat:\n  damage_cooldown_frames: 10\n")

    config = SimulationConfig.from_yaml(path)

    assert config.initial_entity_count == 5
    assert config.combat.damage_cooldown_frames == 10
    assert config.width == 1280.0


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert SimulationConfig.from_yaml(path).initial_entity_count == 30


@pytest.mark.parametrize(
    "raw",
    [
        {"fps": 0},
        {"max_age_seconds": -1},
        {"initial_entity_count": -3},
        {"width": 40},
        {"groups": {"max_group_size": 0}},
        {"forces": {"target_speed": 3.0, "max_speed": 2.0}},
        {"history": {"sample_interval_frames": 0}},
    ],
)
def test_invalid_values_are_rejected(raw):
    with pytest.raises(ValueError):
        load_config(raw)


def test_unknown_keys_are_rejected():
    with pytest.raises(TypeError):
        load_config({"gravity": 9.8})


def test_empty_yaml_sections_fall_back_to_defaults(tmp_path):
    path = tmp_path / "sections.yaml"
    path.write_text("fps: 30\nforces:\ngroups:\ncombat:\nhistory:\n")

    config = SimulationConfig.from_yaml(path)

    assert config.fps == 30
    assert config.forces.edge_margin == 100.0
    assert config.groups.max_group_size == 7
    assert config.combat.damage_cooldown_frames == 120
    assert config.history.trail_length == 5

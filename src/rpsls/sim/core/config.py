from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

_HITBOX_RADIUS = 30 * 0.64


@dataclass
class ForceConfig:
    initial_speed: float = 2.0
    target_speed: float = 2.0
    max_speed: float = 2.0 * 1.2
    speed_adjust_factor: float = 0.02
    max_attract_dist: float = 10 * _HITBOX_RADIUS
    align_radius: float = 10 * _HITBOX_RADIUS
    align_factor: float = 0.05
    edge_margin: float = 100.0
    edge_force: float = 0.05
    attraction_force: float = 0.005
    same_type_attraction: float = 0.01
    repulsion_force: float = 0.08


@dataclass
class GroupConfig:
    max_group_size: int = 7
    min_group_size_for_spawn: int = 7


@dataclass
class CombatConfig:
    damage_cooldown_frames: int = 120
    damage_percent: float = 0.1
    max_damage_percent: float = 0.5
    redistribution_factor: float = 0.05


@dataclass
class HistoryConfig:
    time_window_seconds: float = 60.0
    sample_interval_frames: int = 1
    trail_length: int = 5
    default_peak: float = 30.0


@dataclass
class SimulationConfig:
    entity_radius: float = 30.0
    hitbox_radius: float = _HITBOX_RADIUS
    initial_entity_count: int = 30
    max_age_seconds: float = 60.0
    fps: int = 60
    width: float = 1280.0
    height: float = 720.0
    seed: Optional[int] = None
    config_version: str = "v1"
    forces: ForceConfig = field(default_factory=ForceConfig)
    groups: GroupConfig = field(default_factory=GroupConfig)
    combat: CombatConfig = field(default_factory=CombatConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    @property
    def max_age_frames(self) -> float:
        return self.max_age_seconds * self.fps

    @property
    def min_distance(self) -> float:
        # contact distance: two hitboxes touching
        return 2.0 * self.hitbox_radius

    @property
    def comfort_distance(self) -> float:
        return 2.0 * self.hitbox_radius * 1.2

    def validate(self) -> "SimulationConfig":
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.max_age_seconds <= 0:
            raise ValueError(f"max_age_seconds must be positive, got {self.max_age_seconds}")
        if self.initial_entity_count < 0:
            raise ValueError(f"initial_entity_count must be >= 0, got {self.initial_entity_count}")
        if self.entity_radius <= 0 or self.hitbox_radius <= 0:
            raise ValueError("entity_radius and hitbox_radius must be positive")
        if self.width < 2 * self.entity_radius or self.height < 2 * self.entity_radius:
            raise ValueError(
                f"world {self.width}x{self.height} cannot hold an entity of radius {self.entity_radius}"
            )
        if self.groups.max_group_size < 1:
            raise ValueError(f"max_group_size must be >= 1, got {self.groups.max_group_size}")
        if self.forces.max_speed < self.forces.target_speed:
            raise ValueError("max_speed must not be below target_speed")
        if self.history.time_window_seconds <= 0:
            raise ValueError("time_window_seconds must be positive")
        if self.history.sample_interval_frames < 1:
            raise ValueError("sample_interval_frames must be >= 1")
        return self

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def load_config(raw: dict) -> SimulationConfig:
    forces = ForceConfig(**(raw.get("forces") or {}))
    groups = GroupConfig(**(raw.get("groups") or {}))
    combat = CombatConfig(**(raw.get("combat") or {}))
    history = HistoryConfig(**(raw.get("history") or {}))
    sim_values = {k: v for k, v in raw.items() if k not in {"forces", "groups", "combat", "history"}}
    config = SimulationConfig(forces=forces, groups=groups, combat=combat, history=history, **sim_values)
    return config.validate()

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    frame: int
    time: float
    metrics: TickMetrics
    entities: List[Dict[str, Any]]
    history: Dict[str, List[Tuple[float, float]]]
    events: List[Dict[str, Any]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotWorld:
    width: float
    height: float


@dataclass(slots=True)
class SnapshotMetadata:
    fps: int
    max_age_frames: float
    time_window_seconds: float
    seed: int | None
    config_version: str

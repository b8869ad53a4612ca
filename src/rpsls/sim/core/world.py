from __future__ import annotations

import logging
from dataclasses import replace
from time import perf_counter
from typing import Any, Callable, Dict, List, Optional

from .config import SimulationConfig
from .entity import Entity, EntityType
from .rng import SimulationRng
from ..systems import collisions, effects, flocking, groups, health, lifecycle, metrics as metrics_system, motion
from ..systems.history import PopulationHistory
from ..types.events import EffectEvent
from ..types.metrics import TickMetrics, TypeStats
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld

logger = logging.getLogger(__name__)

EffectListener = Callable[[EffectEvent], None]


class World:
    """Owns the entity list together with the frame and group-id counters.

    One call to step() runs a whole frame: split groups, move, flock, collide
    (combat and replacement included), redistribute health, then sample stats.
    """

    def __init__(self, config: SimulationConfig):
        self._config = config.validate()
        self._rng = SimulationRng(config.seed)
        self._width = float(config.width)
        self._height = float(config.height)
        self._entities: List[Entity] = []
        self._history = PopulationHistory(config.history.time_window_seconds, config.history.default_peak)
        self._events: List[EffectEvent] = []
        self._listeners: List[EffectListener] = []
        self._stats: Dict[EntityType, TypeStats] = {}
        self._metrics: TickMetrics | None = None
        self._frame_count = 0
        self._next_group_id = 1
        self._next_id = 0
        self._conversions = 0
        self._absorptions = 0
        self._deaths = 0
        self._damage_events = 0
        lifecycle.bootstrap_population(self)
        self._stats = metrics_system.compute_stats(self._entities)
        logger.info(
            "world %.0fx%.0f with %d entities (seed=%s)",
            self._width,
            self._height,
            len(self._entities),
            config.seed,
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def entities(self) -> List[Entity]:
        return self._entities

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def time(self) -> float:
        return self._frame_count / self._config.fps

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def history(self) -> PopulationHistory:
        return self._history

    @property
    def events(self) -> List[EffectEvent]:
        return self._events

    @property
    def stats(self) -> Dict[EntityType, TypeStats]:
        return self._stats

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def subscribe(self, listener: EffectListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def resize(self, width: float, height: float) -> None:
        radius = self._config.entity_radius
        if width < 2 * radius or height < 2 * radius:
            raise ValueError(f"world {width}x{height} cannot hold an entity of radius {radius}")
        self._width = float(width)
        self._height = float(height)
        logger.debug("resized world to %.0fx%.0f", self._width, self._height)

    def reset(self) -> None:
        self._entities.clear()
        self._events.clear()
        self._history.clear()
        self._rng.reset()
        self._metrics = None
        self._frame_count = 0
        self._next_group_id = 1
        self._next_id = 0
        self._reset_tick_counters()
        lifecycle.bootstrap_population(self)
        self._stats = metrics_system.compute_stats(self._entities)
        logger.info("world reset with %d entities", len(self._entities))

    def _reset_tick_counters(self) -> None:
        self._conversions = 0
        self._absorptions = 0
        self._deaths = 0
        self._damage_events = 0

    def step(self) -> TickMetrics:
        start = perf_counter()
        self._events.clear()
        self._reset_tick_counters()
        # history is stamped with the time at the start of the frame
        sample_time = self.time
        self._frame_count += 1

        groups.split_oversized_groups(self)
        motion.update_positions(self)
        flocking.apply_alignment_and_attraction(self)
        collisions.resolve_collisions(self)
        health.redistribute_health(self)

        stats = metrics_system.compute_stats(self._entities)
        self._stats = stats
        if self._frame_count % self._config.history.sample_interval_frames == 0:
            self._history.update(stats, sample_time)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(self, stats, duration_ms)
        return self._metrics

    def find(self, entity_id: int) -> Optional[Entity]:
        for entity in self._entities:
            if entity.id == entity_id:
                return entity
        return None

    def snapshot(self) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(self, self._stats, 0.0)
        metrics = replace(
            metrics,
            by_type={
                kind: TypeStats(bucket.count, bucket.total_health, bucket.avg_health)
                for kind, bucket in metrics.by_type.items()
            },
        )
        return Snapshot(
            frame=self._frame_count,
            time=self.time,
            metrics=metrics,
            entities=[self.entity_payload(entity) for entity in self._entities],
            history={
                kind: [[t, value] for t, value in series] for kind, series in self._history.as_dict().items()
            },
            events=[self._event_payload(event) for event in self._events],
            world=SnapshotWorld(width=self._width, height=self._height),
            metadata=SnapshotMetadata(
                fps=self._config.fps,
                max_age_frames=self._config.max_age_frames,
                time_window_seconds=self._config.history.time_window_seconds,
                seed=self._rng.seed,
                config_version=self._config.config_version,
            ),
        )

    @staticmethod
    def entity_payload(entity: Entity) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "x": entity.position.x,
            "y": entity.position.y,
            "vx": entity.velocity.x,
            "vy": entity.velocity.y,
            "type": entity.kind.value,
            "group": entity.group_id,
            "health": entity.health(),
            "hue": effects.group_hue(entity.group_id),
            "trail": [[x, y] for x, y in entity.trail],
        }

    @staticmethod
    def _event_payload(event: EffectEvent) -> Dict[str, Any]:
        return {
            "kind": event.kind.value,
            "frame": event.frame,
            "x": event.x,
            "y": event.y,
            "color": event.color,
            "secondary_color": event.secondary_color,
            "entity_id": event.entity_id,
        }

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Mapping, Optional, Tuple

from ..core.entity import EntityType, TYPES
from ..types.metrics import TypeStats

logger = logging.getLogger(__name__)

HistoryPoint = Tuple[float, float]


class PopulationHistory:
    """Per-type (time, count * avg_health) samples covering a trailing time window."""

    def __init__(self, window_seconds: float, default_peak: float = 30.0):
        self._window = window_seconds
        self._default_peak = default_peak
        self._series: Dict[EntityType, Deque[HistoryPoint]] = {kind: deque() for kind in TYPES}
        self._latest_time: Optional[float] = None

    @property
    def window_seconds(self) -> float:
        return self._window

    @property
    def latest_time(self) -> Optional[float]:
        return self._latest_time

    def clear(self) -> None:
        for series in self._series.values():
            series.clear()
        self._latest_time = None

    def update(self, stats: Mapping[EntityType, TypeStats], now: float) -> bool:
        if now < 0 or (self._latest_time is not None and now < self._latest_time):
            logger.warning("ignoring history sample at t=%.3f (latest %.3f)", now, self._latest_time or 0.0)
            return False
        for kind in TYPES:
            bucket = stats.get(kind)
            value = bucket.weighted if bucket is not None else 0.0
            series = self._series[kind]
            series.append((now, value))
            while series and now - series[0][0] > self._window:
                series.popleft()
        self._latest_time = now
        return True

    def series(self, kind: EntityType) -> List[HistoryPoint]:
        return list(self._series[kind])

    def latest(self, kind: EntityType) -> Optional[HistoryPoint]:
        series = self._series[kind]
        return series[-1] if series else None

    def peak(self) -> float:
        """Largest sampled value, never below the default scale."""
        values = [value for series in self._series.values() for _, value in series]
        return max([self._default_peak, *values])

    def as_dict(self) -> Dict[str, List[HistoryPoint]]:
        return {kind.value: list(series) for kind, series in self._series.items()}

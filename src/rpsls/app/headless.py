from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.entity import TYPES
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "frame",
    "time",
    "population",
    "groups",
    "largest_group",
    *[f"{kind.value}_{column}" for kind in TYPES for column in ("count", "avg_health")],
    "conversions",
    "absorptions",
    "deaths",
    "damage_events",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    per_type: list[object] = []
    for kind in TYPES:
        bucket = metrics.by_type[kind.value]
        per_type.append(bucket.count)
        per_type.append(f"{bucket.avg_health:.4f}")
    return [
        metrics.frame,
        f"{metrics.time:.4f}",
        metrics.population,
        metrics.groups,
        metrics.largest_group,
        *per_type,
        metrics.conversions,
        metrics.absorptions,
        metrics.deaths,
        metrics.damage_events,
        f"{tick_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    frames: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    summary_window: int = 3600,
    config_path: Optional[Path] = None,
) -> World:
    if frames < 0:
        raise ValueError(f"frames must be >= 0, got {frames}")
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    world = World(config)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    type_series: dict[str, list[float]] = {kind.value: [] for kind in TYPES}
    totals = {"conversions": 0, "absorptions": 0, "deaths": 0, "damage_events": 0}

    try:
        for _ in range(frames):
            metrics = world.step()
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            for kind in TYPES:
                type_series[kind.value].append(float(metrics.by_type[kind.value].count))
            totals["conversions"] += metrics.conversions
            totals["absorptions"] += metrics.absorptions
            totals["deaths"] += metrics.deaths
            totals["damage_events"] += metrics.damage_events
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    logger.info(
        "ran %d frames: %d conversions, %d absorptions, %d deaths",
        frames,
        totals["conversions"],
        totals["absorptions"],
        totals["deaths"],
    )

    if summary_path:
        window = max(1, int(summary_window))
        tail = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "frames": frames,
            "seed": config.seed,
            "deterministic_log": deterministic_log,
            "population": len(world.entities),
            "totals": totals,
            "tick_ms": _summary_stats(tick_ms_series),
            "by_type": {kind: _summary_stats(values) for kind, values in type_series.items()},
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail]),
                "by_type": {kind: _summary_stats(values[tail]) for kind, values in type_series.items()},
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless RPSLS ecosystem simulation")
    parser.add_argument("--frames", type=int, default=3600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file overriding default settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-frame metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=3600,
        help="Tail window size (frames) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.frames,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config_path=args.config,
    )


if __name__ == "__main__":
    main()

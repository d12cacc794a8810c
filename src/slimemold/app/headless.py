from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "population",
    "food_sources",
    "mold_sources",
    "trail_mass",
    "max_trail",
    "vein_cells",
    "avg_fitness",
    "lost",
    "exploring",
    "normal",
    "convergence",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.food_sources,
        metrics.mold_sources,
        f"{metrics.trail_mass:.2f}",
        f"{metrics.max_trail:.4f}",
        metrics.vein_cells,
        f"{metrics.average_fitness:.4f}",
        metrics.lost,
        metrics.exploring,
        metrics.normal,
        f"{metrics.convergence:.4f}",
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


def build_world(
    seed: Optional[int] = None,
    config_path: Optional[Path] = None,
    agents_per_source: Optional[int] = None,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    world = World(config)
    if agents_per_source is not None:
        world.set_parameters(agents_per_source=agents_per_source)
    return world


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    config_path: Optional[Path] = None,
    food_count: Optional[int] = None,
    agents_per_source: Optional[int] = None,
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
) -> World:
    world = build_world(seed, config_path, agents_per_source)
    placed = world.auto_setup(food_count)
    logger.info("running %d steps with %d agents and %d food sources", steps, len(world.agents), placed)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    trail_mass_series: list[float] = []
    vein_series: list[float] = []
    peak_veins = (-1, -1)

    try:
        for _ in range(steps):
            metrics = world.step()
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            if summary_path:
                tick_ms_series.append(tick_ms)
                trail_mass_series.append(metrics.trail_mass)
                vein_series.append(float(metrics.vein_cells))
                if metrics.vein_cells > peak_veins[0]:
                    peak_veins = (metrics.vein_cells, metrics.tick)
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": world.config.seed,
            "deterministic_log": deterministic_log,
            "food_sources": placed,
            "population": len(world.agents),
            "tick_ms": _summary_stats(tick_ms_series),
            "trail_mass": _summary_stats(trail_mass_series),
            "vein_cells": _summary_stats(vein_series),
            "peaks": {"vein_cells": {"value": peak_veins[0], "tick": peak_veins[1]}},
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "trail_mass": _summary_stats(trail_mass_series[tail_slice]),
                "vein_cells": _summary_stats(vein_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))

    if world.metrics is not None:
        logger.info(
            "finished at tick %d: trail mass %.1f, %d vein cells",
            world.tick,
            world.metrics.trail_mass,
            world.metrics.vein_cells,
        )
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless slime mold simulation")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--food", type=int, default=None, help="Food sources to scatter (auto setup)")
    parser.add_argument("--agents", type=int, default=None, help="Agents spawned by the central mold source")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=500,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        config_path=args.config,
        food_count=args.food,
        agents_per_source=args.agents,
        summary_path=args.summary,
        summary_window=args.summary_window,
    )


if __name__ == "__main__":
    main()

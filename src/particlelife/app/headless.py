from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

import yaml

from ..sim.core.config import SimulationConfig
from ..sim.core.errors import ConfigurationError
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "population",
    "escaped",
    "neighbor_checks",
    "interactions",
    "reflections",
    "avg_speed",
    "partition_nodes",
    "partition_depth",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.escaped,
        metrics.neighbor_checks,
        metrics.interactions,
        metrics.reflections,
        f"{metrics.average_speed:.4f}",
        metrics.partition_nodes,
        metrics.partition_depth,
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


def load_run_config(config_path: Optional[Path], seed: Optional[int]) -> SimulationConfig:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    return config.validate()


def run_headless(
    steps: int,
    seed: Optional[int] = None,
    log_path: Optional[Path] = None,
    deterministic_log: bool = False,
    config_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
    summary_window: int = 1000,
    log_every: int = 100,
) -> World:
    config = load_run_config(config_path, seed)
    world = World(config)
    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    population_series: list[float] = []
    neighbor_checks_series: list[float] = []
    escaped_total = 0
    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            population_series.append(float(metrics.population))
            neighbor_checks_series.append(float(metrics.neighbor_checks))
            escaped_total += metrics.escaped
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
            if log_every > 0 and (tick + 1) % log_every == 0:
                logger.info(
                    "tick %d/%d population=%d avg_speed=%.3f nodes=%d",
                    tick + 1,
                    steps,
                    metrics.population,
                    metrics.average_speed,
                    metrics.partition_nodes,
                )
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "deterministic_log": deterministic_log,
            "escaped_total": escaped_total,
            "final_population": len(world.particles),
            "tick_ms": _summary_stats(tick_ms_series),
            "population": _summary_stats(population_series),
            "neighbor_checks": _summary_stats(neighbor_checks_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail]),
                "neighbor_checks": _summary_stats(neighbor_checks_series[tail]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless particle life simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON file to write summary stats for the run.")
    parser.add_argument("--summary-window", type=int, default=1000, help="Tail window size (ticks) for summary stats.")
    parser.add_argument("--log-every", type=int, default=100, help="Log progress every N ticks (0 disables).")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    args = parser.parse_args()
    try:
        config = load_run_config(args.config, args.seed)
    except (ConfigurationError, OSError, yaml.YAMLError) as exc:
        parser.error(str(exc))
    setup_logging(config.logging)
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        config_path=args.config,
        summary_path=args.summary,
        summary_window=args.summary_window,
        log_every=args.log_every,
    )


if __name__ == "__main__":
    main()

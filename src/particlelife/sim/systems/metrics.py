from __future__ import annotations

from typing import Tuple

from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    escaped: int,
    neighbor_checks: int,
    interactions: int,
    reflections: int,
    duration_ms: float,
    stats: Tuple[int, float, int, int],
) -> TickMetrics:
    population, avg_speed, partition_nodes, partition_depth = stats
    return TickMetrics(
        tick=tick,
        population=population,
        escaped=escaped,
        neighbor_checks=neighbor_checks,
        interactions=interactions,
        reflections=reflections,
        average_speed=avg_speed,
        partition_nodes=partition_nodes,
        partition_depth=partition_depth,
        tick_duration_ms=duration_ms,
    )

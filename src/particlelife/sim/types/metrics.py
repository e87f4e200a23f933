from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    escaped: int
    neighbor_checks: int
    interactions: int
    reflections: int
    average_speed: float
    partition_nodes: int
    partition_depth: int
    tick_duration_ms: float = 0.0

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    particles: List[Dict[str, Any]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"
    # Partition node rectangles as [x, y, width, height]; empty unless requested.
    partition: List[List[float]]


@dataclass(slots=True)
class SnapshotWorld:
    width: float
    height: float


@dataclass(slots=True)
class SnapshotMetadata:
    sim_dt: float
    speed: float
    tick_rate: float
    seed: int
    kinds: int
    config_version: str

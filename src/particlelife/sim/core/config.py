from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from .affinity import AffinityMatrix
from .errors import ConfigurationError
from .particle import ParticleKind

OUT_OF_BOUNDS_POLICIES = ("drop", "clamp", "wrap")
FORCE_LAW_NAMES = ("tent", "reference")


@dataclass
class ArenaConfig:
    width: float = 1200.0
    height: float = 800.0
    # Distance kept between the walls and the reflection zone.
    wall_margin: float = 5.0


@dataclass
class ForceConfig:
    threshold: float = 100.0
    beta: float = 0.3
    damping: float = 0.90
    # "tent" or "reference"; see systems.forces.FORCE_LAWS.
    force_law: str = "tent"
    self_affinity: float = 0.8
    other_affinity: float = -0.8
    # Explicit kinds x kinds rows; None builds the baseline from self/other affinity.
    affinity: Optional[List[List[float]]] = None


@dataclass
class PartitionConfig:
    capacity: int = 4
    max_depth: int = 16
    # The partition boundary starts this far in from the top-left corner of the arena.
    inset: float = 5.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    speed: float = 5.0
    particle_count: int = 1000
    kinds: int = 4
    particle_radius: float = 5.0
    query_margin_factor: float = 1.5
    seed_margin: float = 100.0
    initial_speed: float = 0.0
    seed: int = 42
    out_of_bounds: str = "drop"
    config_version: str = "v1"
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    forces: ForceConfig = field(default_factory=ForceConfig)
    partition: PartitionConfig = field(default_factory=PartitionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def affinity_matrix(self) -> AffinityMatrix:
        if self.forces.affinity is not None:
            return AffinityMatrix(self.forces.affinity)
        return AffinityMatrix.baseline(self.kinds, self.forces.self_affinity, self.forces.other_affinity)

    def validate(self) -> "SimulationConfig":
        arena = self.arena
        forces = self.forces
        partition = self.partition
        _require(arena.width > 0 and arena.height > 0, f"arena must have positive size, got {arena.width}x{arena.height}")
        _require(arena.wall_margin >= 0, f"arena.wall_margin must be >= 0, got {arena.wall_margin}")
        _require(partition.capacity >= 1, f"partition.capacity must be >= 1, got {partition.capacity}")
        _require(partition.max_depth >= 0, f"partition.max_depth must be >= 0, got {partition.max_depth}")
        _require(
            0 <= partition.inset < min(arena.width, arena.height),
            f"partition.inset must lie inside the arena, got {partition.inset}",
        )
        _require(_positive(forces.threshold), f"forces.threshold must be positive, got {forces.threshold}")
        _require(0.0 < forces.beta < 1.0, f"forces.beta must be in (0, 1), got {forces.beta}")
        _require(0.0 <= forces.damping <= 1.0, f"forces.damping must be in [0, 1], got {forces.damping}")
        _require(
            forces.force_law in FORCE_LAW_NAMES,
            f"forces.force_law must be one of {FORCE_LAW_NAMES}, got {forces.force_law!r}",
        )
        _require(
            1 <= self.kinds <= len(ParticleKind),
            f"kinds must be between 1 and {len(ParticleKind)}, got {self.kinds}",
        )
        _require(self.particle_count >= 0, f"particle_count must be >= 0, got {self.particle_count}")
        _require(_positive(self.particle_radius), f"particle_radius must be positive, got {self.particle_radius}")
        _require(_positive(self.time_step), f"time_step must be positive, got {self.time_step}")
        _require(_positive(self.speed), f"speed must be positive, got {self.speed}")
        _require(self.query_margin_factor > 0, f"query_margin_factor must be positive, got {self.query_margin_factor}")
        _require(self.initial_speed >= 0, f"initial_speed must be >= 0, got {self.initial_speed}")
        _require(
            2 * self.seed_margin < min(arena.width, arena.height) and self.seed_margin >= 0,
            f"seed_margin {self.seed_margin} leaves no room to place particles",
        )
        _require(
            self.out_of_bounds in OUT_OF_BOUNDS_POLICIES,
            f"out_of_bounds must be one of {OUT_OF_BOUNDS_POLICIES}, got {self.out_of_bounds!r}",
        )
        matrix = self.affinity_matrix()
        _require(matrix.kinds == self.kinds, f"affinity matrix is {matrix.kinds}x{matrix.kinds} but kinds is {self.kinds}")
        return self


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigurationError(message)


def _section(cls, raw: object, name: str):
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"section {name!r} must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"unknown keys in {name!r}: {', '.join(unknown)}")
    return cls(**raw)


def load_config(raw: dict) -> SimulationConfig:
    if not isinstance(raw, dict):
        raise ConfigurationError("configuration root must be a mapping")
    sections = {"arena", "forces", "partition", "logging"}
    known = {f.name for f in fields(SimulationConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"unknown configuration keys: {', '.join(unknown)}")
    sim_values = {k: v for k, v in raw.items() if k not in sections}
    config = SimulationConfig(
        arena=_section(ArenaConfig, raw.get("arena"), "arena"),
        forces=_section(ForceConfig, raw.get("forces"), "forces"),
        partition=_section(PartitionConfig, raw.get("partition"), "partition"),
        logging=_section(LoggingConfig, raw.get("logging"), "logging"),
        **sim_values,
    )
    return config.validate()

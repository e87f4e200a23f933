from __future__ import annotations

import logging
from enum import Enum
from time import perf_counter
from typing import Dict, Iterable, List, Optional, Set

from .affinity import AffinityMatrix
from .config import SimulationConfig
from .errors import ConfigurationError
from .particle import Particle
from .quadtree import QuadTree
from .region import Region
from .rng import DeterministicRng
from ..systems import metrics as metrics_system
from ..systems.forces import FORCE_LAWS, accumulate_force
from ..systems.motion import advance_position, apply_out_of_bounds_policy, integrate_velocity, reflect_velocity
from ..systems.seeding import seed_particles
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld

logger = logging.getLogger(__name__)


class WorldState(str, Enum):
    SEEDING = "Seeding"
    RUNNING = "Running"


class World:
    def __init__(self, config: SimulationConfig, particles: Optional[Iterable[Particle]] = None):
        config.validate()
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._affinity = config.affinity_matrix()
        self._force_law = FORCE_LAWS[config.forces.force_law]
        arena = config.arena
        inset = config.partition.inset
        self._bounds = Region(inset, inset, arena.width - inset, arena.height - inset)
        self._partition = QuadTree(self._bounds, config.partition.capacity, config.partition.max_depth)
        self._initial: Optional[List[Particle]] = None
        if particles is not None:
            self._initial = [particle.copy() for particle in particles]
            for particle in self._initial:
                if not 0 <= int(particle.kind) < self._affinity.kinds:
                    raise ConfigurationError(
                        f"particle kind {particle.kind!r} has no row in the {self._affinity.kinds}-kind affinity matrix"
                    )
        self._particles: List[Particle] = []
        self._state = WorldState.SEEDING
        self._metrics: TickMetrics | None = None
        self._seed_population()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def particles(self) -> List[Particle]:
        return self._particles

    @property
    def partition(self) -> QuadTree:
        return self._partition

    @property
    def bounds(self) -> Region:
        return self._bounds

    @property
    def state(self) -> WorldState:
        return self._state

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def affinity(self) -> AffinityMatrix:
        return self._affinity

    @affinity.setter
    def affinity(self, matrix: AffinityMatrix) -> None:
        if matrix.kinds != self._affinity.kinds:
            raise ConfigurationError(f"affinity matrix must be {self._affinity.kinds}x{self._affinity.kinds}")
        self._affinity = matrix

    def randomize_affinity(self) -> AffinityMatrix:
        self._affinity = AffinityMatrix.randomized(self._rng, self._affinity.kinds)
        logger.info("affinity matrix randomized")
        return self._affinity

    def reset(self) -> None:
        self._rng.reset()
        self._affinity = self._config.affinity_matrix()
        self._partition.clear()
        self._metrics = None
        self._state = WorldState.SEEDING
        self._seed_population()

    def step(self, tick: int, delta_time: float | None = None) -> TickMetrics:
        start = perf_counter()
        config = self._config
        forces = config.forces
        arena = config.arena
        dt = (config.time_step if delta_time is None else delta_time) * config.speed
        threshold = forces.threshold
        half_extent = config.query_margin_factor * config.particle_radius
        partition = self._partition
        affinity = self._affinity

        # Every neighbour query this tick starts from the tick-start snapshot.
        partition.clear()
        escaped: Set[int] = set()
        for index, particle in enumerate(self._particles):
            if not self._index(particle):
                escaped.add(index)

        neighbor_checks = 0
        interactions = 0
        reflections = 0
        for index, particle in enumerate(self._particles):
            position = particle.position
            velocity = particle.velocity
            window = Region.centered(
                position.x + velocity.x * dt,
                position.y + velocity.y * dt,
                half_extent,
                half_extent,
            )
            neighbors = partition.query(window)
            neighbor_checks += len(neighbors)
            force_x, force_y, count = accumulate_force(
                particle, neighbors, affinity, threshold, forces.beta, self._force_law
            )
            interactions += count
            integrate_velocity(velocity, force_x, force_y, threshold, forces.damping, dt)
            if reflect_velocity(position, velocity, arena.width, arena.height, config.particle_radius, arena.wall_margin):
                reflections += 1
            advance_position(position, velocity, dt)
            # Later particles in this tick see the updated copy alongside the tick-start one.
            if not self._index(particle):
                escaped.add(index)

        if escaped:
            logger.debug(
                "tick %d: %d particles outside %s (%s)", tick, len(escaped), self._bounds, config.out_of_bounds
            )

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            tick, len(escaped), neighbor_checks, interactions, reflections, elapsed_ms, self._population_stats()
        )
        self._metrics = metrics
        return metrics

    def snapshot(self, tick: int, include_partition: bool = False) -> Snapshot:
        config = self._config
        metrics = self._metrics if self._metrics is not None else self._metrics_from_state(tick)
        metadata = SnapshotMetadata(
            sim_dt=config.time_step,
            speed=config.speed,
            tick_rate=1.0 / config.time_step,
            seed=config.seed,
            kinds=self._affinity.kinds,
            config_version=config.config_version,
        )
        partition = []
        if include_partition:
            partition = [[r.x, r.y, r.width, r.height] for r in self._partition.boundaries()]
        return Snapshot(
            tick=tick,
            metrics=metrics,
            particles=[self._particle_snapshot(particle) for particle in self._particles],
            world=SnapshotWorld(width=config.arena.width, height=config.arena.height),
            metadata=metadata,
            partition=partition,
        )

    def _seed_population(self) -> None:
        if self._initial is not None:
            self._particles = [particle.copy() for particle in self._initial]
        else:
            self._particles = seed_particles(self._config, self._rng)
        logger.info(
            "seeded %d particles of %d kinds in a %gx%g arena",
            len(self._particles),
            self._affinity.kinds,
            self._config.arena.width,
            self._config.arena.height,
        )
        self._state = WorldState.RUNNING

    def _index(self, particle: Particle) -> bool:
        """
        Insert a copy of ``particle`` into the partition.

        Returns False when the partition rejected it. Under ``drop`` the
        particle then stays out of the index for the rest of the tick but keeps
        moving; ``clamp`` and ``wrap`` move it back inside and index it.
        """
        if self._partition.insert(particle.copy()) is None:
            return True
        policy = self._config.out_of_bounds
        if apply_out_of_bounds_policy(particle.position, self._bounds, policy):
            self._partition.insert(particle.copy())
        return False

    @staticmethod
    def _particle_snapshot(particle: Particle) -> Dict[str, float]:
        return {
            "x": particle.position.x,
            "y": particle.position.y,
            "vx": particle.velocity.x,
            "vy": particle.velocity.y,
            "kind": int(particle.kind),
        }

    def _population_stats(self) -> tuple[int, float, int, int]:
        population = len(self._particles)
        speed_sum = sum(particle.velocity.length() for particle in self._particles)
        avg_speed = speed_sum / population if population else 0.0
        return population, avg_speed, self._partition.node_count, self._partition.depth

    def _metrics_from_state(self, tick: int) -> TickMetrics:
        return metrics_system.create_metrics(tick, 0, 0, 0, 0, 0.0, self._population_stats())

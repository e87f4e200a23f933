from __future__ import annotations

from typing import List

from pygame.math import Vector2

from ..core.config import SimulationConfig
from ..core.particle import Particle, ParticleKind
from ..core.rng import DeterministicRng


def seed_particles(config: SimulationConfig, rng: DeterministicRng) -> List[Particle]:
    arena = config.arena
    margin = config.seed_margin
    particles: List[Particle] = []
    for _ in range(config.particle_count):
        position = Vector2(
            rng.next_range(margin, arena.width - margin),
            rng.next_range(margin, arena.height - margin),
        )
        if config.initial_speed > 0:
            velocity = rng.next_unit_circle() * config.initial_speed
        else:
            velocity = Vector2()
        kind = ParticleKind(rng.next_int(config.kinds))
        particles.append(Particle(position=position, kind=kind, velocity=velocity))
    return particles

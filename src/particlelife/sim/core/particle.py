from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from pygame.math import Vector2


class ParticleKind(IntEnum):
    RED = 0
    GREEN = 1
    BLUE = 2
    YELLOW = 3
    CYAN = 4
    MAGENTA = 5


@dataclass(slots=True)
class Particle:
    position: Vector2
    kind: ParticleKind
    velocity: Vector2 = field(default_factory=Vector2)

    def copy(self) -> "Particle":
        # Vector2 is mutable; the partition must never alias the live particle.
        return Particle(position=Vector2(self.position), kind=self.kind, velocity=Vector2(self.velocity))

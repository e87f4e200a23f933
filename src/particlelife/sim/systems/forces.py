from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, Tuple

from ..core.affinity import AffinityMatrix
from ..core.particle import Particle

ForceLaw = Callable[[float, float, float], float]


def get_force(r: float, affinity: float, beta: float = 0.3) -> float:
    """
    Radial force magnitude at normalised distance ``r`` (distance / threshold).

    Below ``beta`` the force is a universal repulsion ramping from -1 at r=0
    to 0 at r=beta. Between ``beta`` and 1 it is a tent scaled by the signed
    affinity, zero at both ends and peaking at r=(1+beta)/2. Outside the
    threshold it is zero.
    """
    if r < beta:
        return r / beta - 1.0
    if r < 1.0:
        return (1.0 - abs(2.0 * r - 1.0 - beta) / (1.0 - beta)) * affinity
    return 0.0


def reference_force(r: float, affinity: float, beta: float = 0.3) -> float:
    """Literal ``(1 - |2r - beta| - beta) * affinity`` mid-range profile; zero at exactly ``beta``."""
    if r < beta:
        return r / beta - 1.0
    if beta < r < 1.0:
        return (1.0 - abs(2.0 * r - beta) - beta) * affinity
    return 0.0


FORCE_LAWS: Dict[str, ForceLaw] = {
    "tent": get_force,
    "reference": reference_force,
}


def accumulate_force(
    particle: Particle,
    neighbors: Iterable[Particle],
    affinity: AffinityMatrix,
    threshold: float,
    beta: float,
    force_law: ForceLaw = get_force,
) -> Tuple[float, float, int]:
    """Sum the force exerted on ``particle`` by ``neighbors``; returns (fx, fy, interactions)."""
    px = particle.position.x
    py = particle.position.y
    kind = particle.kind
    force_x = 0.0
    force_y = 0.0
    interactions = 0
    for other in neighbors:
        qx = other.position.x
        qy = other.position.y
        # Pairs sharing either coordinate are skipped, which also removes the particle's own copy.
        if qx == px or qy == py:
            continue
        dx = qx - px
        dy = qy - py
        distance = math.sqrt(dx * dx + dy * dy)
        if distance <= 0.0 or distance >= threshold:
            continue
        magnitude = force_law(distance / threshold, affinity(kind, other.kind), beta)
        force_x += magnitude * dx / distance
        force_y += magnitude * dy / distance
        interactions += 1
    return force_x, force_y, interactions

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .errors import ConfigurationError
from .rng import DeterministicRng


class AffinityMatrix:
    """Signed attraction coefficients indexed by (acting kind, neighbour kind)."""

    def __init__(self, rows: Sequence[Sequence[float]]) -> None:
        size = len(rows)
        if size == 0:
            raise ConfigurationError("affinity matrix must have at least one row")
        values: List[Tuple[float, ...]] = []
        for i, row in enumerate(rows):
            if len(row) != size:
                raise ConfigurationError(f"affinity matrix must be {size}x{size}; row {i} has {len(row)} entries")
            converted = []
            for j, value in enumerate(row):
                value = float(value)
                if not math.isfinite(value) or not -1.0 <= value <= 1.0:
                    raise ConfigurationError(f"affinity[{i}][{j}] must be a finite value in [-1, 1], got {value}")
                converted.append(value)
            values.append(tuple(converted))
        self._rows: Tuple[Tuple[float, ...], ...] = tuple(values)

    @staticmethod
    def baseline(kinds: int, self_affinity: float = 0.8, other_affinity: float = -0.8) -> "AffinityMatrix":
        return AffinityMatrix(
            [[self_affinity if i == j else other_affinity for j in range(kinds)] for i in range(kinds)]
        )

    @staticmethod
    def randomized(rng: DeterministicRng, kinds: int) -> "AffinityMatrix":
        return AffinityMatrix([[rng.next_range(-1.0, 1.0) for _ in range(kinds)] for _ in range(kinds)])

    @property
    def kinds(self) -> int:
        return len(self._rows)

    def __call__(self, kind: int, other: int) -> float:
        return self._rows[kind][other]

    def rows(self) -> List[List[float]]:
        return [list(row) for row in self._rows]

    def is_symmetric(self) -> bool:
        return all(self._rows[i][j] == self._rows[j][i] for i in range(self.kinds) for j in range(i))

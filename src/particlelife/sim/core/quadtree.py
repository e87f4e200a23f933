"""
Region quadtree used as the per-tick neighbour index.

Nodes live in parallel arena lists addressed by index. Index 0 is the root and
the four children of a node always occupy consecutive slots in the fixed order
top-left, top-right, bottom-left, bottom-right. ``clear`` truncates the arena
back to the root and keeps the allocated item lists for reuse on the next tick.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .errors import ConfigurationError
from .particle import Particle
from .region import Region

logger = logging.getLogger(__name__)

_LEAF = -1


class QuadTree:
    def __init__(self, boundary: Region, capacity: int, max_depth: int = 16) -> None:
        if capacity < 1:
            raise ConfigurationError(f"partition capacity must be >= 1, got {capacity}")
        if max_depth < 0:
            raise ConfigurationError(f"partition max_depth must be >= 0, got {max_depth}")
        if not (boundary.width > 0 and boundary.height > 0):
            raise ConfigurationError(f"partition boundary must have positive size, got {boundary}")
        self._capacity = capacity
        self._max_depth = max_depth
        self._boundaries: List[Region] = [boundary]
        self._items: List[List[Particle]] = [[]]
        self._first_child: List[int] = [_LEAF]
        self._depths: List[int] = [0]
        self._node_count = 1
        self._size = 0

    @property
    def boundary(self) -> Region:
        return self._boundaries[0]

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def node_count(self) -> int:
        return self._node_count

    @property
    def depth(self) -> int:
        return max(self._depths[: self._node_count])

    def __len__(self) -> int:
        return self._size

    def is_divided(self, index: int = 0) -> bool:
        return self._first_child[index] != _LEAF

    def children(self, index: int = 0) -> Tuple[int, ...]:
        first = self._first_child[index]
        if first == _LEAF:
            return ()
        return (first, first + 1, first + 2, first + 3)

    def node_boundary(self, index: int) -> Region:
        return self._boundaries[index]

    def node_items(self, index: int) -> List[Particle]:
        return list(self._items[index])

    def boundaries(self) -> List[Region]:
        return self._boundaries[: self._node_count]

    def clear(self) -> None:
        for index in range(self._node_count):
            self._items[index].clear()
        self._first_child[0] = _LEAF
        self._node_count = 1
        self._size = 0

    def insert(self, particle: Particle) -> Optional[Particle]:
        """
        Store ``particle`` in the tree.

        Returns the particle unchanged when its position lies outside the root
        boundary, otherwise ``None``.
        """
        x = particle.position.x
        y = particle.position.y
        if not self._boundaries[0].contains(x, y):
            return particle

        index = 0
        while True:
            first = self._first_child[index]
            if first == _LEAF:
                items = self._items[index]
                if len(items) < self._capacity:
                    items.append(particle)
                    break
                if self._depths[index] >= self._max_depth:
                    # Coincident points never separate; overflow at the depth cap.
                    logger.debug("quadtree node %d at max depth %d holds %d items", index, self._max_depth, len(items) + 1)
                    items.append(particle)
                    break
                first = self._subdivide(index)
            index = self._owning_child(first, x, y)
        self._size += 1
        return None

    def query(self, region: Region) -> List[Particle]:
        found: List[Particle] = []
        stack = [0]
        boundaries = self._boundaries
        while stack:
            index = stack.pop()
            if not region.intersects(boundaries[index]):
                continue
            for item in self._items[index]:
                if region.contains(item.position.x, item.position.y):
                    found.append(item)
            first = self._first_child[index]
            if first != _LEAF:
                stack.extend((first + 3, first + 2, first + 1, first))
        return found

    def _subdivide(self, index: int) -> int:
        first = self._node_count
        depth = self._depths[index] + 1
        for offset, quadrant in enumerate(self._boundaries[index].quarter()):
            slot = first + offset
            if slot < len(self._boundaries):
                self._boundaries[slot] = quadrant
                self._first_child[slot] = _LEAF
                self._depths[slot] = depth
            else:
                self._boundaries.append(quadrant)
                self._items.append([])
                self._first_child.append(_LEAF)
                self._depths.append(depth)
        self._node_count += 4
        self._first_child[index] = first
        return first

    def _owning_child(self, first: int, x: float, y: float) -> int:
        # Boundary-line points belong to the first child, in fixed order, that contains them.
        for child in range(first, first + 4):
            if self._boundaries[child].contains(x, y):
                return child
        # Midpoint rounding can leave a sliver; fall back to the quadrant by comparison.
        mid = self._boundaries[first + 3]
        return first + (2 if y >= mid.y else 0) + (1 if x >= mid.x else 0)

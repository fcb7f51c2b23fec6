"""
Copyright 2019-2025 Balena Ltd.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .options import LayoutResourceError

# Inputs are signed 16-bit minute offsets:
int16_min = -(2**15)
int16_max = 2**15 - 1


@dataclass(eq=False)
class Block:
    """A time interval together with its computed layout.

    ``left_n``/``right_n`` hold the blocks that overlap this one and sit on
    its left/right hand side. ``cleft_n``/``cright_n`` are the condensed
    versions: a neighbour is kept only if it is not on the far side of
    another neighbour in the same list.
    """

    idx: int
    start_min: int = 0
    end_min: int = 0
    duration: int = 0
    depth: int = 0
    path_depth: int = 0
    left: float = 0.0
    width: float = 0.0
    is_fixed: bool = False
    visited: bool = False
    left_n: List["Block"] = field(default_factory=list)
    right_n: List["Block"] = field(default_factory=list)
    cleft_n: List["Block"] = field(default_factory=list)
    cright_n: List["Block"] = field(default_factory=list)

    @property
    def right(self):
        return self.left + self.width

    def clear(self, idx, start_min, end_min):
        self.idx = idx
        self.start_min = start_min
        self.end_min = end_min
        self.duration = end_min - start_min
        self.depth = 0
        self.path_depth = 0
        self.left = 0.0
        self.width = 0.0
        self.is_fixed = False
        self.visited = False
        self.left_n.clear()
        self.right_n.clear()
        self.cleft_n.clear()
        self.cright_n.clear()


def check_pairs(pairs):
    """Validate (start_min, end_min) pairs and return them as int tuples."""
    checked = []
    for i, (start, end) in enumerate(pairs):
        start, end = int(start), int(end)
        if not (
            int16_min <= start <= int16_max
            and int16_min <= end <= int16_max
        ):
            raise ValueError(
                f"Block {i} ({start}, {end}) is outside the 16-bit minute range"
            )
        if start >= end:
            raise ValueError(
                f"Block {i} must start before it ends, got ({start}, {end})"
            )
        checked.append((start, end))
    return checked


class BlockStore:
    """Index-addressed arena of blocks and the arrays derived from them.

    Storage only ever grows: ``capacity`` is the largest number of blocks
    seen so far and is reused by later, smaller computations. ``pool[i]``
    always holds the block with ``idx == i``; reorderings live in ``order``.
    """

    def __init__(self):
        self.size = 0
        self.capacity = 0
        self.pool = []
        self.order = []
        # idx_map[block.idx] = position of the block in the current LP model
        self.idx_map = np.zeros(0, dtype=np.int64)
        # matrix[i, j] is True iff block j is on the left hand side of block i
        self.matrix = np.zeros((0, 0), dtype=bool)

    def reserve(self, n):
        if n <= self.capacity:
            return
        try:
            matrix = np.zeros((n, n), dtype=bool)
            idx_map = np.zeros(n, dtype=np.int64)
        except MemoryError as err:
            raise LayoutResourceError(
                f"Unable to grow block storage from {self.capacity} to {n} blocks"
            ) from err
        self.matrix = matrix
        self.idx_map = idx_map
        self.pool.extend(Block(idx=i) for i in range(self.capacity, n))
        self.capacity = n

    def reset(self, pairs):
        """Re-populate the store from validated (start, end) pairs."""
        n = len(pairs)
        self.reserve(n)
        self.size = n
        self.matrix[:n, :n] = False
        self.order = list(range(n))
        for i, (start, end) in enumerate(pairs):
            self.pool[i].clear(i, start, end)

    @property
    def blocks(self):
        return self.pool[: self.size]

    def reordered(self):
        return [self.pool[i] for i in self.order]

    def sort_by_start_time(self):
        # Ties: longer blocks first.
        pool = self.pool
        self.order.sort(key=lambda i: (pool[i].start_min, -pool[i].duration))

    def sort_by_depth_descending(self):
        pool = self.pool
        self.order.sort(key=lambda i: -pool[i].depth)

    def mark_left_of(self, block, other):
        """Record that ``other`` is on the left hand side of ``block``."""
        self.matrix[block.idx, other.idx] = True
        block.left_n.append(other)
        other.right_n.append(block)

    def reset_visited(self, to_fixed=False):
        for block in self.blocks:
            block.visited = block.is_fixed if to_fixed else False

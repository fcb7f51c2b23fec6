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
from .options import DOUBLE_EPS


def compute_initial_width(store, total):
    """Every block gets 1/total of the column, placed by its room."""
    for block in store.blocks:
        block.left = block.depth / total
        block.width = 1.0 / total


def assign_path_depth(start, path_depth):
    """Give every block reachable through cleft_n the same path depth."""
    start.visited = True
    stack = [start]
    while stack:
        block = stack.pop()
        block.path_depth = path_depth
        for adj in block.cleft_n:
            if not adj.visited:
                adj.visited = True
                stack.append(adj)


def dfs_width_expansion(store):
    """Initial layout normalized by the deepest path each block is on.

    Traversals start from the deepest blocks and move to lower depths, so
    a block is claimed by the deepest chain that reaches it.
    """
    store.sort_by_depth_descending()
    for block in store.reordered():
        if not block.visited:
            assign_path_depth(block, block.depth + 1)

    for block in store.blocks:
        block.left = block.depth / block.path_depth
        block.width = 1.0 / block.path_depth


def _touching_left(block):
    return [
        adj
        for adj in block.cleft_n
        if abs(block.left - adj.right) < DOUBLE_EPS
    ]


def _enter(block):
    block.visited = True
    block.is_fixed = abs(block.left) < DOUBLE_EPS
    return block.is_fixed


def find_fixed_numerical(start):
    """Decide whether ``start`` can no longer move or grow.

    A block is fixed if its left edge is at 0, or if one of the condensed
    left neighbours touching its left edge is fixed. Results are memoized
    through the ``visited``/``is_fixed`` flags, so a visited block is never
    examined twice in one pass. All touching neighbours are explored, even
    once one of them has been found fixed.
    """
    if _enter(start):
        return True

    stack = [(start, iter(_touching_left(start)))]
    while stack:
        block, pending = stack[-1]
        for adj in pending:
            if adj.visited:
                if adj.is_fixed:
                    block.is_fixed = True
            elif _enter(adj):
                block.is_fixed = True
            else:
                stack.append((adj, iter(_touching_left(adj))))
                break
        else:
            stack.pop()
            if stack and block.is_fixed:
                stack[-1][0].is_fixed = True
    return start.is_fixed


def detect_fixed(store, check_right_neighbours=False):
    """Run fixed point detection from every unvisited right-anchored block.

    A block is anchored if its right edge is at 1, or (after an LP pass) if
    its right edge touches the left edge of a fixed right neighbour.
    """
    for block in store.blocks:
        if block.visited:
            continue
        right = block.right
        if abs(right - 1.0) < DOUBLE_EPS:
            find_fixed_numerical(block)
            continue
        if check_right_neighbours:
            for n in block.right_n:
                if n.is_fixed and abs(right - n.left) < DOUBLE_EPS:
                    find_fixed_numerical(block)
                    break


def get_fixed_count(store):
    """Count fixed blocks, resetting ``visited`` to ``is_fixed``."""
    fixed_count = 0
    for block in store.blocks:
        block.visited = block.is_fixed
        fixed_count += block.is_fixed
    return fixed_count

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
from collections import deque

import numpy as np


def conflicting_pairs(ordered, tolerance=0):
    """Yield (earlier, later) pairs of overlapping blocks.

    ``ordered`` must be sorted by start time.
    """
    for i, bi in enumerate(ordered):
        for j in range(i + 1, len(ordered)):
            bj = ordered[j]
            if bj.start_min + tolerance >= bi.end_min:
                break
            yield bi, bj


def construct_adj_list(store, tolerance=0):
    """Build the left/right adjacency lists and the reachability matrix.

    The block with the smaller depth is on the left; on equal depths the
    block that starts later is on the left.
    """
    for bi, bj in conflicting_pairs(store.reordered(), tolerance):
        if bi.depth < bj.depth:
            store.mark_left_of(bj, bi)
        else:
            store.mark_left_of(bi, bj)


def condense_adj_list(store):
    """Reduce left_n/right_n to cleft_n/cright_n.

    A left neighbour is dropped if it is on the left of another left
    neighbour; a right neighbour is dropped if another right neighbour is on
    its left.
    """
    matrix = store.matrix
    for block in store.blocks:
        if block.left_n:
            idxs = [v.idx for v in block.left_n]
            # sub[a, b]: left_n[b] is on the left of left_n[a]
            dominated = matrix[np.ix_(idxs, idxs)].any(axis=0)
            block.cleft_n = [
                v for v, d in zip(block.left_n, dominated) if not d
            ]
        if block.right_n:
            idxs = [v.idx for v in block.right_n]
            # sub[a, b]: right_n[b] is on the left of right_n[a]
            dominated = matrix[np.ix_(idxs, idxs)].any(axis=1)
            block.cright_n = [
                v for v, d in zip(block.right_n, dominated) if not d
            ]


def find_component(start):
    """Breadth-first search over the condensed graph from ``start``.

    Only blocks that are not yet visited are collected; fixed blocks are
    expected to be marked visited by the caller.
    """
    component = [start]
    start.visited = True
    queue = deque([start])
    while queue:
        block = queue.popleft()
        for node in block.cleft_n + block.cright_n:
            if not node.visited:
                node.visited = True
                component.append(node)
                queue.append(node)
    return component

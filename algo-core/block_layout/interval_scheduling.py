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
import heapq

from .options import IS_HEAP


def interval_scheduling_greedy(store, tolerance=0):
    """Interval partitioning that also prefers the lowest free room index.

    Runs in O(n^2) in the worst case. Returns the number of rooms used.
    """
    if store.size == 0:
        return 0

    store.sort_by_start_time()
    ordered = store.reordered()
    # One block (the latest occupant) per room:
    occupied = [ordered[0]]
    num_rooms = 1
    for block in ordered[1:]:
        best = -1
        for k, prev_block in enumerate(occupied):
            if prev_block.end_min <= block.start_min + tolerance and (
                best == -1 or prev_block.depth < occupied[best].depth
            ):
                best = k
        if best == -1:
            block.depth = num_rooms
            num_rooms += 1
            occupied.append(block)
        else:
            block.depth = occupied[best].depth
            occupied[best] = block
    return num_rooms


def interval_scheduling_heap(store, tolerance=0):
    """Classical interval partitioning with a min-heap of room end times.

    Runs in O(n log n). Returns the number of rooms used.
    """
    if store.size == 0:
        return 0

    store.sort_by_start_time()
    ordered = store.reordered()
    first = ordered[0]
    # Rooms in use, keyed by (end time, room index):
    rooms = [(first.end_min, first.depth)]
    num_rooms = 1
    for block in ordered[1:]:
        end_min, depth = rooms[0]
        if end_min <= block.start_min + tolerance:
            block.depth = depth
            heapq.heapreplace(rooms, (block.end_min, depth))
        else:
            block.depth = num_rooms
            num_rooms += 1
            heapq.heappush(rooms, (block.end_min, block.depth))
    return num_rooms


def assign_rooms(store, config):
    if config["is_method"] == IS_HEAP:
        return interval_scheduling_heap(store, config["is_tolerance"])
    return interval_scheduling_greedy(store, config["is_tolerance"])

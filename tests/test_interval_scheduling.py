import random

import pytest

from block_layout.interval_scheduling import (
    interval_scheduling_greedy,
    interval_scheduling_heap,
)


def max_overlap(pairs):
    """Largest number of blocks covering a single minute."""
    return max(
        sum(1 for s, e in pairs if s <= t < e) for t, _ in pairs
    )


def random_pairs(rng, n):
    pairs = []
    for _ in range(n):
        start = rng.randrange(0, 600)
        pairs.append((start, start + rng.randrange(1, 180)))
    return pairs


@pytest.mark.parametrize("seed", range(20))
def test_greedy_and_heap_use_the_minimum_number_of_rooms(make_store, seed):
    rng = random.Random(seed)
    pairs = random_pairs(rng, rng.randrange(1, 40))

    greedy = interval_scheduling_greedy(make_store(pairs))
    heap = interval_scheduling_heap(make_store(pairs))

    assert greedy == heap == max_overlap(pairs)


@pytest.mark.parametrize(
    "schedule", [interval_scheduling_greedy, interval_scheduling_heap]
)
def test_rooms_never_hold_overlapping_blocks(make_store, schedule):
    rng = random.Random(7)
    pairs = random_pairs(rng, 60)
    store = make_store(pairs)
    total = schedule(store)

    for room in range(total):
        blocks = sorted(
            (b for b in store.blocks if b.depth == room),
            key=lambda b: b.start_min,
        )
        for prev, block in zip(blocks, blocks[1:]):
            assert prev.end_min <= block.start_min


@pytest.mark.parametrize(
    "schedule", [interval_scheduling_greedy, interval_scheduling_heap]
)
def test_clique_needs_one_room_per_block(make_store, schedule):
    store = make_store([(0, 100)] * 5)

    assert schedule(store) == 5
    assert sorted(b.depth for b in store.blocks) == [0, 1, 2, 3, 4]


def test_greedy_reuses_the_lowest_free_room(make_store):
    pairs = [(0, 20), (0, 10), (25, 30)]
    greedy_store = make_store(pairs)
    heap_store = make_store(pairs)

    assert interval_scheduling_greedy(greedy_store) == 2
    assert interval_scheduling_heap(heap_store) == 2
    assert greedy_store.blocks[2].depth == 0
    # the heap reuses the room that became free first
    assert heap_store.blocks[2].depth == 1


@pytest.mark.parametrize(
    "schedule", [interval_scheduling_greedy, interval_scheduling_heap]
)
def test_tolerance_controls_touching_and_overlap(make_store, schedule):
    assert schedule(make_store([(0, 60), (60, 120)])) == 1
    assert schedule(make_store([(0, 60), (60, 120)]), tolerance=-1) == 2
    assert schedule(make_store([(0, 60), (50, 120)])) == 2
    assert schedule(make_store([(0, 60), (50, 120)]), tolerance=10) == 1


@pytest.mark.parametrize(
    "schedule", [interval_scheduling_greedy, interval_scheduling_heap]
)
def test_no_blocks_no_rooms(make_store, schedule):
    assert schedule(make_store([])) == 0

import pytest

from block_layout.blocks import BlockStore, check_pairs

# Four blocks that all overlap, plus two that overlap nothing:
clique_with_disjoint = [
    (480, 660),
    (480, 660),
    (480, 660),
    (480, 660),
    (300, 400),
    (700, 800),
]

# A, B, C overlap each other and F; D and E overlap each other and F.
# The initial layout leaves D and E at a quarter of the column each.
staircase = [
    (0, 40),  # A
    (0, 40),  # B
    (0, 40),  # C
    (35, 60),  # F
    (50, 100),  # D
    (50, 100),  # E
]


@pytest.fixture
def make_store():
    def _make_store(pairs):
        store = BlockStore()
        store.reset(check_pairs(pairs))
        return store

    return _make_store

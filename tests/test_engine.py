import random

import pytest
from ortools.linear_solver import pywraplp

from block_layout import (
    LayoutEngine,
    LayoutSolverError,
    compute_layout,
    default_options,
)
from block_layout.solve_model import find_violations

from conftest import clique_with_disjoint, staircase


def random_pairs(rng, n):
    pairs = []
    for _ in range(n):
        start = rng.randrange(480, 1080, 5)
        pairs.append((start, start + rng.randrange(30, 200, 5)))
    return pairs


def test_no_blocks():
    engine = LayoutEngine()

    assert engine.compute([]) == []
    assert engine.get_sum() == 0.0
    assert engine.get_sum_sq() == 0.0
    assert engine.total_rooms == 0


def test_single_block_takes_the_whole_column():
    engine = LayoutEngine()

    assert engine.compute([(600, 650)]) == [(0.0, 1.0)]
    assert engine.get_sum() == pytest.approx(100.0)
    assert engine.get_sum_sq() == pytest.approx(10000.0)


def test_overlapping_group_and_disjoint_blocks():
    engine = LayoutEngine()
    layout = engine.compute(clique_with_disjoint)

    assert engine.total_rooms == 4
    assert [w for _, w in layout[:4]] == pytest.approx([0.25] * 4)
    assert sorted(l for l, _ in layout[:4]) == pytest.approx(
        [0.0, 0.25, 0.5, 0.75]
    )
    assert layout[4] == (0.0, 1.0)
    assert layout[5] == (0.0, 1.0)
    assert engine.get_sum() == pytest.approx(300.0)
    assert engine.get_sum_sq() == pytest.approx(4 * 625.0 + 2 * 10000.0)


@pytest.mark.parametrize("n", [2, 3, 7])
def test_clique_initial_layout(n):
    layout = compute_layout([(0, 100)] * n, lp_iters=0)

    assert [w for _, w in layout] == pytest.approx([1 / n] * n)
    assert not find_violations([(0, 100)] * n, layout)


@pytest.mark.parametrize(
    "options",
    [
        {},
        {"lp_model": 2},
        {"apply_dfs": 0},
        {"is_method": 2},
    ],
)
def test_lp_widens_the_unfixed_blocks(options):
    engine = LayoutEngine(**options)
    layout = engine.compute(staircase)

    expected = [
        (0.0, 0.25),
        (0.25, 0.25),
        (0.5, 0.25),
        (0.75, 0.25),
        (0.0, 0.375),
        (0.375, 0.375),
    ]
    for (left, width), (exp_left, exp_width) in zip(layout, expected):
        assert left == pytest.approx(exp_left, abs=1e-7)
        assert width == pytest.approx(exp_width, abs=1e-7)
    assert engine.get_sum() == pytest.approx(175.0, abs=1e-5)
    assert engine.get_sum_sq() == pytest.approx(5312.5, abs=1e-3)


def test_lp_convergence_is_reported():
    engine = LayoutEngine()
    engine.compute(staircase)

    assert engine.fixed_history == [4, 6, 6]
    assert engine.lp_iterations == 2


def test_without_lp_iterations_the_initial_layout_is_kept():
    engine = LayoutEngine(lp_iters=0)
    layout = engine.compute(staircase)

    assert layout[4] == (0.0, 0.25)
    assert layout[5] == (0.25, 0.25)
    assert engine.lp_iterations == 0
    assert engine.fixed_history == [4]


def test_milp_clique_with_disjoint_blocks():
    layout = compute_layout(clique_with_disjoint, milp=1)

    assert [w for _, w in layout[:4]] == pytest.approx([0.25] * 4, abs=1e-6)
    assert [w for _, w in layout[4:]] == pytest.approx([1.0, 1.0], abs=1e-6)
    assert not find_violations(clique_with_disjoint, layout)


def test_milp_maximizes_total_width():
    engine = LayoutEngine(milp=1, milp_time_limit=5)
    layout = engine.compute(staircase)

    assert engine.get_sum() == pytest.approx(175.0, abs=1e-3)
    assert all(width >= 0.25 - 1e-6 for _, width in layout)
    assert not find_violations(staircase, layout)


def test_milp_without_incumbent_falls_back_to_uniform_columns(
    monkeypatch, capsys
):
    monkeypatch.setattr(
        pywraplp.Solver, "Solve", lambda self, *args: pywraplp.Solver.NOT_SOLVED
    )
    engine = LayoutEngine(milp=1, milp_time_limit=1)
    layout = engine.compute(staircase)

    assert "WARNING: MILP time limit reached" in capsys.readouterr().out
    assert engine.total_rooms == 4
    for block, (left, width) in zip(engine.store.blocks, layout):
        assert width == pytest.approx(1 / 4)
        assert left == pytest.approx(block.depth / 4)
    assert not find_violations(staircase, layout)
    assert engine.get_sum() == pytest.approx(150.0)


@pytest.mark.parametrize(
    "status", [pywraplp.Solver.INFEASIBLE, pywraplp.Solver.ABNORMAL]
)
def test_milp_failure_raises(monkeypatch, status):
    monkeypatch.setattr(pywraplp.Solver, "Solve", lambda self, *args: status)
    engine = LayoutEngine(milp=1)

    with pytest.raises(LayoutSolverError, match="MILP"):
        engine.compute(staircase)


@pytest.mark.parametrize("seed", range(8))
@pytest.mark.parametrize(
    "options",
    [
        {},
        {"lp_model": 2},
        {"apply_dfs": 0},
        {"is_method": 2, "lp_iters": 3},
    ],
)
def test_random_layouts_never_collide(seed, options):
    rng = random.Random(seed)
    pairs = random_pairs(rng, rng.randrange(2, 25))
    engine = LayoutEngine(**options)
    layout = engine.compute(pairs)

    assert len(layout) == len(pairs)
    assert not find_violations(pairs, layout)
    assert engine.fixed_history == sorted(engine.fixed_history)
    assert engine.lp_iterations <= engine.config["lp_iters"]


def test_repeated_computations_are_identical():
    rng = random.Random(42)
    pairs = random_pairs(rng, 30)
    engine = LayoutEngine()

    first = engine.compute(pairs)
    engine.compute(random_pairs(rng, 12))
    second = engine.compute(pairs)

    assert first == second
    assert LayoutEngine().compute(pairs) == first


def test_storage_is_reused_across_calls():
    engine = LayoutEngine()
    engine.compute([(0, 60)] * 8)
    layout = engine.compute([(0, 60), (30, 90)])

    assert engine.store.capacity == 8
    assert layout == [(0.0, 0.5), (0.5, 0.5)]


def test_configuration_persists_until_changed():
    engine = LayoutEngine(lp_model=2)
    engine.configure(lp_iters=5)

    assert engine.config["lp_model"] == 2
    assert engine.config["lp_iters"] == 5
    assert engine.config["milp"] == default_options["milp"]


@pytest.mark.parametrize(
    "options, error",
    [
        ({"unknown": 1}, ValueError),
        ({"lp_iters": "3"}, TypeError),
        ({"lp_iters": 1.5}, TypeError),
        ({"is_method": 3}, ValueError),
        ({"lp_model": 0}, ValueError),
        ({"lp_iters": -1}, ValueError),
        ({"milp_time_limit": 0}, ValueError),
    ],
)
def test_invalid_options_are_rejected(options, error):
    engine = LayoutEngine()
    with pytest.raises(error):
        engine.configure(**options)
    assert engine.config == default_options


def test_invalid_blocks_leave_the_engine_usable():
    engine = LayoutEngine()
    with pytest.raises(ValueError):
        engine.compute([(0, 60), (90, 30)])

    assert engine.compute([(0, 60)]) == [(0.0, 1.0)]

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
from ortools.linear_solver import pywraplp

from .options import DOUBLE_EPS, LP_UNIFORM, LayoutSolverError

status_names = {
    pywraplp.Solver.OPTIMAL: "OPTIMAL",
    pywraplp.Solver.FEASIBLE: "FEASIBLE",
    pywraplp.Solver.INFEASIBLE: "INFEASIBLE",
    pywraplp.Solver.UNBOUNDED: "UNBOUNDED",
    pywraplp.Solver.ABNORMAL: "ABNORMAL",
    pywraplp.Solver.NOT_SOLVED: "NOT_SOLVED",
}


def check_solver_status(status, phase):
    """Raise unless the solver returned a usable solution."""
    if status not in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE):
        raise LayoutSolverError(
            f"{phase} finished with status {status_names.get(status, status)}"
        )


def create_solver(backend, log_progress=False):
    solver = pywraplp.Solver.CreateSolver(backend)
    if not solver:
        raise LayoutSolverError(f"OR-Tools solver {backend} is not available")
    if log_progress:
        solver.EnableOutput()
    return solver


def fixed_bounds(block):
    """Return (max right edge of fixed left neighbours,
    min left edge of fixed right neighbours)."""
    max_left_fixed = 0.0
    min_right_fixed = 1.0
    for v in block.cleft_n:
        if v.is_fixed:
            max_left_fixed = max(max_left_fixed, v.right)
    for v in block.cright_n:
        if v.is_fixed:
            min_right_fixed = min(min_right_fixed, v.left)
    return max_left_fixed, min_right_fixed


class LPModel:
    """Builds and solves the LP of one connected component of free blocks.

    Subclasses read the current ``left``/``width`` of the blocks in the
    component and overwrite them with the LP solution.
    """

    backend = "GLOP"

    def __init__(self, log_progress=False):
        self.log_progress = log_progress

    def solve(self, store, component):
        raise NotImplementedError

    def map_component(self, store, component):
        for i, block in enumerate(component):
            store.idx_map[block.idx] = i


class PerBlockWidthModel(LPModel):
    """Each block has its own left and width.

    Phase 1 maximizes the total width. Phase 2 keeps the total and
    minimizes the absolute deviation of each width from the mean.
    """

    def solve(self, store, component):
        self.map_component(store, component)
        idx_map = store.idx_map
        solver = create_solver(self.backend, self.log_progress)
        inf = solver.infinity()

        lefts = []
        widths = []
        min_right = []
        for block in component:
            max_left_fixed, min_right_fixed = fixed_bounds(block)
            # li >= maxLeftFixed
            lefts.append(
                solver.NumVar(max_left_fixed, inf, f"left_{block.idx}")
            )
            # wi >= current width
            widths.append(
                solver.NumVar(block.width, inf, f"width_{block.idx}")
            )
            min_right.append(min_right_fixed)

        for i, block in enumerate(component):
            for v in block.cleft_n:
                if not v.is_fixed:
                    j = idx_map[v.idx]
                    # li >= lj + wj
                    solver.Add(lefts[i] >= lefts[j] + widths[j])
            # li + wi <= minRightFixed
            solver.Add(lefts[i] + widths[i] <= min_right[i])

        # Phase 1:
        solver.Maximize(solver.Sum(widths))
        check_solver_status(solver.Solve(), "LP phase 1 (max width)")
        sum_width = solver.Objective().Value()
        mean_width = sum_width / len(component)

        # Phase 2, |wi - mean| <= ti:
        deviations = []
        for i, block in enumerate(component):
            t = solver.NumVar(0.0, inf, f"deviation_{block.idx}")
            solver.Add(t >= mean_width - widths[i])
            solver.Add(t >= widths[i] - mean_width)
            deviations.append(t)
        solver.Add(solver.Sum(widths) >= sum_width - DOUBLE_EPS)
        solver.Minimize(solver.Sum(deviations))
        check_solver_status(solver.Solve(), "LP phase 2 (balance widths)")

        for i, block in enumerate(component):
            block.left = lefts[i].solution_value()
            block.width = widths[i].solution_value()


class UniformWidthModel(LPModel):
    """All blocks of the component share one width, which is maximized."""

    def solve(self, store, component):
        self.map_component(store, component)
        idx_map = store.idx_map
        solver = create_solver(self.backend, self.log_progress)
        inf = solver.infinity()

        # 0 <= width <= 1
        width = solver.NumVar(0.0, 1.0, "width")
        lefts = []
        min_right = []
        for block in component:
            max_left_fixed, min_right_fixed = fixed_bounds(block)
            lefts.append(
                solver.NumVar(max_left_fixed, inf, f"left_{block.idx}")
            )
            min_right.append(min_right_fixed)

        for i, block in enumerate(component):
            for v in block.cleft_n:
                if not v.is_fixed:
                    # li >= lj + w
                    solver.Add(lefts[i] >= lefts[idx_map[v.idx]] + width)
            # li + w <= minRightFixed
            solver.Add(lefts[i] + width <= min_right[i])

        solver.Maximize(width)
        check_solver_status(solver.Solve(), "LP (max shared width)")

        shared_width = width.solution_value()
        for i, block in enumerate(component):
            block.left = lefts[i].solution_value()
            block.width = shared_width


def make_lp_model(config):
    log_progress = bool(config["log_progress"])
    if config["lp_model"] == LP_UNIFORM:
        return UniformWidthModel(log_progress)
    return PerBlockWidthModel(log_progress)

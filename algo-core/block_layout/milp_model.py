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
import colorama
import pandas as pd
from ortools.linear_solver import pywraplp

from .conflict_graph import conflicting_pairs
from .lp_models import check_solver_status, create_solver, status_names
from .options import big_m
from .width_expansion import compute_initial_width

milp_backend = "SCIP"

# In the model below, the following abbreviations are used:
# b: block index
# p: pair of overlapping blocks (earlier, later)


def setup_var_dataframes_milp(store, config):
    """Create dataframes that will contain the model variables."""
    var_milp = {}
    # b:
    var_milp["b"] = pd.DataFrame(
        data=None,
        index=pd.Index(range(store.size), name="block"),
        columns=["left", "width"],
    )
    # p:
    pairs = [
        (bi.idx, bj.idx)
        for bi, bj in conflicting_pairs(
            store.reordered(), config["dfs_tolerance"]
        )
    ]
    p_multi_index = pd.MultiIndex.from_arrays(
        [[i for i, _ in pairs], [j for _, j in pairs]],
        names=("earlier", "later"),
    )
    var_milp["p"] = pd.DataFrame(
        data=None, index=p_multi_index, columns=["is_earlier_on_left"]
    )
    return var_milp


def fill_var_dataframes_milp(solver, var_milp, total):
    """Fill the variable dataframes with OR-Tools model variables."""
    # b:
    for b in var_milp["b"].index:
        var_milp["b"].loc[b, "left"] = solver.NumVar(0.0, 1.0, f"left_{b}")
        var_milp["b"].loc[b, "width"] = solver.NumVar(
            1.0 / total, 1.0, f"width_{b}"
        )
    # p:
    for (i, j) in var_milp["p"].index:
        var_milp["p"].loc[(i, j), "is_earlier_on_left"] = solver.BoolVar(
            f"is_earlier_on_left_{i}_{j}"
        )
    return var_milp


def define_constraints_milp(solver, var_milp):
    """Exactly one of the two orderings holds for every overlapping pair."""
    df_b = var_milp["b"]
    for (i, j), y in var_milp["p"]["is_earlier_on_left"].items():
        # y = 1: li + wi <= lj
        solver.Add(
            df_b.loc[i, "left"] + df_b.loc[i, "width"]
            <= df_b.loc[j, "left"] + big_m * (1 - y)
        )
        # y = 0: lj + wj <= li
        solver.Add(
            df_b.loc[j, "left"] + df_b.loc[j, "width"]
            <= df_b.loc[i, "left"] + big_m * y
        )
    # li + wi <= 1
    for b in df_b.index:
        solver.Add(df_b.loc[b, "left"] + df_b.loc[b, "width"] <= 1.0)


def solve_milp(store, total, config):
    """Lay out all blocks at once with the exact 0/1 model.

    On timeout the best incumbent is used. If the solver stopped before
    finding any incumbent, every block falls back to 1/total of the column.
    """
    log_progress = bool(config["log_progress"])
    solver = create_solver(milp_backend, log_progress)
    var_milp = setup_var_dataframes_milp(store, config)
    var_milp = fill_var_dataframes_milp(solver, var_milp, total)
    define_constraints_milp(solver, var_milp)
    solver.Maximize(solver.Sum(var_milp["b"]["width"].tolist()))

    solver.SetTimeLimit(int(config["milp_time_limit"] * 1000))
    params = pywraplp.MPSolverParameters()
    params.SetIntegerParam(
        pywraplp.MPSolverParameters.PRESOLVE,
        pywraplp.MPSolverParameters.PRESOLVE_ON,
    )
    params.SetDoubleParam(pywraplp.MPSolverParameters.RELATIVE_MIP_GAP, 0.0)
    status = solver.Solve(params)
    if log_progress:
        print(
            f"MILP over {store.size} blocks and {len(var_milp['p'])} pairs "
            f"finished with status {status_names.get(status, status)}"
        )

    if status == pywraplp.Solver.NOT_SOLVED:
        print(
            f"{colorama.Fore.YELLOW}WARNING: MILP time limit reached "
            "without a solution, using the uniform layout."
            f"{colorama.Style.RESET_ALL}"
        )
        compute_initial_width(store, total)
        return status
    check_solver_status(status, "MILP")

    for block in store.blocks:
        block.left = var_milp["b"].loc[block.idx, "left"].solution_value()
        block.width = var_milp["b"].loc[block.idx, "width"].solution_value()
    return status

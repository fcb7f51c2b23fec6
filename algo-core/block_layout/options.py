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

# Tolerance used for all comparisons on left/right edges:
DOUBLE_EPS = 1e-8

# Big-M used by the ordering constraints of the MILP:
big_m = 10.0

# Room assignment methods:
IS_GREEDY = 1
IS_HEAP = 2

# LP model variants:
LP_PER_BLOCK = 1
LP_UNIFORM = 2

default_options = {
    "is_tolerance": 0,
    "is_method": IS_GREEDY,
    "apply_dfs": 1,
    "dfs_tolerance": 0,
    "lp_iters": 100,
    "lp_model": LP_PER_BLOCK,
    "milp": 0,
    "milp_time_limit": 10,
    "log_progress": 0,
}

# Names used by the input JSON "options" object:
json_option_names = {
    "isTolerance": "is_tolerance",
    "isMethod": "is_method",
    "applyDfs": "apply_dfs",
    "dfsTolerance": "dfs_tolerance",
    "lpIters": "lp_iters",
    "lpModel": "lp_model",
    "milp": "milp",
    "milpTimeLimit": "milp_time_limit",
    "logProgress": "log_progress",
}


class LayoutError(Exception):
    """Base class for errors raised while computing a layout."""


class LayoutResourceError(LayoutError, MemoryError):
    """The block arena or one of its auxiliary arrays could not grow."""


class LayoutSolverError(LayoutError):
    """The LP/MILP solver did not return a usable solution."""


def validate_options(options):
    """Check option names, types and domains; return a normalized copy."""
    checked = {}
    for name, value in options.items():
        if name not in default_options:
            raise ValueError(f"Unknown layout option: {name}")
        # bool is an int subclass and is accepted for the 0/1 flags:
        if not isinstance(value, int):
            raise TypeError(
                f"Layout option {name} must be an integer, got {value!r}"
            )
        checked[name] = int(value)

    if checked.get("is_method", IS_GREEDY) not in (IS_GREEDY, IS_HEAP):
        raise ValueError("is_method must be 1 (greedy) or 2 (heap)")
    if checked.get("lp_model", LP_PER_BLOCK) not in (LP_PER_BLOCK, LP_UNIFORM):
        raise ValueError("lp_model must be 1 (per-block) or 2 (uniform)")
    if checked.get("lp_iters", 0) < 0:
        raise ValueError("lp_iters must be non-negative")
    if checked.get("milp_time_limit", 1) <= 0:
        raise ValueError("milp_time_limit must be positive")
    return checked

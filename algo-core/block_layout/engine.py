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
from .blocks import BlockStore, check_pairs
from .conflict_graph import (
    condense_adj_list,
    construct_adj_list,
    find_component,
)
from .interval_scheduling import assign_rooms
from .lp_models import make_lp_model
from .milp_model import solve_milp
from .options import default_options, validate_options
from .width_expansion import (
    compute_initial_width,
    detect_fixed,
    dfs_width_expansion,
    get_fixed_count,
)


class LayoutEngine:
    """Computes left/width of overlapping time blocks within a [0, 1] column.

    One engine holds all working state. A call to :meth:`compute` resets
    that state, so calls are independent but an engine must not be shared
    between threads.
    """

    def __init__(self, **options):
        self.config = dict(default_options)
        self.store = BlockStore()
        self.r_sum = 0.0
        self.r_sum_sq = 0.0
        self.total_rooms = 0
        self.lp_iterations = 0
        self.fixed_history = []
        if options:
            self.configure(**options)

    def configure(self, **options):
        self.config.update(validate_options(options))

    def reset(self, pairs):
        """Clear the results of the previous call and load new blocks."""
        pairs = check_pairs(pairs)
        self.store.reset(pairs)
        self.r_sum = 0.0
        self.r_sum_sq = 0.0
        self.total_rooms = 0
        self.lp_iterations = 0
        self.fixed_history = []

    def compute(self, pairs):
        """Lay out the (start_min, end_min) pairs.

        Returns a list of (left, width) tuples in input order.
        """
        self.reset(pairs)
        store = self.store
        config = self.config
        if store.size == 0:
            return []

        # Step 1, the number of rooms/columns needed:
        total = assign_rooms(store, config)
        self.total_rooms = total
        if config["log_progress"]:
            print(f"{store.size} blocks need {total} rooms.")

        if config["milp"]:
            solve_milp(store, total, config)
        elif total <= 1:
            compute_initial_width(store, total)
        else:
            self.relax(total)

        self.compute_result()
        return self.layout()

    def relax(self, total):
        store = self.store
        config = self.config
        # Step 2 and 3, conflict graph and its condensation:
        construct_adj_list(store, config["dfs_tolerance"])
        condense_adj_list(store)
        # Step 4, initial layout:
        if config["apply_dfs"]:
            dfs_width_expansion(store)
            store.reset_visited()
        else:
            compute_initial_width(store, total)

        # Step 5, LP relaxation of the blocks that are not fixed yet:
        detect_fixed(store)
        prev_fixed_count = get_fixed_count(store)
        self.fixed_history.append(prev_fixed_count)
        lp_model = make_lp_model(config)
        for i in range(config["lp_iters"]):
            self.lp_iterations = i + 1
            for block in store.blocks:
                if not block.visited:
                    lp_model.solve(store, find_component(block))
            # detection needs the visited flags again:
            store.reset_visited(to_fixed=True)
            detect_fixed(store, check_right_neighbours=True)

            fixed_count = get_fixed_count(store)
            self.fixed_history.append(fixed_count)
            if config["log_progress"]:
                print(f"LP iteration {i}: {fixed_count}/{store.size} fixed")
            if fixed_count == prev_fixed_count:
                if config["log_progress"]:
                    print(f"Convergence reached at iteration {i}.")
                break
            prev_fixed_count = fixed_count

    def compute_result(self):
        for block in self.store.blocks:
            w = block.width * 100
            self.r_sum += w
            self.r_sum_sq += w * w

    def layout(self):
        return [(block.left, block.width) for block in self.store.blocks]

    def get_sum(self):
        return self.r_sum

    def get_sum_sq(self):
        return self.r_sum_sq


def compute_layout(pairs, **options):
    """Lay out ``pairs`` once with a fresh engine."""
    return LayoutEngine(**options).compute(pairs)

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
import math
import sys

import colorama
import numpy as np

from .engine import LayoutEngine
from .write_output import write_output_files

# Slack allowed for solver round-off when verifying a layout:
verify_eps = 1e-6


def find_violations(pairs, layout, tolerance=0, eps=verify_eps):
    """List blocks outside the column and overlapping blocks that collide."""
    violations = []
    for i, (left, width) in enumerate(layout):
        if left < -eps or left + width > 1.0 + eps:
            violations.append(
                f"block {i} is outside the column (left={left}, width={width})"
            )

    order = sorted(range(len(pairs)), key=lambda i: pairs[i][0])
    for a, i in enumerate(order):
        for b in range(a + 1, len(order)):
            j = order[b]
            if pairs[j][0] + tolerance >= pairs[i][1]:
                break
            left_i, width_i = layout[i]
            left_j, width_j = layout[j]
            if (
                left_i + width_i > left_j + eps
                and left_j + width_j > left_i + eps
            ):
                violations.append(f"blocks {i} and {j} overlap")
    return violations


def verify_solution(df_events, day_results, config):
    """Verify the layout of each day, and verify the reported sums."""
    tolerance = config["layout_options"]["dfs_tolerance"]
    for result in day_results:
        df_day = df_events[df_events["day"] == result["day"]]
        pairs = list(zip(df_day["start_min"], df_day["end_min"]))
        layout = list(zip(df_day["left"], df_day["width"]))
        violations = find_violations(pairs, layout, tolerance)
        for violation in violations:
            print(f"ERROR: On {result['day']}, {violation}!")
        if violations:
            sys.exit(1)

        widths = df_day["width"].to_numpy() * 100
        if not (
            math.isclose(widths.sum(), result["sum"], abs_tol=1e-6)
            and math.isclose((widths**2).sum(), result["sumSq"], abs_tol=1e-6)
        ):
            print(
                f"{colorama.Fore.RED}WARNING: The engine reported a width "
                f"sum of {result['sum']} for {result['day']}, while the "
                f"calculated sum is {widths.sum()}!{colorama.Style.RESET_ALL}"
            )
    print("VERIFIED: Overlapping blocks never collide and stay in the column.")


def generate_solution(df_events, config):
    """Lay out each day independently, then verify and write the result."""
    engine = LayoutEngine(**config["layout_options"])
    df_events["left"] = 0.0
    df_events["width"] = 0.0
    day_results = []

    for day, df_day in df_events.groupby("day", observed=True, sort=True):
        pairs = list(zip(df_day["start_min"], df_day["end_min"]))
        layout = engine.compute(pairs)
        df_events.loc[df_day.index, ["left", "width"]] = np.array(
            layout, dtype=float
        )
        day_results.append(
            {
                "day": day,
                "rooms": engine.total_rooms,
                "sum": engine.get_sum(),
                "sumSq": engine.get_sum_sq(),
            }
        )
        print(
            f"{day}: {len(pairs)} blocks in {engine.total_rooms} rooms, "
            f"width sum {engine.get_sum():.2f}"
        )

    verify_solution(df_events, day_results, config)
    output_json = write_output_files(df_events, day_results, config)
    return [df_events, day_results, output_json]

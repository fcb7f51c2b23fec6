"""
Core algorithm for laying out overlapping calendar blocks.

Blocks are assigned rooms with an interval partitioning algorithm, spread
over the column along their conflict graph, and then widened with the
linear solver within Google OR-Tools (or, optionally, laid out exactly with
a mixed-integer model).
"""
from .engine import LayoutEngine, compute_layout
from .options import (
    LayoutError,
    LayoutResourceError,
    LayoutSolverError,
    default_options,
)

__all__ = [
    "LayoutEngine",
    "compute_layout",
    "LayoutError",
    "LayoutResourceError",
    "LayoutSolverError",
    "default_options",
]

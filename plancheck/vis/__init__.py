"""Contains utilities to visualize plans. Requires the Graphviz Python bindings."""

from . import plans, trees
from .plans import annotate_estimates, plot_plan

__all__ = ["plans", "trees", "annotate_estimates", "plot_plan"]

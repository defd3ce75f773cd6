"""Graphviz visualization of plans."""
from __future__ import annotations

import functools
from collections.abc import Callable, Sequence
from typing import Optional

import graphviz as gv

from .._core import TaskType
from .._qep import Operator, Plan
from . import trees


def _operator_labels(node: Operator, *, annotation_generator: Optional[Callable[[Operator], str]]) -> tuple[str, dict]:
    if node.is_join():
        label, params = f"{node.id}\n{node.join_type}", {"style": "bold"}
    elif node.is_scan():
        label, params = f"<<{node.id}>>\n{node.table}", {"color": "grey"}
    else:
        label, params = node.id, {}

    if node.task != TaskType.Root:
        params["shape"] = "box"

    annotation = annotation_generator(node) if annotation_generator else ""
    label = f"{label}\n{annotation}" if annotation else label
    return label, params


def _operator_children(node: Operator) -> Sequence[Operator]:
    return node.children


def annotate_estimates(node: Operator) -> str:
    """Annotates the operators of a plan with their task and estimated row count.

    See Also
    --------
    plot_plan
    """
    return f"task={node.task} rows={node.est_rows:g}"


def plot_plan(plan: Plan | Operator, annotation_generator: Optional[Callable[[Operator], str]] = None,
              **kwargs) -> gv.Digraph:
    """Creates a Graphviz visualization of a plan.

    Join operators are drawn in bold, scans in grey together with their table and operators that are pushed down to a
    storage engine are boxed. To show additional information on each node, an `annotation_generator` can be supplied, e.g.
    `annotate_estimates`. All further arguments are passed to the Graphviz graph.
    """
    root = plan.root if isinstance(plan, Plan) else plan
    return trees.plot_tree(root,
                           functools.partial(_operator_labels, annotation_generator=annotation_generator),
                           _operator_children,
                           node_id_generator=lambda node: node.id,
                           **kwargs)

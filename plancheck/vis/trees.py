"""Provides a generic utility to transform tree-like structures into Graphviz objects."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Optional

import graphviz as gv

from .._base import T


def plot_tree(
    node: T,
    label_generator: Callable[[T], tuple[str, dict]],
    child_supplier: Callable[[T], Sequence[T]],
    *,
    node_id_generator: Callable[[T], str] = lambda node: str(id(node)),
    out_path: str = "",
    out_format: str = "svg",
    _graph: Optional[gv.Digraph] = None,
    **kwargs,
) -> gv.Digraph:
    """Transforms an arbitrary tree into a Graphviz graph. The tree traversal is achieved via callback functions.

    Start the traversal at the root node.

    Parameters
    ----------
    node : T
        The node to plot.
    label_generator : Callable[[T], tuple[str, dict]]
        Callback function to generate labels of the nodes in the graph. The dictionary can contain additional formatting
        attributes (e.g. bold font). Consult the Graphviz documentation for allowed values
    child_supplier : Callable[[T], Sequence[T]]
        Provides the children of the current node.
    node_id_generator : Callable[[T], str], optional
        Generates the unique identifiers of the nodes within the graph. Defaults to the object identity.
    out_path : str, optional
        An optional file path to store the graph at. If empty, the graph will only be provided as a Graphviz object.
    out_format : str, optional
        The output format of the graph. Defaults to SVG and will only be used if the graph should be stored to disk (according
        to `out_path`).
    _graph : Optional[gv.Digraph], optional
        Internal parameter used for state-management within the plotting function. Do not set this parameter yourself!

    Returns
    -------
    gv.Digraph
        The graph. Edges point from parent to child nodes.
    """
    initial = _graph is None
    _graph = gv.Digraph(**kwargs) if initial else _graph
    label, params = label_generator(node)
    node_key = node_id_generator(node)
    _graph.node(node_key, label=gv.escape(label), **params)

    for child in child_supplier(node):
        _graph.edge(node_key, node_id_generator(child))
        plot_tree(child, label_generator, child_supplier, node_id_generator=node_id_generator, _graph=_graph)

    if initial and out_path:
        _graph.render(out_path, format=out_format, cleanup=True)
    return _graph

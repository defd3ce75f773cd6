"""Provides graph-centric utilities based on NetworkX [nx]_.

References
----------

.. [nx] Aric A. Hagberg, Daniel A. Schult and Pieter J. Swart, "Exploring network structure, dynamics, and function using
        NetworkX", in Proceedings of the 7th Python in Science Conference (SciPy2008), Gäel Varoquaux, Travis Vaught, and
        Jarrod Millman (Eds), (Pasadena, CA USA), pp. 11-15, Aug 2008
"""
from __future__ import annotations

import typing
from collections.abc import Callable, Collection, Sequence

import networkx as nx

NodeType = typing.TypeVar("NodeType")
"""Generic type to model the specific nodes contained in a NetworkX graph."""

KeyType = typing.TypeVar("KeyType")
"""Generic type of the keys that identify nodes in a NetworkX graph."""


def nx_sinks(graph: nx.DiGraph) -> Collection[KeyType]:
    """Determines all sink nodes in a directed graph.

    A sink is a node with no outgoing edges. For trees, these are the leaves.

    Parameters
    ----------
    graph : nx.DiGraph
        The graph to check

    Returns
    -------
    Collection[KeyType]
        All sink nodes. Can be an empty collection.
    """
    return [n for n in graph.nodes if graph.out_degree(n) == 0]


def nx_sources(graph: nx.DiGraph) -> Collection[KeyType]:
    """Determines all source nodes in a directed graph.

    A source is a node with no incoming edges. For trees, this is just the root.

    Parameters
    ----------
    graph : nx.DiGraph
        The graph to check

    Returns
    -------
    Collection[KeyType]
        All source nodes. Can be an empty collection.
    """
    return [n for n in graph.nodes if graph.in_degree(n) == 0]


def nx_from_tree(root: NodeType, child_supplier: Callable[[NodeType], Sequence[NodeType]], *,
                 node_key: Callable[[NodeType], KeyType],
                 node_data: Callable[[NodeType], dict] = lambda _: {}) -> nx.DiGraph:
    """Transforms an arbitrary tree into a directed NetworkX graph with edges pointing from parents to children.

    Each edge receives a ``position`` attribute with the index of the child in its parent's child sequence, so the order
    of the children can be recovered from the graph.

    Parameters
    ----------
    root : NodeType
        The root node of the tree
    child_supplier : Callable[[NodeType], Sequence[NodeType]]
        Provides the children of a node
    node_key : Callable[[NodeType], KeyType]
        Generates the (unique) key under which a node is stored in the graph
    node_data : Callable[[NodeType], dict], optional
        Generates the node attributes. By default, no attributes are attached.

    Returns
    -------
    nx.DiGraph
        The graph
    """
    graph = nx.DiGraph()
    stack = [root]
    while stack:
        current = stack.pop()
        current_key = node_key(current)
        graph.add_node(current_key, **node_data(current))
        children = child_supplier(current)
        for position, child in enumerate(children):
            graph.add_edge(current_key, node_key(child), position=position)
        stack.extend(reversed(children))
    return graph

from __future__ import annotations

import collections
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

import networkx as nx

from ._core import JoinType, OperatorType, PlanVersion, TaskType
from .util import networkx as nx_utils
from .util.dicts import frozendict
from .util.jsonize import jsondict


class Operator:
    """A single node of a plan, i.e. one physical operator of TiDB's *EXPLAIN* output.

    All operator kinds share the same class. The `op_type` discriminates between them and the kind-specific payload
    (scanned table and index, join kind) is only populated for the kinds that need it. Therefore, all common attributes can
    be accessed without knowing the operator kind first.

    Operators are immutable. Once created, neither the operator itself nor its children can be changed. This guarantees
    that a plan is a real tree: each operator is owned by exactly one parent.

    Equality is strict: two operators are only equal if all of their attributes match (including identifiers, estimates
    and the raw operator info) and their children are equal as well. Use `compare_operators` to check for structural
    equivalence instead.

    Parameters
    ----------
    op_id : str
        The operator identifier as printed by TiDB, e.g. *HashJoin_22*. Tree-drawing glyphs have to be stripped already.
    op_type : OperatorType
        The kind of operator
    est_rows : float
        The optimizer's estimate of the number of rows produced by this operator. Must not be negative.
    task : TaskType
        The execution tier that runs the operator
    children : Sequence[Operator], optional
        The input operators in the order in which TiDB printed them
    table : str, optional
        For scan operators, the name of the scanned table. Empty for all other operators.
    index : str, optional
        For index scans, the name of the scanned index. Empty for all other operators.
    join_type : Optional[JoinType], optional
        For join operators, the kind of join. *None* for all other operators.
    actual_rows : Optional[float], optional
        For *EXPLAIN ANALYZE* reports, the number of rows that were actually produced
    operator_info : str, optional
        The raw operator info text
    attributes : Optional[Mapping[str, str]], optional
        The key/value pairs extracted from the auxiliary columns of the report

    Raises
    ------
    ValueError
        If the estimated row count is negative or the operator identifier is empty
    """

    def __init__(self, op_id: str, op_type: OperatorType, *, est_rows: float, task: TaskType,
                 children: Optional[Sequence[Operator]] = None, table: str = "", index: str = "",
                 join_type: Optional[JoinType] = None, actual_rows: Optional[float] = None,
                 operator_info: str = "", attributes: Optional[Mapping[str, str]] = None) -> None:
        if not op_id:
            raise ValueError("Operators require an identifier")
        if not est_rows >= 0:
            raise ValueError(f"Estimated row count must be non-negative, not {est_rows} (operator {op_id})")
        self._id = op_id
        self._op_type = op_type
        self._est_rows = float(est_rows)
        self._task = task
        self._children: tuple[Operator, ...] = tuple(children) if children else ()
        self._table = table
        self._index = index
        self._join_type = join_type
        self._actual_rows = actual_rows
        self._operator_info = operator_info
        self._attributes = frozendict(attributes or {})

        self._hash_val = hash((self._id, self._op_type, self._task, self._table, self._index, self._children))

    @property
    def id(self) -> str:
        """Get the operator identifier, e.g. *TableFullScan_5*."""
        return self._id

    @property
    def op_type(self) -> OperatorType:
        return self._op_type

    @property
    def est_rows(self) -> float:
        """Get the optimizer's row count estimate for this operator."""
        return self._est_rows

    @property
    def task(self) -> TaskType:
        return self._task

    @property
    def children(self) -> Sequence[Operator]:
        """Get the input operators, in the order in which they appear in the *EXPLAIN* report."""
        return self._children

    @property
    def table(self) -> str:
        """Get the scanned table. Empty for non-scan operators."""
        return self._table

    @property
    def index(self) -> str:
        """Get the scanned index. Empty for all operators but index scans."""
        return self._index

    @property
    def join_type(self) -> Optional[JoinType]:
        """Get the kind of join. For non-join operators this is *None*."""
        return self._join_type

    @property
    def actual_rows(self) -> Optional[float]:
        """Get the number of rows that the operator actually produced.

        This is only available for reports that were obtained by *EXPLAIN ANALYZE* in the newer dialect and *None*
        otherwise.
        """
        return self._actual_rows

    @property
    def operator_info(self) -> str:
        return self._operator_info

    @property
    def attributes(self) -> Mapping[str, str]:
        """Get the key/value pairs from the auxiliary columns, e.g. ``{"table": "t1", "keep order": "false"}``."""
        return self._attributes

    def is_join(self) -> bool:
        return self._op_type.is_join()

    def is_scan(self) -> bool:
        return self._op_type.is_scan()

    def is_leaf(self) -> bool:
        return not self._children

    def iternodes(self) -> Iterable[Operator]:
        """Provides all operators in the sub-plan rooted at this operator, in depth-first pre-order.

        This is the same order in which the operators appear in the *EXPLAIN* report.
        """
        stack: list[Operator] = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def plan_depth(self) -> int:
        """Calculates the length of the longest path from this operator down to a leaf. Leaves have depth 1."""
        return 1 + max((child.plan_depth() for child in self._children), default=0)

    def format(self, indent: int = 0) -> str:
        """Renders the sub-plan as indented text: one line per operator with its identifier and estimate.

        Children are indented by four additional spaces.
        """
        lines = [f"{' ' * indent}{self._id}\t{self._est_rows:g}\n"]
        lines.extend(child.format(indent + 4) for child in self._children)
        return "".join(lines)

    def __json__(self) -> jsondict:
        return {
            "id": self._id,
            "op_type": self._op_type,
            "est_rows": self._est_rows,
            "task": self._task,
            "table": self._table,
            "index": self._index,
            "join_type": self._join_type,
            "actual_rows": self._actual_rows,
            "operator_info": self._operator_info,
            "attributes": self._attributes,
            "children": self._children
        }

    def __hash__(self) -> int:
        return self._hash_val

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._id == other._id
                and self._op_type == other._op_type
                and self._est_rows == other._est_rows
                and self._task == other._task
                and self._table == other._table
                and self._index == other._index
                and self._join_type == other._join_type
                and self._actual_rows == other._actual_rows
                and self._operator_info == other._operator_info
                and self._attributes == other._attributes
                and self._children == other._children)

    def __repr__(self) -> str:
        return f"Operator({self._id}, {self._op_type}, task={self._task}, children={len(self._children)})"

    def __str__(self) -> str:
        if self.is_scan():
            return f"{self._id}({self._table})"
        if not self._children:
            return self._id
        child_texts = ", ".join(str(child) for child in self._children)
        return f"{self._id}({child_texts})"


@dataclass(frozen=True)
class Plan:
    """A complete plan as reconstructed from a single *EXPLAIN* report, together with the query it belongs to.

    Plans are only read after they have been assembled. Comparisons, formatting and all other helpers never modify them.

    Attributes
    ----------
    sql : str
        The normalized query text, i.e. without surrounding whitespace and trailing semicolon
    version : PlanVersion
        The report dialect that the plan was parsed from
    root : Operator
        The root operator of the plan
    """

    sql: str
    version: PlanVersion
    root: Operator

    def iternodes(self) -> Iterable[Operator]:
        """Provides all operators of the plan in depth-first pre-order, i.e. in the order of the *EXPLAIN* report."""
        return self.root.iternodes()

    def find(self, op_id: str) -> Optional[Operator]:
        """Searches for the operator with the given identifier. Returns *None* if there is no such operator."""
        return next((node for node in self.iternodes() if node.id == op_id), None)

    def tables(self) -> set[str]:
        """Provides all tables that are scanned somewhere in the plan."""
        return {node.table for node in self.iternodes() if node.table}

    def summary(self) -> dict[str, object]:
        """Provides a quick summary of important properties of the plan, inspired by Panda's *describe* method."""
        all_nodes = list(self.iternodes())
        return {
            "version": self.version,
            "operators": len(all_nodes),
            "depth": self.root.plan_depth(),
            "tables": sorted(self.tables()),
            "root_est_rows": self.root.est_rows,
            "op_types": collections.Counter(node.op_type for node in all_nodes),
            "tasks": collections.Counter(node.task for node in all_nodes)
        }

    def as_graph(self) -> nx.DiGraph:
        """Transforms the plan into a directed graph with edges pointing from parent to child operators.

        The nodes are keyed by operator identifier and carry the operator type, task and estimate as attributes. The
        original child order is retained in the ``position`` attribute of each edge.
        """
        return nx_utils.nx_from_tree(self.root, lambda node: node.children, node_key=lambda node: node.id,
                                     node_data=_operator_graph_data)

    def format(self) -> str:
        """Provides the query together with an indented rendering of the operators.

        See Also
        --------
        Operator.format
        """
        return f"SQL: {self.sql}\n{self.root.format(0)}"

    def ast(self) -> str:
        """Provides the tree-structure of the plan in a human-readable format."""
        return _astify(self.root)

    def __json__(self) -> jsondict:
        return {"sql": self.sql, "version": self.version, "root": self.root}

    def __len__(self) -> int:
        return sum(1 for _ in self.iternodes())

    def __str__(self) -> str:
        return f"Plan[{self.version}]({self.root})"


def _operator_graph_data(node: Operator) -> dict:
    return {"op_type": node.op_type, "task": node.task, "est_rows": node.est_rows}


def _astify(node: Operator, *, indentation: int = 0) -> str:
    """Handler method to generate a tree-structure of the plan."""
    padding = " " * indentation
    prefix = f"{padding}->  " if padding else ""
    task_info = f" [{node.task}]"
    if node.is_scan():
        item_str = f"{prefix}{node.id}({node.table}){task_info}"
    else:
        item_str = f"{prefix}{node.id}{task_info}"
    child_str = "\n".join(_astify(child, indentation=indentation + 2) for child in node.children)
    return f"{item_str}\n{child_str}" if child_str else item_str

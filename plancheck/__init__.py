"""plancheck - Plan stability checks for TiDB based on the textual output of its *EXPLAIN* statement.

TiDB prints its query plans as a bordered table in which the operator tree is drawn with box-drawing characters. plancheck
turns such a report into a typed, immutable `Plan` and compares two plans for structural equivalence. A typical use case
is regression testing across TiDB upgrades: explain the same workload on the old and the new version and check which
queries changed their plan.

On a high level, the package is structured as follows:

- `parse_text` and `parse` reconstruct plans from raw reports or from already split rows. Both report dialects (TiDB 3.x
  and 4.x) are supported, their differences are described declaratively by a `ColumnLayout`
- `Plan` and `Operator` form the data model. Each operator is classified into an `OperatorType`, runs on a `TaskType`
  and, depending on its type, carries the scanned table and index or the `JoinType`
- `compare` checks two plans for structural equivalence and reports the first difference
- the `workloads` module applies parsing and comparison to entire workloads and summarizes the results in a data frame
- the `util` package contains general utilities, e.g. the JSON export
- the `vis` package renders plans with Graphviz. It has to be imported explicitly.

plancheck does not talk to TiDB itself. Obtaining the *EXPLAIN* output (or the server version) is up to the caller, all
functions in this package are pure and operate on strings only.

Most of the functionality is available directly from the main package, so generally you just need to
``import plancheck as pc``::

    plan = pc.parse_text(query, explain_output)
    reason, same = pc.compare(plan, other_plan)
"""

from . import util, workloads
from ._compare import compare, compare_operators
from ._core import JoinType, OperatorType, PlanVersion, TaskType, check_version, match_version
from ._dialects import (
    ColumnLayout,
    ColumnMapping,
    DefaultLayouts,
    V3Layout,
    V4Layout,
    assemble,
    normalize_sql,
    parse,
    parse_text
)
from ._explain import (
    build_tree,
    extract_operator_id,
    extract_table,
    find_children,
    identify_version,
    match_operator_type,
    parse_join_type,
    parse_task_type,
    split_kvs,
    split_rows
)
from ._qep import Operator, Plan
from .util.errors import FormatError, UnsupportedVersionError

__version__ = "0.1.0"

__all__ = [
    "util",
    "workloads",
    "compare",
    "compare_operators",
    "JoinType",
    "OperatorType",
    "PlanVersion",
    "TaskType",
    "check_version",
    "match_version",
    "ColumnLayout",
    "ColumnMapping",
    "DefaultLayouts",
    "V3Layout",
    "V4Layout",
    "assemble",
    "normalize_sql",
    "parse",
    "parse_text",
    "build_tree",
    "extract_operator_id",
    "extract_table",
    "find_children",
    "identify_version",
    "match_operator_type",
    "parse_join_type",
    "parse_task_type",
    "split_kvs",
    "split_rows",
    "Operator",
    "Plan",
    "FormatError",
    "UnsupportedVersionError",
]

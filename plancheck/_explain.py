"""Dialect-agnostic building blocks to take TiDB's tabular *EXPLAIN* output apart.

The report looks roughly like this (newer dialect)::

    +-------------------------+----------+-----------+---------------+--------------------------------+
    | id                      | estRows  | task      | access object | operator info                  |
    +-------------------------+----------+-----------+---------------+--------------------------------+
    | HashJoin_22             | 12487.50 | root      |               | inner join, equal:[eq(a, b)]   |
    | ├─TableReader_25(Build) | 9990.00  | root      |               | data:Selection_24              |
    | │ └─TableFullScan_23    | 10000.00 | cop[tikv] | table:t2      | keep order:false               |
    | └─TableReader_28(Probe) | 9990.00  | root      |               | data:TableFullScan_26          |
    |   └─TableFullScan_26    | 10000.00 | cop[tikv] | table:t1      | keep order:false               |
    +-------------------------+----------+-----------+---------------+--------------------------------+

There are no explicit parent pointers. Instead, the tree shape is encoded by the box-drawing glyphs in front of each
identifier, which is why all offset computations in this module operate on code points (i.e. Python string indices) and
never on bytes.
"""
from __future__ import annotations

from collections.abc import Sequence

from ._core import JoinType, OperatorType, PlanVersion, TaskType
from .util.errors import FormatError

ColumnDelimiter = "|"
BorderCharacters = frozenset("+-")

ChildGlyphs = frozenset("├└")
"""Glyphs that connect a direct child to its parent."""

PassThroughGlyph = "│"
"""Glyph that continues the branch of a parent past a deeper descendant."""

TreeGlyphs = frozenset("│├└─ ")
"""Everything that can surround an operator identifier in the id column."""

NewDialectMarker = "estRows"
ColumnarEngineMarker = "tiflash"

_JoinTypePhrases: Sequence[tuple[str, JoinType]] = (
    # longest phrases first, "semi join" is contained in all the others
    ("anti left outer semi join", JoinType.AntiLeftOuterSemi),
    ("left outer semi join", JoinType.LeftOuterSemi),
    ("anti semi join", JoinType.AntiSemi),
    ("semi join", JoinType.Semi),
    ("left outer join", JoinType.LeftOuter),
    ("right outer join", JoinType.RightOuter),
    ("inner join", JoinType.Inner),
)


def is_border_line(line: str) -> bool:
    """Checks, whether a line is one of the horizontal borders of the table, e.g. ``+----+-----+``."""
    line = line.strip()
    return bool(line) and all(c in BorderCharacters for c in line)


def extract_table(explain_text: str) -> list[str]:
    """Isolates the bordered table from the raw report text.

    The table is delimited by its first three border lines: the top border, the separator between header and body and
    the bottom border. Everything before the first and after the third border line is dropped.

    Parameters
    ----------
    explain_text : str
        The raw report, possibly surrounded by other output such as the query or a row-count footer

    Returns
    -------
    list[str]
        The lines from the top border up to (and including) the bottom border

    Raises
    ------
    FormatError
        If the text contains fewer than three border lines
    """
    lines = explain_text.splitlines()
    border_idx: list[int] = []
    for i, line in enumerate(lines):
        if not is_border_line(line):
            continue
        border_idx.append(i)
        if len(border_idx) == 3:
            break

    if len(border_idx) != 3:
        raise FormatError(f"Invalid explain result: expected 3 border lines, found {len(border_idx)}")
    first, _, last = border_idx
    return lines[first:last + 1]


def identify_version(header: str) -> PlanVersion:
    """Determines the report dialect based on the header row of the table.

    Only the newer dialect calls the estimate column *estRows*. The check is case-sensitive.
    """
    return PlanVersion.V4 if NewDialectMarker in header else PlanVersion.V3


def split_row(line: str) -> list[str]:
    """Splits a single table line into its column values.

    The empty fields before the first and after the last delimiter are dropped. The column values are not stripped,
    since the leading whitespace of the id column is part of the tree encoding.
    """
    line = line.strip()
    if not line.startswith(ColumnDelimiter) or not line.endswith(ColumnDelimiter) or len(line) < 2:
        raise FormatError("Not a table row", line)
    cols = line.split(ColumnDelimiter)
    return cols[1:-1]


def split_rows(lines: Sequence[str]) -> list[list[str]]:
    """Splits the body lines of the table into rows of column values, retaining the order of the lines."""
    return [split_row(line) for line in lines]


def split_header(line: str) -> list[str]:
    """Splits the header row of the table into normalized column names."""
    return [col.strip() for col in split_row(line)]


def _anchor_column(field: str) -> int:
    """Determines the code point offset of the first alphabetic character, or -1 if there is none."""
    return next((offset for offset, c in enumerate(field) if c.isalpha()), -1)


def find_children(rows: Sequence[Sequence[str]], parent_row: int, id_col: int) -> list[int]:
    """Determines the row numbers of the direct children of an operator.

    The identifier of the parent operator starts at its *anchor column*. All direct children have a branch glyph
    (├ or └) exactly at this column. Rows with a pass-through glyph (│) at the anchor column belong to deeper descendants
    of the parent, while any other character means that the parent's sub-tree is complete.

    Parameters
    ----------
    rows : Sequence[Sequence[str]]
        The split rows of the report
    parent_row : int
        The row number of the parent operator
    id_col : int
        The index of the identifier column

    Returns
    -------
    list[int]
        The row numbers of the direct children in ascending order. This is also their execution order.
    """
    anchor = _anchor_column(rows[parent_row][id_col])
    if anchor < 0:
        return []

    child_rows: list[int] = []
    for row_no in range(parent_row + 1, len(rows)):
        field = rows[row_no][id_col]
        glyph = field[anchor] if anchor < len(field) else ""
        if glyph in ChildGlyphs:
            child_rows.append(row_no)
        elif glyph != PassThroughGlyph:
            break
    return child_rows


def build_tree(rows: Sequence[Sequence[str]], id_col: int, *, root_row: int = 0) -> dict[int, list[int]]:
    """Reconstructs the parent/child relationships of all operators below (and including) a root row.

    Returns
    -------
    dict[int, list[int]]
        A mapping from row number to the row numbers of its direct children. It contains an entry for each row that is part
        of the tree, leaves map to an empty list. Since dictionaries retain insertion order, iterating over the mapping
        yields the rows in depth-first pre-order.

    Raises
    ------
    FormatError
        If a row is claimed as a direct child by more than one operator, i.e. the glyphs do not describe a tree
    """
    tree: dict[int, list[int]] = {}
    claimed: set[int] = {root_row}
    stack = [root_row]
    while stack:
        current = stack.pop()
        children = find_children(rows, current, id_col)
        for child in children:
            if child in claimed:
                raise FormatError("Operator is attached to multiple parent operators", rows[child][id_col])
            claimed.add(child)
        tree[current] = children
        stack.extend(reversed(children))
    return tree


def extract_operator_id(field: str) -> str:
    """Strips all tree-drawing glyphs and surrounding whitespace from an id column value, e.g. *└─TableFullScan_5*."""
    return field.strip("".join(TreeGlyphs)).strip()


def match_operator_type(op_id: str) -> OperatorType:
    """Classifies an operator based on its identifier.

    The classification is a case-insensitive substring search with a fixed precedence: joins are checked first, then
    table operators, then index operators, and only then selections, projections and point gets. As a consequence,
    *IndexHashJoin_7* is a hash join, not an index operator.
    """
    x = op_id.lower()
    if "join" in x:
        if "hash" in x:
            return OperatorType.HashJoin
        elif "merge" in x:
            return OperatorType.MergeJoin
        elif "index" in x:
            return OperatorType.IndexJoin
        return OperatorType.Unknown
    if "table" in x:
        if "reader" in x:
            return OperatorType.TableReader
        elif "scan" in x:
            return OperatorType.TableScan
        return OperatorType.Unknown
    if "index" in x:
        if "reader" in x:
            return OperatorType.IndexReader
        elif "scan" in x:
            return OperatorType.IndexScan
        elif "lookup" in x:
            return OperatorType.IndexLookup
        return OperatorType.Unknown
    if "selection" in x:
        return OperatorType.Selection
    if "projection" in x:
        return OperatorType.Projection
    if "point" in x:
        return OperatorType.PointGet
    return OperatorType.Unknown


def parse_task_type(task: str) -> TaskType:
    """Determines the execution tier from the task column, e.g. *root*, *cop[tikv]* or *batchCop[tiflash]*.

    Unrecognized values fall back to the storage engine.
    """
    task = task.strip().lower()
    if task == "root":
        return TaskType.Root
    if ColumnarEngineMarker in task:
        return TaskType.ColumnarEngine
    return TaskType.StorageEngine


def split_kvs(text: str) -> dict[str, str]:
    """Extracts the ``key:value`` pairs from an auxiliary column such as *table:t1, index:idx_a, keep order:false*.

    Entries that do not consist of exactly one key and one value are skipped. This includes the fragments of values that
    themselves contain commas, e.g. the ``+inf]`` in ``range:[-inf,+inf]``.
    """
    kvs: dict[str, str] = {}
    for entry in text.split(","):
        fields = entry.split(":")
        if len(fields) == 2:
            kvs[fields[0].strip()] = fields[1].strip()
    return kvs


def parse_join_type(operator_info: str) -> JoinType:
    """Determines the join kind from the operator info of a join operator, e.g. *left outer join, equal:[...]*."""
    info = operator_info.lower()
    return next((join_type for phrase, join_type in _JoinTypePhrases if phrase in info), JoinType.Unknown)

"""Turns the split rows of an *EXPLAIN* report into a `Plan`.

The two report dialects only differ in their column layout. Both are therefore handled by the same assembler, which is
configured by a `ColumnLayout`. The layout names the columns that hold the operator identifier, the estimate, the task and
the auxiliary key/value data. Additional dialects can be supported by supplying a custom layout to `parse` or
`parse_text`, without touching the parser itself.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from . import _explain as explain
from ._core import OperatorType, PlanVersion, match_version
from ._qep import Operator, Plan
from .util.dicts import frozendict
from .util.errors import FormatError, UnsupportedVersionError


@dataclass(frozen=True)
class ColumnMapping:
    """The positions of the semantic columns within the rows of one specific report.

    Optional columns that are not present in the report are *None*. `width` is the number of columns that each row must
    have.
    """

    id_col: int
    est_rows_col: int
    task_col: int
    operator_info_col: Optional[int]
    attribute_cols: tuple[int, ...]
    actual_rows_col: Optional[int]
    width: int


@dataclass(frozen=True)
class ColumnLayout:
    """Describes where a report dialect stores the different operator properties.

    Columns are referenced by their header names. If a report is parsed without its header (see `parse`), the `columns`
    act as the positional default.

    Attributes
    ----------
    version : PlanVersion
        The dialect that is described by the layout
    columns : tuple[str, ...]
        The default header of the dialect, in column order
    est_rows : str
        The column containing the optimizer's row estimate
    id : str
        The column containing the tree-drawn operator identifiers
    task : str
        The column containing the execution tier
    operator_info : str
        The column containing the free-text operator info. Join kinds are read from here.
    attribute_columns : tuple[str, ...]
        The columns that contain ``key:value`` pairs, e.g. the scanned table. If multiple columns contain the same key, the
        first column wins.
    actual_rows : str
        The column containing the actual row count of *EXPLAIN ANALYZE* reports. This column is optional and can be empty
        if the dialect does not provide it.
    """

    version: PlanVersion
    columns: tuple[str, ...]
    est_rows: str
    id: str = "id"
    task: str = "task"
    operator_info: str = "operator info"
    attribute_columns: tuple[str, ...] = ("operator info",)
    actual_rows: str = ""

    def resolve(self, header: Optional[Sequence[str]] = None) -> ColumnMapping:
        """Determines the column positions for a specific report.

        Parameters
        ----------
        header : Optional[Sequence[str]], optional
            The (stripped) column names of the report. If omitted, the default `columns` of the layout are assumed.

        Returns
        -------
        ColumnMapping
            The positions of all semantic columns

        Raises
        ------
        FormatError
            If the header lacks the identifier, estimate or task column
        """
        names = list(header) if header is not None else list(self.columns)
        positions: dict[str, int] = {}
        for idx, name in enumerate(names):
            positions.setdefault(name, idx)

        for required in (self.id, self.est_rows, self.task):
            if required not in positions:
                raise FormatError(f"Column '{required}' is missing from the {self.version} report header", names)

        return ColumnMapping(
            id_col=positions[self.id],
            est_rows_col=positions[self.est_rows],
            task_col=positions[self.task],
            operator_info_col=positions.get(self.operator_info),
            attribute_cols=tuple(positions[col] for col in self.attribute_columns if col in positions),
            actual_rows_col=positions.get(self.actual_rows) if self.actual_rows else None,
            width=len(names)
        )


V3Layout = ColumnLayout(
    version=PlanVersion.V3,
    columns=("id", "count", "task", "operator info"),
    est_rows="count"
)
"""Layout of TiDB 3.x reports. Scanned tables and indexes are part of the operator info."""

V4Layout = ColumnLayout(
    version=PlanVersion.V4,
    columns=("id", "estRows", "task", "access object", "operator info"),
    est_rows="estRows",
    attribute_columns=("access object", "operator info"),
    actual_rows="actRows"
)
"""Layout of TiDB 4.x reports. Scanned tables and indexes are stored in a dedicated *access object* column."""

DefaultLayouts: Mapping[PlanVersion, ColumnLayout] = frozendict({
    PlanVersion.V3: V3Layout,
    PlanVersion.V4: V4Layout,
})
"""The layouts that are used if no custom layout is given."""


def normalize_sql(sql: str) -> str:
    """Removes surrounding whitespace and the trailing semicolon from a query."""
    return sql.strip().removesuffix(";").strip()


def _parse_row_count(text: str, *, op_id: str, column: str) -> float:
    try:
        value = float(text.strip())
    except ValueError:
        raise FormatError(f"Invalid {column} value for operator {op_id}", text.strip())
    if not value >= 0:
        raise FormatError(f"Negative or undefined {column} value for operator {op_id}", text.strip())
    return value


def _make_operator(row: Sequence[str], mapping: ColumnMapping, layout: ColumnLayout, *,
                   children: Sequence[Operator]) -> Operator:
    """Builds the operator for a single report row, once all of its children have been built."""
    op_id = explain.extract_operator_id(row[mapping.id_col])
    if not op_id:
        raise FormatError("Missing operator identifier", row[mapping.id_col])

    op_type = explain.match_operator_type(op_id)
    est_rows = _parse_row_count(row[mapping.est_rows_col], op_id=op_id, column=layout.est_rows)
    task = explain.parse_task_type(row[mapping.task_col])
    operator_info = row[mapping.operator_info_col].strip() if mapping.operator_info_col is not None else ""

    attributes: dict[str, str] = {}
    for col in mapping.attribute_cols:
        for key, value in explain.split_kvs(row[col]).items():
            attributes.setdefault(key, value)

    actual_rows = None
    if mapping.actual_rows_col is not None and row[mapping.actual_rows_col].strip():
        actual_rows = _parse_row_count(row[mapping.actual_rows_col], op_id=op_id, column=layout.actual_rows)

    return Operator(
        op_id, op_type,
        est_rows=est_rows,
        task=task,
        children=children,
        table=attributes.get("table", "") if op_type.is_scan() else "",
        index=attributes.get("index", "") if op_type == OperatorType.IndexScan else "",
        join_type=explain.parse_join_type(operator_info) if op_type.is_join() else None,
        actual_rows=actual_rows,
        operator_info=operator_info,
        attributes=attributes
    )


def assemble(layout: ColumnLayout, sql: str, explain_rows: Sequence[Sequence[str]], *,
             header: Optional[Sequence[str]] = None) -> Plan:
    """Builds a plan from the split body rows of a report.

    The first row is the root operator. The tree shape is reconstructed from the id column, while the remaining columns are
    mapped onto the operator properties according to the `layout`.

    Parameters
    ----------
    layout : ColumnLayout
        The column layout of the report dialect
    sql : str
        The query that the report belongs to. It is normalized before being stored in the plan.
    explain_rows : Sequence[Sequence[str]]
        The body rows of the report, as produced by `split_rows`
    header : Optional[Sequence[str]], optional
        The column names of the report. If omitted, the default columns of the layout are assumed.

    Returns
    -------
    Plan
        The plan

    Raises
    ------
    FormatError
        If the report is empty, rows have an unexpected number of columns, estimates cannot be parsed, operator identifiers
        are duplicated, some rows are not connected to the root operator or the tree glyphs do not describe a proper
        tree.
    """
    mapping = layout.resolve(header)
    if not explain_rows:
        raise FormatError("Explain result does not contain any operators")
    for row in explain_rows:
        if len(row) != mapping.width:
            raise FormatError(f"Expected {mapping.width} columns but found {len(row)}",
                              explain.ColumnDelimiter.join(row))

    seen_ids: set[str] = set()
    for row in explain_rows:
        op_id = explain.extract_operator_id(row[mapping.id_col])
        if op_id in seen_ids:
            raise FormatError("Duplicate operator identifier", op_id)
        seen_ids.add(op_id)

    tree = explain.build_tree(explain_rows, mapping.id_col)
    if len(tree) != len(explain_rows):
        detached = min(set(range(len(explain_rows))) - tree.keys())
        raise FormatError("Operator is not connected to the root operator", explain_rows[detached][mapping.id_col])
    misplaced = next((row_no for pos, row_no in enumerate(tree) if pos != row_no), None)
    if misplaced is not None:
        raise FormatError("Operator is printed outside of its parent's sub-tree",
                          explain_rows[misplaced][mapping.id_col])

    operators: dict[int, Operator] = {}
    for row_no in reversed(tree):
        children = [operators[child_no] for child_no in tree[row_no]]
        operators[row_no] = _make_operator(explain_rows[row_no], mapping, layout, children=children)

    return Plan(normalize_sql(sql), layout.version, operators[0])


def parse(version: str | PlanVersion, sql: str, explain_rows: Sequence[Sequence[str]], *,
          header: Optional[Sequence[str]] = None, layout: Optional[ColumnLayout] = None) -> Plan:
    """Builds a plan from already split report rows of a specific dialect.

    Parameters
    ----------
    version : str | PlanVersion
        The dialect of the report. This can be a dialect tag or a full TiDB version string (see `match_version`).
    sql : str
        The query that the report belongs to
    explain_rows : Sequence[Sequence[str]]
        The body rows of the report
    header : Optional[Sequence[str]], optional
        The column names of the report. If omitted, the rows have to follow the default column order of the dialect.
    layout : Optional[ColumnLayout], optional
        A custom column layout. By default, the layout is selected from `DefaultLayouts` based on the version.

    Returns
    -------
    Plan
        The plan

    Raises
    ------
    UnsupportedVersionError
        If the version does not belong to a supported dialect
    FormatError
        If the rows are malformed. See `assemble` for details.
    """
    matched_version = match_version(version)
    if matched_version == PlanVersion.Unknown:
        raise UnsupportedVersionError(version)
    layout = layout if layout is not None else DefaultLayouts[matched_version]
    return assemble(layout, sql, explain_rows, header=header)


def parse_text(sql: str, explain_text: str, *, layout: Optional[ColumnLayout] = None) -> Plan:
    """Builds a plan from the raw textual output of TiDB's *EXPLAIN* statement.

    The dialect is inferred from the header of the report.

    Parameters
    ----------
    sql : str
        The query that was explained
    explain_text : str
        The complete output, including the table borders
    layout : Optional[ColumnLayout], optional
        A custom column layout that should be used instead of the default layout of the detected dialect

    Returns
    -------
    Plan
        The plan

    Raises
    ------
    FormatError
        If the output is not a well-formed report
    """
    lines = explain.extract_table(explain_text)
    if not explain.is_border_line(lines[2]):
        raise FormatError("Report header must consist of a single line", lines[2])

    header_line = lines[1]
    version = explain.identify_version(header_line)
    header = explain.split_header(header_line)
    rows = explain.split_rows(lines[3:-1])
    return parse(version, sql, rows, header=header, layout=layout)

"""Structural comparison of plans, e.g. to detect plan changes between two TiDB versions."""
from __future__ import annotations

from ._core import OperatorType
from ._qep import Operator, Plan

SqlMismatch = "differing SQL text"


def compare(first_plan: Plan, second_plan: Plan) -> tuple[str, bool]:
    """Checks, whether two plans are structurally equivalent.

    Two plans are equivalent if they belong to the same query and their operator trees have the same shape, with matching
    operator types and tasks at each position. For scans, the scanned table (and index) have to match as well. Operator
    identifiers and estimates are not compared, since they routinely change between versions.

    The comparison stops at the first difference. It never raises an error, all differences are reported as part of
    the result.

    Parameters
    ----------
    first_plan : Plan
        The first plan
    second_plan : Plan
        The second plan

    Returns
    -------
    tuple[str, bool]
        A description of the first difference and whether the plans are equivalent. If they are, the description is empty.
    """
    if first_plan.sql != second_plan.sql:
        return SqlMismatch, False
    return compare_operators(first_plan.root, second_plan.root)


def compare_operators(first_op: Operator, second_op: Operator) -> tuple[str, bool]:
    """Checks, whether the sub-plans rooted at two operators are structurally equivalent.

    See Also
    --------
    compare
    """
    if first_op.op_type != second_op.op_type:
        return (f"{first_op.id} and {second_op.id} have different operator types "
                f"({first_op.op_type} vs. {second_op.op_type})"), False
    if first_op.task != second_op.task:
        return f"{first_op.id} and {second_op.id} have different task types ({first_op.task} vs. {second_op.task})", False

    first_children, second_children = first_op.children, second_op.children
    if len(first_children) != len(second_children):
        return (f"{first_op.id} and {second_op.id} have different children lengths "
                f"({len(first_children)} vs. {len(second_children)})"), False

    match first_op.op_type:
        case OperatorType.TableScan if first_op.table != second_op.table:
            return f"{first_op.id}:{first_op.table}, {second_op.id}:{second_op.table}", False
        case OperatorType.IndexScan if first_op.table != second_op.table or first_op.index != second_op.index:
            return (f"{first_op.id}:{first_op.table}.{first_op.index}, "
                    f"{second_op.id}:{second_op.table}.{second_op.index}"), False

    for first_child, second_child in zip(first_children, second_children):
        reason, same = compare_operators(first_child, second_child)
        if not same:
            return reason, same
    return "", True

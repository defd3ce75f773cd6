"""Compares entire workloads of plans, e.g. all queries of a benchmark before and after a TiDB upgrade.

A workload is simply a mapping from query labels (such as *q1* or *1a*) to plans. The typical workflow is to collect the
*EXPLAIN* output of all queries on two TiDB versions, to parse both collections with `parse_workload` and to hand the
results to `compare_workloads`::

    baseline = parse_workload(explains_v3)
    candidate = parse_workload(explains_v4)
    report = compare_workloads(baseline, candidate)
    report[~report["same"]]  # all queries with changed plans

How the *EXPLAIN* output is obtained in the first place is up to the caller.
"""
from __future__ import annotations

import warnings
from collections.abc import Mapping
from typing import Optional

import pandas as pd

from ._compare import compare
from ._core import PlanVersion, check_version
from ._dialects import parse_text
from ._qep import Plan
from .util import df as df_utils
from .util.errors import FormatError
from .util.logging import make_logger, timestamp

COL_LABEL = "label"
COL_SAME = "same"
COL_REASON = "reason"

MissingInBaseline = "missing in baseline"
MissingInCandidate = "missing in candidate"


def parse_workload(explains: Mapping[str, tuple[str, str]], *, version: Optional[str | PlanVersion] = None,
                   skip_errors: bool = False, verbose: bool = False) -> dict[str, Plan]:
    """Parses the *EXPLAIN* output of all queries of a workload.

    Parameters
    ----------
    explains : Mapping[str, tuple[str, str]]
        Maps each query label to a pair of query text and raw *EXPLAIN* output
    version : Optional[str | PlanVersion], optional
        The TiDB version that produced the output. If given, all reports have to belong to the same dialect. By default,
        the dialect is inferred for each report separately.
    skip_errors : bool, optional
        Whether malformed reports should be skipped (with a warning) instead of aborting the entire workload. Defaults to
        *False*.
    verbose : bool, optional
        Whether progress information should be written to stderr

    Returns
    -------
    dict[str, Plan]
        The plans, in the same order as the input

    Raises
    ------
    FormatError
        If a report is malformed and `skip_errors` is disabled, or if a report belongs to a different dialect than the
        given version
    UnsupportedVersionError
        If the given version does not belong to a supported dialect
    """
    log = make_logger(verbose, prefix=timestamp)
    expected_version = None
    if version is not None:
        expected_version = check_version(version)

    plans: dict[str, Plan] = {}
    for label, (sql, explain_text) in explains.items():
        try:
            plan = parse_text(sql, explain_text)
            if expected_version is not None and plan.version != expected_version:
                raise FormatError(f"Expected a {expected_version} report but got a {plan.version} report", label)
        except FormatError as e:
            if not skip_errors:
                raise
            warnings.warn(f"Skipping query {label}: {e}")
            continue
        log("Parsed query", label, f"({len(plan)} operators)")
        plans[label] = plan
    return plans


def compare_workloads(baseline: Mapping[str, Plan], candidate: Mapping[str, Plan], *,
                      verbose: bool = False) -> pd.DataFrame:
    """Compares the plans of two workloads query by query.

    Parameters
    ----------
    baseline : Mapping[str, Plan]
        The reference plans, e.g. obtained on the old TiDB version
    candidate : Mapping[str, Plan]
        The plans to check, e.g. obtained on the new TiDB version
    verbose : bool, optional
        Whether each changed plan should be reported on stderr

    Returns
    -------
    pd.DataFrame
        One row per query label that occurs in either workload, with columns *label*, *same* and *reason*. The rows are
        sorted naturally by label. Queries that are only present in one of the workloads are never *same*.

    See Also
    --------
    compare
    """
    log = make_logger(verbose, prefix=timestamp)
    labels = list(baseline.keys()) + [label for label in candidate.keys() if label not in baseline]

    results: list[dict[str, object]] = []
    for label in labels:
        if label not in baseline:
            reason, same = MissingInBaseline, False
        elif label not in candidate:
            reason, same = MissingInCandidate, False
        else:
            reason, same = compare(baseline[label], candidate[label])

        if not same:
            log("Plan changed for query", label, "::", reason)
        results.append({COL_LABEL: label, COL_SAME: same, COL_REASON: reason})

    report = df_utils.as_df(results, columns=[COL_LABEL, COL_SAME, COL_REASON])
    return df_utils.sort_natural(report, COL_LABEL)

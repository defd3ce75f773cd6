"""Utilities to work with Pandas data frames"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Any

import natsort
import numpy as np
import pandas as pd


def as_df(data: Collection[dict[str, Any]], *, columns: Iterable[str] = ()) -> pd.DataFrame:
    """Generates a new Pandas `DataFrame` with one row per dictionary.

    All dictionaries have to consist of the same keys, each key becomes a column. If there is no data, an empty data frame
    with the given `columns` is returned. This keeps downstream column access working for empty workloads.
    """
    columns = list(columns)
    if not data:
        return pd.DataFrame({col: [] for col in columns})
    template = next(iter(data))
    df_container: dict[str, list[Any]] = {col: [] for col in (columns or template.keys())}
    for row in data:
        for key in df_container.keys():
            df_container[key].append(row[key])
    return pd.DataFrame(df_container)


def sort_natural(df: pd.DataFrame, by_column: str) -> pd.DataFrame:
    """Sorts a data frame by natural ordering of a label column.

    In contrast to lexicographic sorting, natural sorting handles numeric labels in a better way: labels like
    q1, q2 and q10 are sorted in this order instead of q1, q10, q2. The original data frame is not modified.
    """
    if df.empty:
        return df.copy()
    return df.sort_values(by=by_column,
                          key=lambda series: np.argsort(natsort.index_natsorted(series))).reset_index(drop=True)

from __future__ import annotations

from enum import Enum

from .util.errors import UnsupportedVersionError


class PlanVersion(Enum):
    """The report dialects that plancheck understands.

    TiDB changed the layout of its *EXPLAIN* output between the 3.x and 4.x release lines. The newer dialect renamed the
    estimate column to *estRows*, introduced a dedicated *access object* column and marks the storage engine of
    coprocessor tasks. `Unknown` is never attached to a parsed plan. It only marks the result of a failed version match.
    """

    V3 = "v3"
    V4 = "v4"
    Unknown = "unknown"

    def __json__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class OperatorType(Enum):
    """The closed taxonomy of physical operators that plans distinguish.

    Each TiDB operator name is mapped onto one of these types by substring matching (see `match_operator_type`). Operators
    that are not covered by the taxonomy, e.g. aggregations or sorts, become `Unknown` rather than causing an error.
    """

    Unknown = "Unknown"
    HashJoin = "HashJoin"
    IndexJoin = "IndexJoin"
    MergeJoin = "MergeJoin"
    Selection = "Selection"
    Projection = "Projection"
    TableReader = "TableReader"
    TableScan = "TableScan"
    IndexReader = "IndexReader"
    IndexScan = "IndexScan"
    IndexLookup = "IndexLookup"
    PointGet = "PointGet"

    def is_join(self) -> bool:
        return self in _JoinTypes

    def is_scan(self) -> bool:
        return self in _ScanTypes

    def __json__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


_JoinTypes = frozenset({OperatorType.HashJoin, OperatorType.IndexJoin, OperatorType.MergeJoin})
_ScanTypes = frozenset({OperatorType.TableScan, OperatorType.IndexScan})


class TaskType(Enum):
    """Describes which execution tier runs an operator.

    `Root` operators run on the TiDB server itself. `StorageEngine` operators are pushed down to the row store (TiKV) and
    `ColumnarEngine` operators to the analytical column store (TiFlash).
    """

    Root = "root"
    StorageEngine = "tikv"
    ColumnarEngine = "tiflash"

    def __json__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class JoinType(Enum):
    """The logical join kinds that TiDB reports in the operator info of its join operators."""

    Unknown = "unknown"
    Inner = "inner join"
    LeftOuter = "left outer join"
    RightOuter = "right outer join"
    Semi = "semi join"
    AntiSemi = "anti semi join"
    LeftOuterSemi = "left outer semi join"
    AntiLeftOuterSemi = "anti left outer semi join"

    def __json__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


def match_version(version: str | PlanVersion) -> PlanVersion:
    """Maps a free-text database version string onto a supported report dialect.

    The match is a case-insensitive substring search for *v3* and *v4*, which covers both plain dialect tags and full
    TiDB version strings such as *5.7.25-TiDB-v4.0.0*. Anything else yields `PlanVersion.Unknown`.

    Parameters
    ----------
    version : str | PlanVersion
        The version string. Dialect tags are passed through as-is.

    Returns
    -------
    PlanVersion
        The matching dialect, or `PlanVersion.Unknown`

    See Also
    --------
    check_version
    """
    if isinstance(version, PlanVersion):
        return version
    normalized = version.lower()
    if "v3" in normalized:
        return PlanVersion.V3
    elif "v4" in normalized:
        return PlanVersion.V4
    return PlanVersion.Unknown


def check_version(version: str | PlanVersion) -> PlanVersion:
    """Like `match_version`, but rejects unsupported versions.

    Raises
    ------
    UnsupportedVersionError
        If the version does not match any supported dialect
    """
    matched = match_version(version)
    if matched == PlanVersion.Unknown:
        raise UnsupportedVersionError(version)
    return matched

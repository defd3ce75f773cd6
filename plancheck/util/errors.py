"""Contains the errors that are raised while turning *EXPLAIN* reports into plans."""
from __future__ import annotations

from typing import Optional


class FormatError(ValueError):
    """Indicates that an *EXPLAIN* report is structurally broken and cannot be turned into a plan.

    Typical causes are truncated output (fewer than three border lines), rows that do not have the same number of columns
    as the header, or estimates that are not valid numbers.

    Parameters
    ----------
    message : str, optional
        A textual description of the problem. Can be left empty by default.
    context : Optional[object], optional
        The offending line, row or token. Mainly intended for debugging purposes.
    """

    def __init__(self, message: str = "", context: Optional[object] = None) -> None:
        super().__init__(message if context is None else f"{message} (at {context!r})")
        self.ctx = context


class UnsupportedVersionError(ValueError):
    """Indicates that a version string or dialect tag does not belong to any supported report dialect.

    Parameters
    ----------
    version : object
        The rejected version string or tag
    """

    def __init__(self, version: object) -> None:
        super().__init__(f"Unsupported TiDB version '{version}'")
        self.version = version


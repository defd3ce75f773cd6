"""Contains print-based logging helpers used by the workload tooling."""
from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import datetime
from typing import IO


def timestamp() -> str:
    """Provides the current time as a normalized string, suitable as a log prefix."""
    return datetime.now().strftime("%y-%m-%d %H:%M:%S")


def make_logger(enabled: bool = True, *, file: IO[str] = sys.stderr,
                prefix: str | Callable[[], str] = "") -> Callable:
    """Creates a `print`-like logging function.

    If logging is disabled, the returned function is a no-op. This allows long-running functions to log unconditionally
    without re-checking a *verbose* flag at every call site.

    Parameters
    ----------
    enabled : bool, optional
        Whether anything should be written at all, by default *True*
    file : IO[str], optional
        Where the log entries go, by default ``sys.stderr``
    prefix : str | Callable[[], str], optional
        Prepended to every entry. A callable is evaluated anew for each entry, e.g. `timestamp`.

    Returns
    -------
    Callable
        The logging function
    """
    def _log(*args, **kwargs) -> None:
        if prefix:
            args = [prefix() if callable(prefix) else prefix, *args]
        kwargs.pop("file", None)
        print(*args, file=file, **kwargs)

    def _dummy_log(*args, **kwargs) -> None:
        pass

    return _log if enabled else _dummy_log

"""Utilities to export plans and operators to JSON.

Any object can take part in the export by implementing a `__json__` method that returns a JSON-izeable representation
of itself (e.g. a `dict` or a `list`). The `JsonizeEncoder` picks this method up automatically. There is no inverse
direction: plans are obtained by parsing *EXPLAIN* reports, never by loading JSON.
"""

from __future__ import annotations

import enum
import json
from collections import UserDict
from typing import Any

jsondict = dict
"""Type alias for a JSON-izeable dictionary."""


class JsonizeEncoder(json.JSONEncoder):
    """JSON encoder that understands enums, frozen dictionaries and objects with a `__json__` method."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, enum.Enum):
            return obj.value
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj)
        elif isinstance(obj, UserDict):
            return dict(obj)
        elif hasattr(obj, "__json__"):
            return obj.__json__()
        return json.JSONEncoder.default(self, obj)


def to_json(obj: Any, *args, **kwargs) -> str | None:
    """Transforms any object to a JSON string using the `JsonizeEncoder`.

    All other arguments are passed on to `json.dumps`.
    """
    if obj is None:
        return None
    kwargs.pop("cls", None)
    return json.dumps(obj, *args, cls=JsonizeEncoder, **kwargs)

"""Provides a read-only dictionary, used for the immutable parts of plans and for the dialect registry."""
from __future__ import annotations

import collections
import collections.abc
import warnings
from collections.abc import Mapping
from typing import TypeVar

K = TypeVar("K")
V = TypeVar("V")


def hash_dict(dictionary: Mapping[K, V]) -> int:
    """Calculates a hash value based on the current dict contents (keys and values)."""
    keys = list(dictionary.keys())
    values = []
    for val in dictionary.values():
        if isinstance(val, collections.abc.Hashable):
            values.append(hash(val))
        elif isinstance(val, (list, set)):
            values.append(hash(tuple(val)))
        elif isinstance(val, dict):
            values.append(hash_dict(val))
        else:
            warnings.warn(f"Unhashable type, skipping: {type(val)}")
    return hash((tuple(keys), tuple(values)))


class frozendict(collections.UserDict[K, V]):
    """Read-only variant of a normal Python dictionary.

    Once the dictionary has been created, its key/value pairs can no longer be modified. At the same time, this allows the
    dictionary to be hashable.

    Parameters
    ----------
    items : any, optional
        Supports the same argument types as the normal dictionary. If no items are supplied, an empty frozen dictionary is
        returned.
    """

    def __init__(self, items=None) -> None:
        self._frozen = False
        super().__init__(items)
        self._frozen = True

    def __setitem__(self, key: K, item: V) -> None:
        if self._frozen:
            raise TypeError("Cannot set frozendict entries after creation")
        return super().__setitem__(key, item)

    def __delitem__(self, key: K) -> None:
        if self._frozen:
            raise TypeError("Cannot remove frozendict entries after creation")
        return super().__delitem__(key)

    def __hash__(self) -> int:
        return hash_dict(self)

    def __repr__(self) -> str:
        return f"frozendict({self.data!r})"

from __future__ import annotations

from typing import TypeVar

T = TypeVar("T")
"""Generic type variable for the tree helpers."""

"""
Values shared by every loop tag: past-end actions, the past-end sentinel and
the group direction vocabulary.
"""

from __future__ import annotations

from enum import Enum


class PastEndAction(str, Enum):
    """What happens to cells that reference an exhausted collection."""

    CLEAR_CELL = "clear"
    REMOVE_CELL = "remove"
    REPLACE_EXPR = "replaceExpr"


class GroupDir(str, Enum):
    ROWS = "rows"
    COLS = "cols"
    NONE = "none"


class _PastEnd:
    """Marker bound to a loop variable once its collection is exhausted."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PAST_END"

    def __bool__(self) -> bool:
        return False


PAST_END = _PastEnd()

"""Loop tags and the engine that copies and transforms their blocks."""

from loops.base import BaseLoopTag
from loops.for_each import ForEachTag
from loops.for_range import ForTag
from loops.multi_for_each import MultiForEachTag
from loops.status import ForLoopTagStatus, LoopTagStatus

__all__ = [
    "BaseLoopTag",
    "ForEachTag",
    "ForLoopTagStatus",
    "ForTag",
    "LoopTagStatus",
    "MultiForEachTag",
]

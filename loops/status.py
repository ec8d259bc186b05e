"""
Loop status objects exposed to templates through ``varStatus``.

Templates read them (``${status.index}``, ``${status.is_last}``); only the
loop engine that created a status may advance it.
"""

from __future__ import annotations

from exceptions import TransformError


class LoopTagStatus:
    def __init__(self, owner: object, num_iterations: int, index: int = 0):
        if owner is None:
            raise ValueError("A loop status needs an owner")
        self._owner = owner
        self._num_iterations = num_iterations
        self._index = index

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index + 1 == self._num_iterations

    @property
    def num_iterations(self) -> int:
        return self._num_iterations

    def _advance(self, owner: object) -> None:
        if owner is not self._owner:
            raise TransformError("Only the loop that owns a status may advance it")
        self._index += 1

    def __repr__(self) -> str:
        return f"{type(self).__name__}(index={self._index}, num_iterations={self._num_iterations})"


class ForLoopTagStatus(LoopTagStatus):
    """Status of a ``jt:for`` loop; also knows the range and the current value."""

    def __init__(self, owner: object, num_iterations: int, start: int, end: int, step: int):
        super().__init__(owner, num_iterations)
        self.start = start
        self.end = end
        self.step = step

    @property
    def value(self) -> int:
        return self.start + self._index * self.step

"""
Events fired around tag processing and loop iterations, and the listeners
that receive them.

Listeners are plain callables held on a small model.  ``before`` may veto the
processing by returning ``False``; ``after`` is informational.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, SkipValidation

from dto.block import Block


class TagEvent(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    sheet: Any
    block: Block
    # Same dict the tag sees, so listeners may add beans.
    beans: SkipValidation[Dict[str, Any]]


class TagLoopEvent(TagEvent):
    index: int


class TagListener(BaseModel):
    before: Optional[Callable[[TagEvent], bool]] = None
    after: Optional[Callable[[TagEvent], None]] = None

    def fire_before(self, event: TagEvent) -> bool:
        if self.before is None:
            return True
        return bool(self.before(event))

    def fire_after(self, event: TagEvent) -> None:
        if self.after is not None:
            self.after(event)


class TagLoopListener(BaseModel):
    before: Optional[Callable[[TagLoopEvent], bool]] = None
    after: Optional[Callable[[TagLoopEvent], None]] = None

    def fire_before(self, event: TagLoopEvent) -> bool:
        if self.before is None:
            return True
        return bool(self.before(event))

    def fire_after(self, event: TagLoopEvent) -> None:
        if self.after is not None:
            self.after(event)

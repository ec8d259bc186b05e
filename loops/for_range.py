from __future__ import annotations

from typing import Iterator, List, Optional

from dto.block import Block
from dto.context import TagContext
from exceptions import TagParseError
from expressions.attributes import evaluate_int, evaluate_non_zero_int, evaluate_string
from loops.base import BaseLoopTag
from loops.status import ForLoopTagStatus, LoopTagStatus

ATTR_VAR = "var"
ATTR_START = "start"
ATTR_END = "end"
ATTR_STEP = "step"


class ForTag(BaseLoopTag):
    """``<jt:for var="i" start="1" end="10" step="2">`` - a counted loop, ends inclusive."""

    name = "for"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.var_name: Optional[str] = None
        self.start = 0
        self.end = 0
        self.step = 1

    def required_attributes(self) -> List[str]:
        return super().required_attributes() + [ATTR_VAR, ATTR_START, ATTR_END]

    def optional_attributes(self) -> List[str]:
        return super().optional_attributes() + [ATTR_STEP]

    def validate_attributes(self) -> None:
        super().validate_attributes()
        if self.bodiless:
            raise TagParseError(f"For tags must have a body.  Bodiless For tag found{self.location}")

        beans = self.context.beans
        attrs = self.attributes
        ev = self.evaluator
        self.var_name = evaluate_string(ev, attrs[ATTR_VAR], beans)
        self.start = evaluate_int(ev, attrs[ATTR_START], beans, ATTR_START, 0, self.location)
        self.end = evaluate_int(ev, attrs[ATTR_END], beans, ATTR_END, 0, self.location)
        self.step = evaluate_non_zero_int(ev, attrs.get(ATTR_STEP), beans, ATTR_STEP, 1, self.location)

    # -------------------------------------------------------------------
    # Loop capabilities
    # -------------------------------------------------------------------

    def num_iterations(self) -> int:
        if (self.step > 0 and self.start <= self.end) or (self.step < 0 and self.start >= self.end):
            # Both operands share a sign here, so floor division truncates.
            return (self.end - self.start) // self.step + 1
        return 0

    def collection_size(self) -> int:
        return self.num_iterations()

    def collection_names(self) -> List[str]:
        return []

    def var_names(self) -> List[str]:
        return [self.var_name]

    def loop_iterator(self) -> Iterator[int]:
        value = self.start
        for _ in range(self.num_iterations()):
            yield value
            value += self.step

    def status_object(self, owner: object) -> LoopTagStatus:
        return ForLoopTagStatus(owner, self.num_iterations(), self.start, self.end, self.step)

    def before_item(self, context: TagContext, block: Block, item: int, index: int) -> None:
        context.beans[self.var_name] = item

    def after_item(self, context: TagContext, block: Block, item: int, index: int) -> None:
        context.beans.pop(self.var_name, None)

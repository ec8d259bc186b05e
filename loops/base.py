"""
Common attributes and the capability interface of the loop tags.

Every loop kind answers a handful of questions (how many iterations, how
big the real collection is, what item goes with each iteration, what to bind
before and unbind after each one); ``LoopEngine`` does everything else.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Iterator, List, Optional

from dto.block import Block, Direction
from dto.context import TagContext
from dto.events import TagLoopListener
from dto.loop import GroupDir, PastEndAction
from expressions.attributes import (
    evaluate_boolean,
    evaluate_object,
    evaluate_string,
    evaluate_string_specific_values,
)
from loops.engine import LoopEngine
from loops.status import LoopTagStatus
from tags.base import BaseTag
from transform.constants import DEFAULT_PAST_END_ACTION

logger = logging.getLogger(__name__)

ATTR_COPY_RIGHT = "copyRight"
ATTR_FIXED = "fixed"
ATTR_PAST_END_ACTION = "pastEndAction"
ATTR_REPLACE_VALUE = "replaceValue"
ATTR_GROUP_DIR = "groupDir"
ATTR_COLLAPSE = "collapse"
ATTR_ON_LOOP_PROCESSED = "onLoopProcessed"
ATTR_VAR_STATUS = "varStatus"

LOOP_ATTRS = [
    ATTR_COPY_RIGHT,
    ATTR_FIXED,
    ATTR_PAST_END_ACTION,
    ATTR_REPLACE_VALUE,
    ATTR_GROUP_DIR,
    ATTR_COLLAPSE,
    ATTR_ON_LOOP_PROCESSED,
    ATTR_VAR_STATUS,
]


class BaseLoopTag(BaseTag):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.copy_right = False
        self.fixed = False
        self.past_end_action = PastEndAction(DEFAULT_PAST_END_ACTION)
        self.replace_value = ""
        self.group_dir = GroupDir.NONE
        self.collapse = False
        self.loop_listener: Optional[TagLoopListener] = None
        self.var_status: Optional[str] = None

    def optional_attributes(self) -> List[str]:
        return super().optional_attributes() + LOOP_ATTRS

    def validate_attributes(self) -> None:
        super().validate_attributes()
        beans = self.context.beans
        attrs = self.attributes
        ev = self.evaluator

        self.copy_right = evaluate_boolean(ev, attrs.get(ATTR_COPY_RIGHT), beans, ATTR_COPY_RIGHT,
                                           location=self.location)
        if self.copy_right:
            self.context.block.direction = Direction.HORIZONTAL
        self.fixed = evaluate_boolean(ev, attrs.get(ATTR_FIXED), beans, ATTR_FIXED, location=self.location)

        action = evaluate_string_specific_values(
            ev, attrs.get(ATTR_PAST_END_ACTION), beans, ATTR_PAST_END_ACTION,
            [a.value for a in PastEndAction], self.past_end_action.value, self.location,
        )
        self.past_end_action = PastEndAction(action)
        self.replace_value = evaluate_string(ev, attrs.get(ATTR_REPLACE_VALUE), beans, "")

        group_dir = evaluate_string_specific_values(
            ev, attrs.get(ATTR_GROUP_DIR), beans, ATTR_GROUP_DIR,
            [g.value for g in GroupDir], GroupDir.NONE.value, self.location,
        )
        self.group_dir = GroupDir(group_dir)
        self.collapse = evaluate_boolean(ev, attrs.get(ATTR_COLLAPSE), beans, ATTR_COLLAPSE,
                                         location=self.location)
        self.loop_listener = evaluate_object(
            ev, attrs.get(ATTR_ON_LOOP_PROCESSED), beans, ATTR_ON_LOOP_PROCESSED,
            TagLoopListener, location=self.location,
        )
        self.var_status = evaluate_string(ev, attrs.get(ATTR_VAR_STATUS), beans)

    def process(self) -> bool:
        return LoopEngine(self).run()

    # -------------------------------------------------------------------
    # Capabilities each loop kind provides
    # -------------------------------------------------------------------

    @abstractmethod
    def num_iterations(self) -> int:
        ...

    @abstractmethod
    def collection_size(self) -> int:
        ...

    @abstractmethod
    def loop_iterator(self) -> Iterator[Any]:
        """One item per iteration, including those past the collection end."""
        ...

    @abstractmethod
    def before_item(self, context: TagContext, block: Block, item: Any, index: int) -> None:
        ...

    @abstractmethod
    def after_item(self, context: TagContext, block: Block, item: Any, index: int) -> None:
        ...

    @abstractmethod
    def collection_names(self) -> List[str]:
        ...

    @abstractmethod
    def var_names(self) -> List[str]:
        ...

    def status_object(self, owner: object) -> LoopTagStatus:
        return LoopTagStatus(owner, self.num_iterations())

from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional

from dto.block import Block
from dto.context import TagContext
from dto.loop import PAST_END
from exceptions import TagParseError
from expressions.attributes import SPEC_SEP, evaluate_collection, evaluate_list, evaluate_non_negative_int, evaluate_string
from expressions.evaluator import BEGIN_EXPR, END_EXPR
from loops.base import BaseLoopTag
from sheet import blocks

logger = logging.getLogger(__name__)

ATTR_COLLECTIONS = "collections"
ATTR_VARS = "vars"
ATTR_INDEX_VAR = "indexVar"
ATTR_LIMIT = "limit"


def collection_name(expression: str) -> Optional[str]:
    begin = expression.find(BEGIN_EXPR)
    end = expression.find(END_EXPR)
    if begin != -1 and end > begin:
        return expression[begin + len(BEGIN_EXPR):end]
    return None


class MultiForEachTag(BaseLoopTag):
    """
    ``<jt:multiForEach collections="${names};${salaries}" vars="name;salary">``

    Iterates several collections side by side.  The loop runs as many
    times as the longest collection; once a shorter collection runs out,
    the cells referring to its variable get the past-end action.
    """

    name = "multiForEach"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.collections: List[List[Any]] = []
        self._collection_names: List[str] = []
        self._var_names: List[str] = []
        self.index_var_name: Optional[str] = None
        self.max_size = 0
        self.limit = 0

    def required_attributes(self) -> List[str]:
        return super().required_attributes() + [ATTR_COLLECTIONS, ATTR_VARS]

    def optional_attributes(self) -> List[str]:
        return super().optional_attributes() + [ATTR_INDEX_VAR, ATTR_LIMIT]

    def validate_attributes(self) -> None:
        super().validate_attributes()
        if self.bodiless:
            raise TagParseError(
                f"MultiForEach tags must have a body.  Bodiless MultiForEach tag found{self.location}"
            )

        beans = self.context.beans
        attrs = self.attributes
        ev = self.evaluator

        self.collections = []
        self._collection_names = []
        for expression in attrs[ATTR_COLLECTIONS].split(SPEC_SEP):
            expression = expression.strip()
            if not expression:
                continue
            collection = evaluate_collection(ev, expression, beans, ATTR_COLLECTIONS, self.location)
            self.collections.append(collection)
            name = collection_name(expression)
            if name:
                self._collection_names.append(name)
            logger.debug('Collection "%s" has size %d', expression, len(collection))

        self._var_names = [str(v).strip() for v in evaluate_list(ev, attrs[ATTR_VARS], beans, [])]

        if not self.collections:
            raise TagParseError(
                f"Must specify at least one Collection in a MultiForEachTag.  None found{self.location}"
            )
        if len(self.collections) != len(self._var_names):
            raise TagParseError(
                "The number of collections and the number of variable names must be the same.  "
                f"Mismatch found{self.location}"
            )

        self.index_var_name = evaluate_string(ev, attrs.get(ATTR_INDEX_VAR), beans)
        self.max_size = max(len(c) for c in self.collections)
        self.limit = evaluate_non_negative_int(
            ev, attrs.get(ATTR_LIMIT), beans, ATTR_LIMIT, self.max_size, self.location
        )
        logger.debug("multiForEach limit=%d", self.limit)

    # -------------------------------------------------------------------
    # Loop capabilities
    # -------------------------------------------------------------------

    def num_iterations(self) -> int:
        return self.limit

    def collection_size(self) -> int:
        return self.max_size

    def collection_names(self) -> List[str]:
        return list(self._collection_names)

    def var_names(self) -> List[str]:
        return list(self._var_names)

    def loop_iterator(self) -> Iterator[List[Any]]:
        for index in range(self.limit):
            yield [c[index] if index < len(c) else PAST_END for c in self.collections]

    def before_item(self, context: TagContext, block: Block, item: List[Any], index: int) -> None:
        beans = context.beans
        past_end_refs: List[str] = []
        for var_name, value in zip(self._var_names, item):
            if value is PAST_END:
                past_end_refs.append(var_name)
            else:
                beans[var_name] = value

        # Copies past the longest collection were already handled as a whole.
        if index < self.collection_size() and past_end_refs:
            blocks.take_past_end_action(
                context, self.workbook_context, block, past_end_refs, self.past_end_action, self.replace_value
            )
        if self.index_var_name:
            beans[self.index_var_name] = index

    def after_item(self, context: TagContext, block: Block, item: List[Any], index: int) -> None:
        beans = context.beans
        for var_name in self._var_names:
            beans.pop(var_name, None)
        if self.index_var_name:
            beans.pop(self.index_var_name, None)

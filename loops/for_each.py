from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional

from dto.block import Block
from dto.context import TagContext
from dto.loop import PAST_END
from exceptions import TagParseError
from expressions.attributes import (
    evaluate_boolean,
    evaluate_collection,
    evaluate_list,
    evaluate_non_negative_int,
    evaluate_string,
)
from expressions.evaluator import BEGIN_EXPR, END_EXPR
from loops.base import BaseLoopTag
from loops.ordering import group_items, parse_order_by, sort_items

logger = logging.getLogger(__name__)

ATTR_ITEMS = "items"
ATTR_VAR = "var"
ATTR_INDEX_VAR = "indexVar"
ATTR_WHERE = "where"
ATTR_LIMIT = "limit"
ATTR_ORDER_BY = "orderBy"
ATTR_GROUP_BY = "groupBy"


class ForEachTag(BaseLoopTag):
    """
    ``<jt:forEach items="${employees}" var="employee">...</jt:forEach>``

    Copies its block once per item of a collection.  ``where`` filters the
    items, ``orderBy`` sorts them (``"name DESC NULLS LAST;salary"``),
    ``groupBy`` replaces them with ``Group`` objects and ``limit`` forces
    the number of copies; copies beyond the collection get the past-end
    action.
    """

    name = "forEach"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.collection: List[Any] = []
        self.collection_name: Optional[str] = None
        self.var_name: Optional[str] = None
        self.index_var_name: Optional[str] = None
        self.limit = 0

    def required_attributes(self) -> List[str]:
        return super().required_attributes() + [ATTR_ITEMS, ATTR_VAR]

    def optional_attributes(self) -> List[str]:
        return super().optional_attributes() + [ATTR_INDEX_VAR, ATTR_WHERE, ATTR_LIMIT, ATTR_ORDER_BY, ATTR_GROUP_BY]

    def validate_attributes(self) -> None:
        super().validate_attributes()
        if self.bodiless:
            raise TagParseError(f"ForEach tags must have a body.  Bodiless ForEach tag found{self.location}")

        beans = self.context.beans
        attrs = self.attributes
        ev = self.evaluator

        items_text = attrs[ATTR_ITEMS]
        self.collection = evaluate_collection(ev, items_text, beans, ATTR_ITEMS, self.location)
        begin = items_text.find(BEGIN_EXPR)
        end = items_text.find(END_EXPR)
        if begin != -1 and end > begin:
            self.collection_name = items_text[begin + len(BEGIN_EXPR):end]
        logger.debug('Collection "%s" has size %d', items_text, len(self.collection))

        self.var_name = evaluate_string(ev, attrs[ATTR_VAR], beans)
        self.index_var_name = evaluate_string(ev, attrs.get(ATTR_INDEX_VAR), beans)

        condition = attrs.get(ATTR_WHERE)
        if condition is not None:
            kept = []
            for item in self.collection:
                beans[self.var_name] = item
                if evaluate_boolean(ev, condition, beans, ATTR_WHERE, default=True, location=self.location):
                    kept.append(item)
            beans.pop(self.var_name, None)
            self.collection = kept

        order_by = [str(p) for p in evaluate_list(ev, attrs.get(ATTR_ORDER_BY), beans, []) if p]
        order_keys = parse_order_by(order_by) if order_by else []
        if order_keys:
            self.collection = sort_items(self.collection, order_keys)

        group_by = [str(p) for p in evaluate_list(ev, attrs.get(ATTR_GROUP_BY), beans, []) if p]
        if group_by:
            self.collection = group_items(self.collection, group_by, order_keys)

        self.limit = evaluate_non_negative_int(
            ev, attrs.get(ATTR_LIMIT), beans, ATTR_LIMIT, len(self.collection), self.location
        )
        logger.debug("forEach limit=%d", self.limit)

    # -------------------------------------------------------------------
    # Loop capabilities
    # -------------------------------------------------------------------

    def num_iterations(self) -> int:
        return self.limit

    def collection_size(self) -> int:
        return len(self.collection)

    def collection_names(self) -> List[str]:
        return [self.collection_name] if self.collection_name else []

    def var_names(self) -> List[str]:
        return [self.var_name]

    def loop_iterator(self) -> Iterator[Any]:
        for index in range(self.limit):
            yield self.collection[index] if index < len(self.collection) else PAST_END

    def before_item(self, context: TagContext, block: Block, item: Any, index: int) -> None:
        beans = context.beans
        beans[self.var_name] = item
        if self.index_var_name:
            beans[self.index_var_name] = index

    def after_item(self, context: TagContext, block: Block, item: Any, index: int) -> None:
        beans = context.beans
        beans.pop(self.var_name, None)
        if self.index_var_name:
            beans.pop(self.index_var_name, None)

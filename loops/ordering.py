"""
``orderBy`` and ``groupBy`` support for ``jt:forEach``.

An order-by entry is ``property [ASC|DESC] [NULLS FIRST|LAST]``; properties
may be dotted paths and are read from dict keys or attributes.  Nulls sort
last ascending and first descending unless told otherwise.
"""

from __future__ import annotations

import functools
from typing import Any, List, Sequence

from pydantic import BaseModel

from exceptions import ParseError

ASC = "ASC"
DESC = "DESC"
NULLS = "NULLS"
FIRST = "FIRST"
LAST = "LAST"


class OrderKey(BaseModel):
    prop: str
    descending: bool = False
    nulls_first: bool = False


class Group(BaseModel):
    """Items sharing the same group-by values; ``obj`` is the first of them."""

    model_config = {"arbitrary_types_allowed": True}

    obj: Any
    items: List[Any]


def property_value(obj: Any, path: str) -> Any:
    value = obj
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def parse_order_by(expressions: Sequence[str]) -> List[OrderKey]:
    keys: List[OrderKey] = []
    for expr in expressions:
        parts = str(expr).split()
        if not 0 < len(parts) < 5:
            raise ParseError(f'Expected "property" [{ASC}|{DESC}] [{NULLS} {FIRST}|{LAST}]', str(expr))
        key = OrderKey(prop=parts[0])
        if len(parts) in (2, 4):
            direction = parts[1].upper()
            if direction not in (ASC, DESC):
                raise ParseError(f'Expected "{ASC}" or "{DESC}"', str(expr))
            key.descending = direction == DESC
            key.nulls_first = key.descending
        if len(parts) in (3, 4):
            if parts[-2].upper() != NULLS:
                raise ParseError(f'Expected "{NULLS} {FIRST}|{LAST}"', str(expr))
            which = parts[-1].upper()
            if which not in (FIRST, LAST):
                raise ParseError(f'Expected "{FIRST}" or "{LAST}"', str(expr))
            key.nulls_first = which == FIRST
        keys.append(key)
    return keys


def _compare(keys: List[OrderKey], a: Any, b: Any) -> int:
    for key in keys:
        v1 = property_value(a, key.prop)
        v2 = property_value(b, key.prop)
        if v1 is None and v2 is None:
            continue
        if v1 is None:
            return -1 if key.nulls_first else 1
        if v2 is None:
            return 1 if key.nulls_first else -1
        if v1 == v2:
            continue
        result = -1 if v1 < v2 else 1
        return -result if key.descending else result
    return 0


def sort_items(items: List[Any], keys: List[OrderKey]) -> List[Any]:
    return sorted(items, key=functools.cmp_to_key(lambda a, b: _compare(keys, a, b)))


def group_items(items: List[Any], props: List[str], order_keys: List[OrderKey] = None) -> List[Group]:
    """
    Group ``items`` by the values of ``props``.

    Groups come out sorted by the group-by properties; order-by keys on
    group-by properties take precedence over that.
    """
    groups: List[Group] = []
    index = {}
    for item in items:
        values = tuple(property_value(item, p) for p in props)
        group = index.get(values)
        if group is None:
            group = Group(obj=item, items=[])
            index[values] = group
            groups.append(group)
        group.items.append(item)

    keys = [k for k in (order_keys or []) if k.prop in props]
    keys += [OrderKey(prop=p) for p in props if p not in {k.prop for k in keys}]
    return sorted(groups, key=functools.cmp_to_key(lambda a, b: _compare(keys, a.obj, b.obj)))

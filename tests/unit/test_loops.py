from __future__ import annotations

import pytest

from exceptions import ParseError, TransformError
from loops.ordering import Group, group_items, parse_order_by, property_value, sort_items
from loops.status import ForLoopTagStatus, LoopTagStatus
from tags.registry import BUILT_IN_TAGS, default_registry

PEOPLE = [
    {"name": "Cy", "dept": "B", "age": None},
    {"name": "Ann", "dept": "A", "age": 30},
    {"name": "Bob", "dept": "B", "age": 25},
    {"name": "Dee", "dept": "A", "age": 41},
]


# -------------------------------------------------------------------
# Status
# -------------------------------------------------------------------


def test_status_progress() -> None:
    owner = object()
    status = LoopTagStatus(owner, 3)
    assert status.is_first and not status.is_last
    status._advance(owner)
    status._advance(owner)
    assert status.index == 2
    assert status.is_last


def test_status_only_advanced_by_owner() -> None:
    status = LoopTagStatus(object(), 2)
    with pytest.raises(TransformError):
        status._advance(object())


def test_status_needs_owner() -> None:
    with pytest.raises(ValueError):
        LoopTagStatus(None, 1)


def test_for_loop_status_value() -> None:
    owner = object()
    status = ForLoopTagStatus(owner, 3, 10, 0, -5)
    status._advance(owner)
    assert status.value == 5
    assert (status.start, status.end, status.step) == (10, 0, -5)


# -------------------------------------------------------------------
# Ordering and grouping
# -------------------------------------------------------------------


def test_property_value_reads_dicts_and_attributes() -> None:
    group = Group(obj={"dept": {"name": "A"}}, items=[])
    assert property_value(group, "obj.dept.name") == "A"
    assert property_value(group, "obj.missing.name") is None


def test_parse_order_by_defaults() -> None:
    asc, desc, explicit = parse_order_by(["age", "age desc", "age ASC NULLS FIRST"])
    assert not asc.descending and not asc.nulls_first
    assert desc.descending and desc.nulls_first
    assert not explicit.descending and explicit.nulls_first


@pytest.mark.parametrize("expression", ["age UP", "age ASC NULLS", "age NULLS MIDDLE", "a b c d e"])
def test_parse_order_by_errors(expression: str) -> None:
    with pytest.raises(ParseError):
        parse_order_by([expression])


def test_sort_nulls_last_ascending() -> None:
    ordered = sort_items(PEOPLE, parse_order_by(["age"]))
    assert [p["name"] for p in ordered] == ["Bob", "Ann", "Dee", "Cy"]


def test_sort_by_several_keys() -> None:
    ordered = sort_items(PEOPLE, parse_order_by(["dept DESC", "name"]))
    assert [p["name"] for p in ordered] == ["Bob", "Cy", "Ann", "Dee"]


def test_group_items() -> None:
    groups = group_items(PEOPLE, ["dept"])
    assert [g.obj["dept"] for g in groups] == ["A", "B"]
    assert [p["name"] for p in groups[1].items] == ["Cy", "Bob"]


def test_group_order_follows_order_by_on_group_property() -> None:
    groups = group_items(PEOPLE, ["dept"], parse_order_by(["dept DESC"]))
    assert [g.obj["dept"] for g in groups] == ["B", "A"]


# -------------------------------------------------------------------
# Registry
# -------------------------------------------------------------------


def test_default_registry() -> None:
    registry = default_registry("jt")
    assert set(registry) == {"jt:forEach", "jt:multiForEach", "jt:for", "jt:style"}
    assert len(BUILT_IN_TAGS) == 4


def test_registry_with_custom_namespace_and_tags() -> None:
    class CustomTag:
        name = "custom"

    registry = default_registry("x", [CustomTag])
    assert registry["x:custom"] is CustomTag
    assert "x:forEach" in registry

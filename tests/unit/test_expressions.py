from __future__ import annotations

import pytest
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

from exceptions import AttributeExpressionError, ParseError
from expressions.attributes import (
    evaluate_boolean,
    evaluate_collection,
    evaluate_int,
    evaluate_list,
    evaluate_non_negative_int,
    evaluate_non_zero_int,
    evaluate_string_specific_values,
)
from expressions.evaluator import JinjaExpressionEvaluator, find_expressions
from transform.collections import find_implicit_collections, implicit_var_names, rename_in_expressions
from utils.rich_text import plain_text, remove_range, replace_all

BEANS = {
    "employees": [{"name": "Ann", "salary": 10}, {"name": "Bob", "salary": 20}],
    "dept": {"name": "Sales", "employees": [{"name": "Cy"}]},
    "count": 3,
}

# -------------------------------------------------------------------
# Evaluator
# -------------------------------------------------------------------


def test_find_expressions() -> None:
    text = 'a ${x} b ${ {"k": "}"}["k"] } c ${unclosed'
    spans = find_expressions(text)
    assert [text[s:e] for s, e in spans] == ["${x}", '${ {"k": "}"}["k"] }']


def test_single_expression_keeps_type(evaluator) -> None:
    assert evaluator.evaluate_text("${count + 1}", BEANS) == 4
    assert evaluator.evaluate_text("${employees}", BEANS) is BEANS["employees"]


def test_mixed_text_is_string(evaluator) -> None:
    assert evaluator.evaluate_text("Dept ${dept.name}: ${count}", BEANS) == "Dept Sales: 3"
    assert evaluator.evaluate_text("x${missing}y", BEANS) == "xy"
    assert evaluator.evaluate_text("plain", BEANS) == "plain"


def test_undefined_is_none(evaluator) -> None:
    assert evaluator.evaluate("missing.deeply.nested", BEANS) is None


def test_syntax_error(evaluator) -> None:
    with pytest.raises(ParseError):
        evaluator.evaluate("a +", BEANS)


def test_referenced_paths(evaluator) -> None:
    paths = evaluator.referenced_paths("dept.employees | length > count and x is defined")
    assert paths == ["dept.employees", "count", "x"]


def test_rich_text_expansion(evaluator) -> None:
    bold = InlineFont(b=True)
    value = CellRichText(["Hello ", TextBlock(bold, "${dept.name}"), "!"])
    result = evaluator.evaluate_text(value, BEANS)
    assert plain_text(result) == "Hello Sales!"
    assert isinstance(result, CellRichText)
    assert any(isinstance(run, TextBlock) and run.text == "Sales" for run in result)


# -------------------------------------------------------------------
# Attributes
# -------------------------------------------------------------------


def test_evaluate_boolean(evaluator) -> None:
    assert evaluate_boolean(evaluator, "true", {}, "fixed") is True
    assert evaluate_boolean(evaluator, "${count > 5}", BEANS, "fixed") is False
    assert evaluate_boolean(evaluator, None, {}, "fixed", default=True) is True
    with pytest.raises(AttributeExpressionError):
        evaluate_boolean(evaluator, "maybe", {}, "fixed")


def test_evaluate_ints(evaluator) -> None:
    assert evaluate_int(evaluator, "${count * 2}", BEANS, "limit") == 6
    assert evaluate_int(evaluator, " 7 ", {}, "limit") == 7
    assert evaluate_non_negative_int(evaluator, None, {}, "limit", 4) == 4
    with pytest.raises(AttributeExpressionError):
        evaluate_int(evaluator, "seven", {}, "limit")
    with pytest.raises(AttributeExpressionError):
        evaluate_non_negative_int(evaluator, "-1", {}, "limit")
    with pytest.raises(AttributeExpressionError):
        evaluate_non_zero_int(evaluator, "0", {}, "step")


def test_evaluate_specific_values(evaluator) -> None:
    legal = ["clear", "remove", "replaceExpr"]
    assert evaluate_string_specific_values(evaluator, "REPLACEEXPR", {}, "pastEndAction", legal) == "replaceExpr"
    with pytest.raises(AttributeExpressionError):
        evaluate_string_specific_values(evaluator, "explode", {}, "pastEndAction", legal)


def test_evaluate_list_and_collection(evaluator) -> None:
    assert evaluate_list(evaluator, "a; b", {}) == ["a", "b"]
    assert evaluate_list(evaluator, "${employees}", BEANS) == BEANS["employees"]
    assert evaluate_collection(evaluator, "${dept}", BEANS, "items") == ["Sales", BEANS["dept"]["employees"]]
    assert evaluate_collection(evaluator, "${missing}", BEANS, "items") == []
    with pytest.raises(AttributeExpressionError):
        evaluate_collection(evaluator, "${count}", BEANS, "items")


# -------------------------------------------------------------------
# Implicit collections
# -------------------------------------------------------------------


def test_find_implicit_collections(evaluator) -> None:
    assert find_implicit_collections(evaluator, "${employees.name}", BEANS) == ["employees"]
    assert find_implicit_collections(evaluator, "${dept.employees.name}", BEANS) == ["dept.employees"]
    assert find_implicit_collections(evaluator, "${dept.name}", BEANS) == []


def test_collection_itself_or_safe_members_are_not_implicit(evaluator) -> None:
    assert find_implicit_collections(evaluator, "${employees}", BEANS) == []
    assert find_implicit_collections(evaluator, "${employees | length}", BEANS) == []
    assert find_implicit_collections(evaluator, "${employees.count('x')}", BEANS) == []


def test_implicit_var_names() -> None:
    assert implicit_var_names(["employees", "dept.employees"]) == ["employees__item", "dept_employees__item"]


def test_rename_in_expressions() -> None:
    text = "${employees.name} / ${my_employees.name} employees.name"
    renamed = rename_in_expressions(text, "employees", "employees__item")
    assert renamed == "${employees__item.name} / ${my_employees.name} employees.name"


# -------------------------------------------------------------------
# Rich text
# -------------------------------------------------------------------


def test_remove_range_keeps_formatting() -> None:
    bold = InlineFont(b=True)
    value = CellRichText(["<jt:x>", TextBlock(bold, "bold")])
    result = remove_range(value, 0, 6)
    assert plain_text(result) == "bold"
    assert isinstance(result, CellRichText)


def test_replace_all_plain_and_rich() -> None:
    assert replace_all("a.b a.b", "a.", "x.") == "x.b x.b"
    value = CellRichText([TextBlock(InlineFont(i=True), "a.b"), " a.b"])
    assert plain_text(replace_all(value, "a.", "x.")) == "x.b x.b"


def test_compiled_expressions_are_reused() -> None:
    evaluator = JinjaExpressionEvaluator(cache_size=2)
    for _ in range(3):
        assert evaluator.evaluate("count + 1", BEANS) == 4
    evaluator.evaluate("count", BEANS)
    evaluator.evaluate("dept.name", BEANS)
    info = evaluator._compile.cache_info()
    assert info.hits == 2
    assert info.currsize == 2

"""
Tag attribute evaluation.

Attribute values are template text: they may be literals (``limit="5"``) or
expressions (``items="${employees}"``).  Each helper evaluates the text,
checks the result's shape and raises ``AttributeExpressionError`` with the
attribute name and cell location when it does not fit.
"""

from __future__ import annotations

import logging
from typing import Any, Collection, Dict, List, Optional

from exceptions import AttributeExpressionError
from expressions.evaluator import ExpressionEvaluator

logger = logging.getLogger(__name__)

SPEC_SEP = ";"


def _evaluate(evaluator: ExpressionEvaluator, text: Optional[str], beans: Dict[str, Any]) -> Any:
    if text is None:
        return None
    return evaluator.evaluate_text(text, beans)


def evaluate_object(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    attr_name: str,
    expected_type: type = object,
    default: Any = None,
    location: str = "",
) -> Any:
    result = _evaluate(evaluator, text, beans)
    if result is None:
        return default
    if not isinstance(result, expected_type):
        raise AttributeExpressionError(
            f'The "{attr_name}" attribute must evaluate to a {expected_type.__name__}, '
            f"got {type(result).__name__}",
            text,
            location,
        )
    return result


def evaluate_string(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    default: Optional[str] = None,
) -> Optional[str]:
    result = _evaluate(evaluator, text, beans)
    if result is None:
        return default
    return str(result)


def evaluate_boolean(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    attr_name: str,
    default: bool = False,
    location: str = "",
) -> bool:
    result = _evaluate(evaluator, text, beans)
    if result is None:
        return default
    if isinstance(result, bool):
        return result
    value = str(result).strip().lower()
    if value == "true":
        return True
    if value in ("false", ""):
        return False
    raise AttributeExpressionError(
        f'The "{attr_name}" attribute must be "true" or "false"', text, location
    )


def evaluate_int(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    attr_name: str,
    default: int = 0,
    location: str = "",
) -> int:
    result = _evaluate(evaluator, text, beans)
    if result is None:
        return default
    if isinstance(result, bool):
        raise AttributeExpressionError(
            f'The "{attr_name}" attribute must be an integer', text, location
        )
    if isinstance(result, (int, float)):
        return int(result)
    try:
        return int(str(result).strip())
    except ValueError:
        try:
            return int(float(str(result).strip()))
        except ValueError:
            raise AttributeExpressionError(
                f'The "{attr_name}" attribute must be an integer', text, location
            ) from None


def evaluate_non_negative_int(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    attr_name: str,
    default: int = 0,
    location: str = "",
) -> int:
    value = evaluate_int(evaluator, text, beans, attr_name, default, location)
    if value < 0:
        raise AttributeExpressionError(
            f'The "{attr_name}" attribute must not be negative: {value}', text, location
        )
    return value


def evaluate_non_zero_int(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    attr_name: str,
    default: int = 1,
    location: str = "",
) -> int:
    value = evaluate_int(evaluator, text, beans, attr_name, default, location)
    if value == 0:
        raise AttributeExpressionError(
            f'The "{attr_name}" attribute must not be zero', text, location
        )
    return value


def evaluate_string_specific_values(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    attr_name: str,
    legal_values: Collection[str],
    default: Optional[str] = None,
    location: str = "",
) -> Optional[str]:
    """Evaluate to one of ``legal_values`` (case-insensitive match)."""
    value = evaluate_string(evaluator, text, beans, None)
    if value is None:
        return default
    for legal in legal_values:
        if legal.lower() == value.strip().lower():
            return legal
    raise AttributeExpressionError(
        f'Unknown value for the "{attr_name}" attribute; expected one of {list(legal_values)}',
        text,
        location,
    )


def evaluate_list(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    default: Optional[List[Any]] = None,
) -> Optional[List[Any]]:
    """
    Evaluate to a list.

    A list or tuple result is used as is; a string result is split on
    ``;``.  Each piece of a literal list is evaluated on its own, so
    ``"${a};${b}"`` yields both collections.
    """
    if text is None:
        return default
    if SPEC_SEP in text:
        return [_evaluate(evaluator, part.strip(), beans) for part in text.split(SPEC_SEP)]
    result = _evaluate(evaluator, text, beans)
    if result is None:
        return default
    if isinstance(result, (list, tuple)):
        return list(result)
    return [part.strip() for part in str(result).split(SPEC_SEP)]


def evaluate_collection(
    evaluator: ExpressionEvaluator,
    text: Optional[str],
    beans: Dict[str, Any],
    attr_name: str,
    location: str = "",
) -> List[Any]:
    """Evaluate to the items of an iterable; ``None`` is an empty collection."""
    result = _evaluate(evaluator, text, beans)
    if result is None:
        return []
    if isinstance(result, dict):
        return list(result.values())
    if isinstance(result, (str, bytes)) or not hasattr(result, "__iter__"):
        raise AttributeExpressionError(
            f'The "{attr_name}" attribute must evaluate to a collection', text, location
        )
    return list(result)

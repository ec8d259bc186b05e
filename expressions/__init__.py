from expressions.evaluator import (
    BEGIN_EXPR,
    END_EXPR,
    ExpressionEvaluator,
    JinjaExpressionEvaluator,
    find_expressions,
)

__all__ = [
    "BEGIN_EXPR",
    "END_EXPR",
    "ExpressionEvaluator",
    "JinjaExpressionEvaluator",
    "find_expressions",
]

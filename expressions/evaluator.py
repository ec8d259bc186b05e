"""
Expression evaluation boundary.

Template text embeds ``${expression}`` markers.  The engine only needs three
things from an expression language: evaluate an expression against the
beans, list the dotted names an expression references (to spot implicit
collection access), and expand every marker in a piece of cell text.  The
default implementation compiles expressions with jinja2.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Dict, List, Tuple

from jinja2 import ChainableUndefined, Environment, TemplateSyntaxError

from exceptions import ParseError
from utils.rich_text import CellText, is_rich, plain_text, replace_all

logger = logging.getLogger(__name__)

BEGIN_EXPR = "${"
END_EXPR = "}"

# Compiled expressions kept by each evaluator.
COMPILED_CACHE_SIZE = 1024

# jinja2 lexes these as names; they are never variables.
_KEYWORDS = frozenset({
    "and", "or", "not", "in", "is", "if", "else",
    "true", "false", "none", "True", "False", "None",
})


def find_expressions(text: str) -> List[Tuple[int, int]]:
    """
    Locate every ``${...}`` marker in ``text``.

    Returns ``(start, end)`` pairs where ``text[start:end]`` is the whole
    marker including ``${`` and ``}``.  Braces inside quoted strings do not
    count and nested braces (dict literals) are balanced.
    """
    spans: List[Tuple[int, int]] = []
    idx = text.find(BEGIN_EXPR)
    while idx >= 0:
        depth = 0
        quote = None
        pos = idx + len(BEGIN_EXPR)
        end = -1
        while pos < len(text):
            ch = text[pos]
            if quote:
                if ch == quote:
                    quote = None
            elif ch in "'\"":
                quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0:
                    end = pos + 1
                    break
                depth -= 1
            pos += 1
        if end < 0:
            break
        spans.append((idx, end))
        idx = text.find(BEGIN_EXPR, end)
    return spans


class ExpressionEvaluator(ABC):
    """Interface to the embedded expression language."""

    @abstractmethod
    def evaluate(self, expression: str, beans: Dict[str, Any]) -> Any:
        """Evaluate the body of one ``${...}`` marker."""
        ...

    @abstractmethod
    def referenced_paths(self, expression: str) -> List[str]:
        """Dotted variable paths referenced by an expression, in order."""
        ...

    # -------------------------------------------------------------------
    # Text expansion
    # -------------------------------------------------------------------

    def evaluate_text(self, value: CellText, beans: Dict[str, Any]) -> Any:
        """
        Expand every ``${...}`` in cell text.

        Text that is exactly one marker evaluates to the raw result (a
        number stays a number).  Anything else yields text with each marker
        replaced by its string value, ``None`` becoming empty.
        """
        text = plain_text(value)
        spans = find_expressions(text)
        if not spans:
            return value
        if len(spans) == 1 and spans[0] == (0, len(text)):
            return self.evaluate(text[2:-1], beans)

        result = value
        for start, end in spans:
            marker = text[start:end]
            evaluated = self.evaluate(marker[2:-1], beans)
            replacement = "" if evaluated is None else str(evaluated)
            if is_rich(result):
                result = replace_all(result, marker, replacement)
            else:
                result = result.replace(marker, replacement, 1)
        return result


class JinjaExpressionEvaluator(ExpressionEvaluator):
    """
    jinja2 expression evaluator.

    Expressions use jinja2 expression syntax (``a.b``, ``x + 1``,
    ``items | length``).  Undefined names evaluate to ``None``.
    """

    def __init__(self, env: Environment = None, cache_size: int = COMPILED_CACHE_SIZE):
        self._env = env or Environment(undefined=ChainableUndefined)
        # Per evaluator, least recently used expressions are dropped.
        self._compile = lru_cache(maxsize=cache_size)(self._compile_expression)

    def _compile_expression(self, expression: str):
        try:
            return self._env.compile_expression(expression)
        except TemplateSyntaxError as exc:
            raise ParseError(f"Expression syntax error: {exc.message}", expression) from exc

    def evaluate(self, expression: str, beans: Dict[str, Any]) -> Any:
        result = self._compile(expression.strip())(**beans)
        if isinstance(result, ChainableUndefined):
            return None
        return result

    def referenced_paths(self, expression: str) -> List[str]:
        paths: List[str] = []
        current: List[str] = []
        after_dot = False
        prev = None

        def finish():
            if current:
                path = ".".join(current)
                if path not in paths:
                    paths.append(path)
                current.clear()

        try:
            tokens = list(self._env.lex("{{ " + expression + " }}"))
        except TemplateSyntaxError as exc:
            raise ParseError(f"Expression syntax error: {exc.message}", expression) from exc

        for _, tok_type, value in tokens:
            if tok_type == "whitespace":
                continue
            if tok_type == "name":
                if current and after_dot:
                    current.append(value)
                    after_dot = False
                else:
                    finish()
                    # Filter and test names are not variables.
                    if value not in _KEYWORDS and prev not in ("|", "is"):
                        current.append(value)
            elif tok_type == "operator" and value == "." and current:
                after_dot = True
            else:
                finish()
                after_dot = False
            prev = value
        finish()
        return paths

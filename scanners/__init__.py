"""
Tokenizers for the four template micro-languages.

  1. TagScanner       ``<jt:forEach items="${list}" var="x">`` markup
  2. FormulaScanner   cell references inside ``$[...]`` / ``${...}``
  3. MetadataScanner  ``?@key=value;...`` loop metadata
  4. StyleScanner     CSS-like style classes and inline styles
"""

from scanners.base import BaseScanner, BaseToken
from scanners.tag import TagScanner, TagToken
from scanners.formula import FormulaScanner, FormulaToken
from scanners.metadata import MetadataScanner, MetadataToken
from scanners.style import StyleScanner, StyleToken

__all__ = [
    "BaseScanner",
    "BaseToken",
    "TagScanner",
    "TagToken",
    "FormulaScanner",
    "FormulaToken",
    "MetadataScanner",
    "MetadataToken",
    "StyleScanner",
    "StyleToken",
]

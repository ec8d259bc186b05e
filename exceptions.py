"""
Exception hierarchy for the template engine.

Parse errors carry the offending text and, when known, the cell location
(`` at Sheet1!B3``) so that a template author can find the broken cell.
"""

from __future__ import annotations

from typing import Optional


class TemplateError(Exception):
    """Base class for every error raised while rendering a template."""

    def __init__(self, message: str, text: Optional[str] = None, location: str = ""):
        self.message = message
        self.text = text
        self.location = location
        full = message
        if text is not None:
            full += f': "{text}"'
        full += location
        super().__init__(full)


# -------------------------------------------------------------------
# Parse errors
# -------------------------------------------------------------------

class ParseError(TemplateError):
    """Malformed micro-language input."""


class TagParseError(ParseError):
    pass


class FormulaParseError(ParseError):
    pass


class MetadataParseError(ParseError):
    pass


class StyleParseError(ParseError):
    pass


# -------------------------------------------------------------------
# Semantic / runtime errors
# -------------------------------------------------------------------

class AttributeExpressionError(TemplateError):
    """A tag attribute is missing, unknown, or evaluates to a bad value."""


class TransformError(TemplateError):
    """Unexpected failure while transforming a tag or block."""


class InternalStateError(TemplateError):
    """The engine reached a state that valid input cannot produce."""

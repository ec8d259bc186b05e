"""
Tag parser.

Finds the first tag in a piece of cell text and breaks it into namespace,
name and attributes.  Text inside a ``$[ ... ]`` formula region is never
taken as a tag, so ``$[IF(A1<B1, 1, 0)]`` survives untouched.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Union

from openpyxl.cell.rich_text import CellRichText

from dto.tag import TagInfo
from exceptions import TagParseError
from scanners.tag import TagScanner, TagToken

logger = logging.getLogger(__name__)

FORMULA_BEGIN = "$["
FORMULA_END = "]"

_ESCAPE_PATTERN = re.compile(r"\\([\"\\'ntrbf])")
_ESCAPE_MAP = {
    '"': '"',
    "\\": "\\",
    "'": "'",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
}


def perform_escapes(value: str) -> str:
    """Turn backslash escape sequences into the characters they stand for."""
    return _ESCAPE_PATTERN.sub(lambda m: _ESCAPE_MAP[m.group(1)], value)


def _inside_formula_after(lexeme: str, inside: bool) -> bool:
    begin = lexeme.rfind(FORMULA_BEGIN)
    end = lexeme.rfind(FORMULA_END)
    if begin < 0 and end < 0:
        return inside
    return begin > end


class TagParser:
    """Parse the first tag found at or after ``start_idx`` in the cell text."""

    def __init__(
        self,
        cell_text: Union[str, CellRichText],
        start_idx: int = 0,
        location: str = "",
    ):
        self._text = str(cell_text) if cell_text is not None else ""
        self._start_idx = start_idx
        self._location = location

    def _error(self, message: str) -> TagParseError:
        return TagParseError(message, self._text, self._location)

    def parse(self) -> TagInfo:
        scanner = TagScanner(self._text[self._start_idx:])
        inside_formula = False
        token = scanner.next_token()

        while True:
            # Skip to the next "<" or "</" outside of any formula.
            while token not in (
                TagToken.BEGIN_ANGLE_BRACKET,
                TagToken.BEGIN_ANGLE_BRACKET_SLASH,
            ) or inside_formula:
                if token == TagToken.EOI or token < 0:
                    return TagInfo(is_tag=False)
                if token == TagToken.STRING:
                    inside_formula = _inside_formula_after(scanner.current_lexeme, inside_formula)
                token = scanner.next_token()

            is_end_tag = token == TagToken.BEGIN_ANGLE_BRACKET_SLASH
            tag_start = self._start_idx + scanner.next_position - len(scanner.current_lexeme)
            token = scanner.next_token()
            if token in (TagToken.STRING, TagToken.COLON):
                break
            logger.debug("'<' at %d does not start a tag in %r", tag_start, self._text)

        namespace, tag_name, token = self._parse_name(scanner, token)
        attributes, token = self._parse_attributes(scanner, token)

        after_tag = self._start_idx + scanner.next_position
        return TagInfo(
            is_tag=True,
            is_end_tag=is_end_tag,
            is_bodiless=token == TagToken.SLASH_END_ANGLE_BRACKET,
            namespace=namespace,
            tag_name=tag_name,
            attributes=attributes,
            tag_start_idx=tag_start,
            after_tag_idx=after_tag,
            tag_text=self._text[tag_start:after_tag],
        )

    # -------------------------------------------------------------------
    # Pieces
    # -------------------------------------------------------------------

    def _parse_name(self, scanner: TagScanner, token: int):
        if token == TagToken.COLON:
            raise self._error("Cannot find namespace in tag text")
        first = scanner.current_lexeme
        token = scanner.next_token()
        if token != TagToken.COLON:
            return "", first, token
        token = scanner.next_token()
        if token != TagToken.STRING:
            raise self._error("Cannot find tag name in tag text")
        return first, scanner.current_lexeme, scanner.next_token()

    def _parse_attributes(self, scanner: TagScanner, token: int):
        attributes: Dict[str, str] = {}
        attr_name: Optional[str] = None
        inside_quotes = False

        while token not in (TagToken.END_ANGLE_BRACKET, TagToken.SLASH_END_ANGLE_BRACKET):
            if token == TagToken.EOI:
                raise self._error('Tags must start with "<" or "</" and end with ">" or "/>"')
            if token < 0 and token != TagToken.UNKNOWN:
                break

            if token == TagToken.DOUBLE_QUOTE:
                if inside_quotes and attr_name is not None:
                    # attr="" : closing quote right after the opening one
                    attributes[attr_name] = ""
                    attr_name = None
                inside_quotes = not inside_quotes
            elif token == TagToken.STRING:
                if inside_quotes:
                    if attr_name is None:
                        raise self._error("Value found without attribute name")
                    attributes[attr_name] = self._clean_value(scanner.current_lexeme)
                    attr_name = None
                else:
                    attr_name = scanner.current_lexeme
            elif token == TagToken.EQUALS:
                if attr_name is None:
                    raise self._error('Attribute name missing before "="')
            elif token == TagToken.COLON:
                raise self._error("Colon not allowed in attribute name")
            elif token in (TagToken.BEGIN_ANGLE_BRACKET, TagToken.BEGIN_ANGLE_BRACKET_SLASH):
                raise self._error("Cannot start a tag within another tag")
            token = scanner.next_token()

        if token < 0:
            raise self._error("Found end of input while scanning attribute value")
        if attr_name is not None:
            raise self._error("Found end of tag before attribute value")
        return attributes, token

    @staticmethod
    def _clean_value(raw: str) -> str:
        value = raw.replace("\n", " ").replace("\r", " ").replace("\t", " ")
        return perform_escapes(value)

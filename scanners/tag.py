from __future__ import annotations

from enum import IntEnum

from scanners.base import BaseScanner


# Characters a backslash may escape inside a double-quoted attribute value.
TAG_ESCAPES = "\"\\'ntrbf"


class TagToken(IntEnum):
    ERROR_EOI_IN_DQUOTES = -3
    UNKNOWN = -1
    WHITESPACE = 0
    STRING = 1
    COLON = 11
    DOUBLE_QUOTE = 12
    BEGIN_ANGLE_BRACKET = 13
    BEGIN_ANGLE_BRACKET_SLASH = 14
    END_ANGLE_BRACKET = 15
    SLASH_END_ANGLE_BRACKET = 16
    EQUALS = 17
    EOI = 99


class TagScanner(BaseScanner):
    """Tokenizer for ``<ns:name attr="value" ...>`` markup."""

    PUNCTUATION = '":=<>/'

    def _reset_state(self) -> None:
        self._inside_dquotes = False

    def next_token(self) -> int:
        if self._inside_dquotes:
            return self._next_quoted()
        if self._at_end():
            return self._eoi(TagToken.EOI)

        ch = self._text[self._offset]
        nxt = self._text[self._offset + 1] if self._offset + 1 < len(self._text) else ""

        if ch.isspace():
            return self._scan_whitespace()
        if ch == '"':
            self._inside_dquotes = True
            return self._emit(TagToken.DOUBLE_QUOTE, 1)
        if ch == "<":
            if nxt == "/":
                return self._emit(TagToken.BEGIN_ANGLE_BRACKET_SLASH, 2)
            return self._emit(TagToken.BEGIN_ANGLE_BRACKET, 1)
        if ch == "/":
            if nxt == ">":
                return self._emit(TagToken.SLASH_END_ANGLE_BRACKET, 2)
            return self._emit(TagToken.UNKNOWN, 1)
        if ch == ">":
            return self._emit(TagToken.END_ANGLE_BRACKET, 1)
        if ch == ":":
            return self._emit(TagToken.COLON, 1)
        if ch == "=":
            return self._emit(TagToken.EQUALS, 1)
        return self._scan_string()

    def _next_quoted(self) -> int:
        if self._at_end():
            return self._eoi(TagToken.ERROR_EOI_IN_DQUOTES)
        length = self._scan_quoted('"', TAG_ESCAPES)
        if length < 0:
            self._lexeme = self._text[self._offset:]
            self._offset = len(self._text)
            return TagToken.ERROR_EOI_IN_DQUOTES
        if length == 0:
            self._inside_dquotes = False
            return self._emit(TagToken.DOUBLE_QUOTE, 1)
        return self._emit(TagToken.STRING, length)

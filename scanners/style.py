from __future__ import annotations

from enum import IntEnum

from scanners.base import BaseScanner

COMMENT_START = "/*"
COMMENT_END = "*/"


class StyleToken(IntEnum):
    ERROR_EOI_IN_COMMENT = -3
    WHITESPACE = 0
    STRING = 1
    COLON = 11
    PERIOD = 12
    BEGIN_BRACE = 13
    END_BRACE = 14
    SEMICOLON = 15
    EOI = 99


_PUNCTUATION_TOKENS = {
    ":": StyleToken.COLON,
    ".": StyleToken.PERIOD,
    "{": StyleToken.BEGIN_BRACE,
    "}": StyleToken.END_BRACE,
    ";": StyleToken.SEMICOLON,
}


class StyleScanner(BaseScanner):
    """
    Tokenizer for CSS-like style text.

    ``/* ... */`` comments are dropped before each token.  A ``/`` that does
    not open a comment is ordinary text, so data formats such as
    ``mm/dd/yyyy`` scan as one STRING.
    """

    PUNCTUATION = ":.{};"

    def _is_string_char(self, idx: int) -> bool:
        if self._text.startswith(COMMENT_START, idx):
            return False
        return super()._is_string_char(idx)

    def next_token(self) -> int:
        while self._text.startswith(COMMENT_START, self._offset):
            end = self._text.find(COMMENT_END, self._offset + len(COMMENT_START))
            if end < 0:
                self._lexeme = self._text[self._offset:]
                self._offset = len(self._text)
                return StyleToken.ERROR_EOI_IN_COMMENT
            self._offset = end + len(COMMENT_END)

        if self._at_end():
            return self._eoi(StyleToken.EOI)

        ch = self._text[self._offset]
        if ch.isspace():
            return self._scan_whitespace()
        if ch in _PUNCTUATION_TOKENS:
            return self._emit(_PUNCTUATION_TOKENS[ch], 1)
        return self._scan_string()

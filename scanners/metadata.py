from __future__ import annotations

from enum import IntEnum

from scanners.base import BaseScanner


class MetadataToken(IntEnum):
    ERROR_EOI_IN_DQUOTES = -3
    WHITESPACE = 0
    STRING = 1
    DOUBLE_QUOTE = 12
    SEMICOLON = 13
    EQUALS = 14
    EOI = 99


class MetadataScanner(BaseScanner):
    """
    Tokenizer for ``key=value;key="quoted value"`` metadata.

    Whitespace is only a token at the start of a token; once a STRING has
    started it runs to the next punctuation character, interior spaces
    included.  Only double quotes quote.
    """

    PUNCTUATION = '";='

    def _reset_state(self) -> None:
        self._inside_dquotes = False

    def _is_string_char(self, idx: int) -> bool:
        return self._text[idx] not in self.PUNCTUATION

    def next_token(self) -> int:
        if self._inside_dquotes:
            if self._at_end():
                return self._eoi(MetadataToken.ERROR_EOI_IN_DQUOTES)
            length = self._scan_quoted('"')
            if length < 0:
                self._lexeme = self._text[self._offset:]
                self._offset = len(self._text)
                return MetadataToken.ERROR_EOI_IN_DQUOTES
            if length == 0:
                self._inside_dquotes = False
                return self._emit(MetadataToken.DOUBLE_QUOTE, 1)
            return self._emit(MetadataToken.STRING, length)

        if self._at_end():
            return self._eoi(MetadataToken.EOI)

        ch = self._text[self._offset]
        if ch.isspace():
            return self._scan_whitespace()
        if ch == '"':
            self._inside_dquotes = True
            return self._emit(MetadataToken.DOUBLE_QUOTE, 1)
        if ch == ";":
            return self._emit(MetadataToken.SEMICOLON, 1)
        if ch == "=":
            return self._emit(MetadataToken.EQUALS, 1)
        return self._scan_string()

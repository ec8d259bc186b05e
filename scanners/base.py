"""
Base class for the micro-language scanners.

A scanner turns an input string into a stream of integer token codes.  It
never raises: malformed input surfaces as a negative error token and the
parser decides what to report.  ``set_input`` restarts the scanner so one
instance can be reused.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum


class BaseToken(IntEnum):
    """Token codes shared by every scanner."""

    WHITESPACE = 0
    STRING = 1
    EOI = 99


class BaseScanner(ABC):
    # Characters that end a STRING token.
    PUNCTUATION = ""

    def __init__(self, text: str = ""):
        self.set_input(text)

    def set_input(self, text: str) -> None:
        self._text = text or ""
        self._offset = 0
        self._lexeme = ""
        self._reset_state()

    def _reset_state(self) -> None:
        """Clear any quote / comment mode.  Override when a scanner has one."""

    @property
    def current_lexeme(self) -> str:
        return self._lexeme

    @property
    def next_position(self) -> int:
        """Offset of the first character not yet consumed."""
        return self._offset

    @property
    def text(self) -> str:
        return self._text

    @abstractmethod
    def next_token(self) -> int:
        """Consume and return the next token code."""
        ...

    # -------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._offset >= len(self._text)

    def _emit(self, token: int, length: int) -> int:
        self._lexeme = self._text[self._offset:self._offset + length]
        self._offset += length
        return token

    def _eoi(self, token: int = BaseToken.EOI) -> int:
        self._lexeme = ""
        self._offset = len(self._text)
        return token

    def _scan_whitespace(self) -> int:
        end = self._offset
        while end < len(self._text) and self._text[end].isspace():
            end += 1
        return self._emit(BaseToken.WHITESPACE, end - self._offset)

    def _is_string_char(self, idx: int) -> bool:
        ch = self._text[idx]
        return not ch.isspace() and ch not in self.PUNCTUATION

    def _scan_string(self) -> int:
        end = self._offset
        while end < len(self._text) and self._is_string_char(end):
            end += 1
        return self._emit(BaseToken.STRING, end - self._offset)

    def _scan_quoted(self, quote: str, escapes: str = "") -> int:
        """
        Scan the body of a quoted run up to (not including) ``quote``.

        Returns the length of the run, or -1 when the input ends first.
        ``escapes`` lists the characters a backslash may escape; each escape
        is consumed as two characters.
        """
        idx = self._offset
        n = len(self._text)
        while idx < n:
            ch = self._text[idx]
            if escapes and ch == "\\" and idx + 1 < n and self._text[idx + 1] in escapes:
                idx += 2
                continue
            if ch == quote:
                return idx - self._offset
            idx += 1
        return -1

from __future__ import annotations

from enum import IntEnum

from scanners.base import BaseScanner

OPERATOR_CHARS = "=<>&+*-/^%:"


class FormulaToken(IntEnum):
    ERROR_EOI_IN_SQUOTES = -4
    ERROR_EOI_IN_DQUOTES = -3
    WHITESPACE = 0
    STRING = 1
    SINGLE_QUOTE = 11
    DOUBLE_QUOTE = 12
    EXCLAMATION = 13
    LEFT_PAREN = 14
    RIGHT_PAREN = 15
    COMMA = 16
    DOUBLE_PIPE = 17
    OPERATOR = 18
    LEFT_BRACE = 19
    RIGHT_BRACE = 20
    EOI = 99


_SINGLE_CHAR_TOKENS = {
    "!": FormulaToken.EXCLAMATION,
    "(": FormulaToken.LEFT_PAREN,
    ")": FormulaToken.RIGHT_PAREN,
    ",": FormulaToken.COMMA,
    "{": FormulaToken.LEFT_BRACE,
    "}": FormulaToken.RIGHT_BRACE,
}


class FormulaScanner(BaseScanner):
    """
    Tokenizer for formula text such as ``$[SUM(Sheet1!B2:B5)]`` or
    ``${Sheet1!C3||0}``.

    Single and double quotes open independent quote modes: inside single
    quotes the text up to the closing quote is one STRING (a sheet name),
    inside double quotes it is a string literal.
    """

    PUNCTUATION = "'\"!(),=<>&+*-/^%:|{}"

    def _reset_state(self) -> None:
        self._inside_squotes = False
        self._inside_dquotes = False

    def next_token(self) -> int:
        if self._inside_squotes:
            return self._next_quoted("'", FormulaToken.SINGLE_QUOTE, FormulaToken.ERROR_EOI_IN_SQUOTES)
        if self._inside_dquotes:
            return self._next_quoted('"', FormulaToken.DOUBLE_QUOTE, FormulaToken.ERROR_EOI_IN_DQUOTES)
        if self._at_end():
            return self._eoi(FormulaToken.EOI)

        ch = self._text[self._offset]
        if ch.isspace():
            return self._scan_whitespace()
        if ch == "'":
            self._inside_squotes = True
            return self._emit(FormulaToken.SINGLE_QUOTE, 1)
        if ch == '"':
            self._inside_dquotes = True
            return self._emit(FormulaToken.DOUBLE_QUOTE, 1)
        if ch in _SINGLE_CHAR_TOKENS:
            return self._emit(_SINGLE_CHAR_TOKENS[ch], 1)
        if ch == "|":
            if self._text[self._offset + 1:self._offset + 2] == "|":
                return self._emit(FormulaToken.DOUBLE_PIPE, 2)
            return self._emit(FormulaToken.OPERATOR, 1)
        if ch in OPERATOR_CHARS:
            return self._emit(FormulaToken.OPERATOR, 1)
        return self._scan_string()

    def _next_quoted(self, quote: str, quote_token: int, error_token: int) -> int:
        if self._at_end():
            return self._eoi(error_token)
        length = self._scan_quoted(quote)
        if length < 0:
            self._lexeme = self._text[self._offset:]
            self._offset = len(self._text)
            return error_token
        if length == 0:
            if quote == "'":
                self._inside_squotes = False
            else:
                self._inside_dquotes = False
            return self._emit(quote_token, 1)
        return self._emit(FormulaToken.STRING, length)

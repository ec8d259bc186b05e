"""
Formula reference extractor.

Pulls the distinct cell references out of formula text so that the engine
can track where each referenced cell ends up after blocks are copied and
shifted.  Function names (``SUM(``), string literals and operators are
skipped.  A reference may carry a default value after ``||``, used when
the referenced cell is gone after the transformation.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from dto.cell_ref import CELL_REF_PATTERN, CellRef
from exceptions import FormulaParseError
from scanners.formula import FormulaScanner, FormulaToken

logger = logging.getLogger(__name__)


class FormulaParser:
    def __init__(self, formula_text: str, location: str = ""):
        self._text = formula_text or ""
        self._location = location
        self._cell_refs: List[CellRef] = []
        self._reset_candidate()

    def _reset_candidate(self) -> None:
        self._sheet_name: Optional[str] = None
        self._candidate = ""
        self._default_value: Optional[str] = None
        self._expecting_default = False

    def _error(self, message: str) -> FormulaParseError:
        return FormulaParseError(message, self._text, self._location)

    def parse(self) -> List[CellRef]:
        scanner = FormulaScanner(self._text)
        token = scanner.next_token()

        while token != FormulaToken.EOI and token >= 0:
            lexeme = scanner.current_lexeme

            if token == FormulaToken.WHITESPACE:
                self._flush()
                self._reset_candidate()
            elif token == FormulaToken.STRING:
                if self._expecting_default:
                    self._default_value = (self._default_value or "") + lexeme
                    self._expecting_default = False
                else:
                    self._candidate += lexeme
            elif token == FormulaToken.EXCLAMATION:
                if not self._candidate:
                    raise self._error('Sheet name delimiter ("!") found with no sheet name')
                if self._expecting_default:
                    raise self._error('Sheet name delimiter ("!") found while expecting a default value')
                self._sheet_name = self._candidate
                self._candidate = ""
            elif token in (FormulaToken.LEFT_PAREN, FormulaToken.LEFT_BRACE):
                # Whatever came before was a function name or an expression opener.
                self._reset_candidate()
            elif token == FormulaToken.OPERATOR:
                if self._expecting_default and lexeme == "-":
                    self._default_value = "-"
                elif self._flush():
                    self._candidate += lexeme
            elif token in (
                FormulaToken.RIGHT_PAREN,
                FormulaToken.RIGHT_BRACE,
                FormulaToken.COMMA,
                FormulaToken.DOUBLE_QUOTE,
            ):
                self._flush()
                self._reset_candidate()
            elif token == FormulaToken.DOUBLE_PIPE:
                if self._default_value is not None or self._expecting_default:
                    raise self._error("Cannot have two default values")
                if not self._candidate:
                    raise self._error('Default value indicator ("||") found without a cell reference')
                self._expecting_default = True

            token = scanner.next_token()

        if token < 0:
            raise self._error("Found end of input while scanning formula text")
        self._flush()
        logger.debug("Cell references in %r: %s", self._text, self._cell_refs)
        return self._cell_refs

    def _flush(self) -> bool:
        """
        Record the candidate if it is a cell reference.

        Returns True when the candidate is not a reference and has no sheet
        name, meaning the caller may keep extending it (unquoted sheet names
        can contain operator characters).
        """
        candidate = self._candidate
        if candidate and CELL_REF_PATTERN.fullmatch(candidate):
            ref = CellRef.from_string(
                candidate,
                sheet_name=self._sheet_name,
                default_value=self._default_value,
            )
            if ref not in self._cell_refs:
                self._cell_refs.append(ref)
            self._reset_candidate()
            return False
        if candidate and self._sheet_name is None:
            return True
        self._reset_candidate()
        return False

"""
Cell references found inside formula text.

A ``CellRef`` is an optional sheet name, a column, a 1-based row number,
absolute markers for both, and an optional literal default value (the text
after ``||`` in ``Sheet1!C3||0``).  Equality and hashing ignore the default.
"""

from __future__ import annotations

import re
from typing import Optional

from openpyxl.utils import column_index_from_string, get_column_letter
from pydantic import BaseModel

CELL_REF_PATTERN = re.compile(r"\$?[A-Za-z]+\$?[1-9][0-9]*")
_CELL_REF_PARTS = re.compile(r"(\$?)([A-Za-z]+)(\$?)([1-9][0-9]*)")
_PLAIN_SHEET_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")

DEFAULT_VALUE_INDICATOR = "||"

_MAX_COL = 16384
_MAX_ROW = 1048576


def _is_a1_reference(text: str) -> bool:
    """Whether ``text`` addresses a real cell (columns up to XFD)."""
    match = _CELL_REF_PARTS.fullmatch(text)
    if match is None:
        return False
    try:
        col = column_index_from_string(match.group(2).upper())
    except ValueError:
        return False
    return col <= _MAX_COL and int(match.group(4)) <= _MAX_ROW


def quote_sheet_name(sheet_name: str) -> str:
    """Quote a sheet name for use in a formula when it needs quoting."""
    if sheet_name.startswith("'") and sheet_name.endswith("'") and len(sheet_name) > 1:
        return sheet_name
    if _PLAIN_SHEET_NAME.fullmatch(sheet_name) and not _is_a1_reference(sheet_name):
        return sheet_name
    return "'" + sheet_name.replace("'", "''") + "'"


def unquote_sheet_name(sheet_name: str) -> str:
    if sheet_name.startswith("'") and sheet_name.endswith("'") and len(sheet_name) > 1:
        return sheet_name[1:-1].replace("''", "'")
    return sheet_name


class CellRef(BaseModel):
    sheet_name: Optional[str] = None
    col_letters: str
    row_nbr: int
    col_absolute: bool = False
    row_absolute: bool = False
    default_value: Optional[str] = None

    # -------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------

    @classmethod
    def from_string(
        cls,
        text: str,
        sheet_name: Optional[str] = None,
        default_value: Optional[str] = None,
    ) -> "CellRef":
        """Build from ``A1``, ``$A$1`` or ``Sheet1!A1`` style text."""
        if "!" in text:
            sheet_part, text = text.rsplit("!", 1)
            sheet_name = unquote_sheet_name(sheet_part)
        m = _CELL_REF_PARTS.fullmatch(text)
        if m is None:
            raise ValueError(f"Not a cell reference: {text}")
        return cls(
            sheet_name=sheet_name,
            col_letters=m.group(2).upper(),
            row_nbr=int(m.group(4)),
            col_absolute=bool(m.group(1)),
            row_absolute=bool(m.group(3)),
            default_value=default_value,
        )

    @classmethod
    def from_coords(
        cls,
        row: int,
        col: int,
        sheet_name: Optional[str] = None,
        row_absolute: bool = False,
        col_absolute: bool = False,
    ) -> "CellRef":
        """Build from 0-based row and column indices."""
        return cls(
            sheet_name=sheet_name,
            col_letters=get_column_letter(col + 1),
            row_nbr=row + 1,
            col_absolute=col_absolute,
            row_absolute=row_absolute,
        )

    # -------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------

    @property
    def row(self) -> int:
        """0-based row index."""
        return self.row_nbr - 1

    @property
    def col(self) -> int:
        """0-based column index."""
        return column_index_from_string(self.col_letters) - 1

    def translate(self, d_row: int, d_col: int) -> "CellRef":
        return CellRef.from_coords(
            self.row + d_row,
            self.col + d_col,
            sheet_name=self.sheet_name,
            row_absolute=self.row_absolute,
            col_absolute=self.col_absolute,
        )

    def format_as_string(self) -> str:
        text = ""
        if self.sheet_name:
            text = quote_sheet_name(self.sheet_name) + "!"
        if self.col_absolute:
            text += "$"
        text += self.col_letters
        if self.row_absolute:
            text += "$"
        text += str(self.row_nbr)
        return text

    def format_as_string_with_default(self) -> str:
        text = self.format_as_string()
        if self.default_value is not None:
            text += DEFAULT_VALUE_INDICATOR + self.default_value
        return text

    # -------------------------------------------------------------------
    # Identity (default value excluded)
    # -------------------------------------------------------------------

    def _identity(self):
        return (
            self.sheet_name,
            self.col_letters,
            self.row_nbr,
            self.col_absolute,
            self.row_absolute,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CellRef):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        return self.format_as_string_with_default()

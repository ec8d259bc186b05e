"""Cell naming helpers shared by the transformers and error messages."""

from __future__ import annotations

from openpyxl.utils import get_column_letter


def cell_key(sheet_name: str, row: int, col: int) -> str:
    """``Sheet1!B3`` key for 0-based ``row`` / ``col``."""
    return f"{sheet_name}!{get_column_letter(col + 1)}{row + 1}"


def cell_location(sheet_name: str, row: int, col: int) -> str:
    """Location suffix for error messages, e.g. `` at Sheet1!B3``."""
    return f" at {cell_key(sheet_name, row, col)}"


# openpyxl creates a cell on every ``ws.cell()`` / ``iter_rows()`` access,
# growing ``max_row`` / ``max_column``.  These read the worksheet's private
# cell store instead, so looking never adds cells.


def existing_cell(worksheet, row: int, col: int):
    """Cell at 0-based ``row`` / ``col`` if it exists, else ``None``."""
    return worksheet._cells.get((row + 1, col + 1))


def existing_cells(worksheet):
    """Every cell the worksheet already holds."""
    return list(worksheet._cells.values())

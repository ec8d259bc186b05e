from __future__ import annotations

from typing import Any


def fill(worksheet, rows: list[list[Any]]) -> None:
    """Write ``rows`` into the worksheet starting at A1; ``None`` leaves a cell empty."""
    for r, row_values in enumerate(rows, start=1):
        for c, value in enumerate(row_values, start=1):
            if value is not None:
                worksheet.cell(row=r, column=c, value=value)


def values(worksheet) -> list[list[Any]]:
    return [[cell.value for cell in row] for row in worksheet.iter_rows()]


def column(worksheet, letter: str) -> list[Any]:
    return [cell.value for cell in worksheet[letter]]

"""
``SheetOps`` over an openpyxl worksheet.

openpyxl is 1-based; everything passed in here is 0-based.  Cells inside a
merged region (other than its top-left cell) are read-only ``MergedCell``
placeholders, so writes to them are skipped.
"""

from __future__ import annotations

import datetime
import decimal
import logging
from copy import copy
from typing import Any, List, Optional

from openpyxl.cell.cell import MergedCell
from openpyxl.cell.rich_text import CellRichText
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.cell_range import CellRange
from openpyxl.worksheet.worksheet import Worksheet

from sheet.base import Region, SheetOps
from utils.cells import existing_cell

logger = logging.getLogger(__name__)

# Values openpyxl can store as they are; anything else is stored as text.
_NATIVE_TYPES = (
    str,
    int,
    float,
    bool,
    decimal.Decimal,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    CellRichText,
)


def _contains(outer: Region, inner: Region) -> bool:
    return (
        outer[0] <= inner[0]
        and outer[1] <= inner[1]
        and inner[2] <= outer[2]
        and inner[3] <= outer[3]
    )


class OpenpyxlSheet(SheetOps):
    def __init__(self, worksheet: Worksheet):
        self._ws = worksheet

    @property
    def worksheet(self) -> Worksheet:
        return self._ws

    @property
    def name(self) -> str:
        return self._ws.title

    # -------------------------------------------------------------------
    # Cells
    # -------------------------------------------------------------------

    def cell(self, row: int, col: int):
        return self._ws.cell(row=row + 1, column=col + 1)

    def _existing(self, row: int, col: int):
        return existing_cell(self._ws, row, col)

    def get_value(self, row: int, col: int) -> Any:
        cell = self._existing(row, col)
        return None if cell is None else cell.value

    def set_value(self, row: int, col: int, value: Any) -> None:
        cell = self.cell(row, col)
        if isinstance(cell, MergedCell):
            if value is not None:
                logger.warning(
                    "Ignoring value written to merged cell %s!%s",
                    self.name,
                    cell.coordinate,
                )
            return
        if value is not None and not isinstance(value, _NATIVE_TYPES):
            value = str(value)
        cell.value = value

    def is_immaterial(self, row: int, col: int) -> bool:
        cell = self._existing(row, col)
        if cell is None:
            return True
        return cell.value in (None, "") and not cell.has_style

    def clear_cell(self, row: int, col: int) -> None:
        cell = self._existing(row, col)
        if cell is None or isinstance(cell, MergedCell):
            return
        cell.value = None

    def remove_cell(self, row: int, col: int) -> None:
        cell = self._existing(row, col)
        if cell is None or isinstance(cell, MergedCell):
            return
        cell.value = None
        cell.hyperlink = None
        cell.comment = None
        cell.style = "Normal"

    def copy_cell(self, src_row: int, src_col: int, dst_row: int, dst_col: int) -> None:
        src = self.cell(src_row, src_col)
        dst = self.cell(dst_row, dst_col)
        if isinstance(src, MergedCell) or isinstance(dst, MergedCell):
            return
        dst.value = src.value
        if src.has_style:
            dst._style = copy(src._style)
        if src.hyperlink:
            dst.hyperlink = copy(src.hyperlink)
        if src.comment:
            dst.comment = copy(src.comment)

    def move_range(self, region: Region, d_rows: int, d_cols: int) -> None:
        top, left, bottom, right = region
        if (d_rows == 0 and d_cols == 0) or bottom < top or right < left:
            return
        contained = [r for r in self._merged_ranges() if _contains(region, self._region_of(r))]
        for mcr in contained:
            self._ws.merged_cells.remove(mcr)

        self._ws.move_range(
            CellRange(min_col=left + 1, min_row=top + 1, max_col=right + 1, max_row=bottom + 1),
            rows=d_rows,
            cols=d_cols,
        )

        for mcr in contained:
            mcr.shift(col_shift=d_cols, row_shift=d_rows)
            self._ws.merged_cells.add(mcr)

    def last_row(self) -> int:
        return self._ws.max_row - 1

    def last_col(self) -> int:
        return self._ws.max_column - 1

    # -------------------------------------------------------------------
    # Merged regions
    # -------------------------------------------------------------------

    def _merged_ranges(self):
        return list(self._ws.merged_cells.ranges)

    @staticmethod
    def _region_of(rng) -> Region:
        return (rng.min_row - 1, rng.min_col - 1, rng.max_row - 1, rng.max_col - 1)

    def merged_regions(self) -> List[Region]:
        return [self._region_of(r) for r in self._merged_ranges()]

    def add_merged_region(self, region: Region) -> None:
        top, left, bottom, right = region
        self._ws.merge_cells(
            start_row=top + 1,
            start_column=left + 1,
            end_row=bottom + 1,
            end_column=right + 1,
        )

    def remove_merged_region(self, region: Region) -> None:
        top, left, bottom, right = region
        self._ws.unmerge_cells(
            start_row=top + 1,
            start_column=left + 1,
            end_row=bottom + 1,
            end_column=right + 1,
        )

    # -------------------------------------------------------------------
    # Dimensions & grouping
    # -------------------------------------------------------------------

    def get_row_height(self, row: int) -> Optional[float]:
        if row + 1 not in self._ws.row_dimensions:
            return None
        return self._ws.row_dimensions[row + 1].height

    def set_row_height(self, row: int, height: Optional[float]) -> None:
        self._ws.row_dimensions[row + 1].height = height

    def get_column_width(self, col: int) -> Optional[float]:
        letter = get_column_letter(col + 1)
        if letter not in self._ws.column_dimensions:
            return None
        return self._ws.column_dimensions[letter].width

    def set_column_width(self, col: int, width: Optional[float]) -> None:
        if width is None:
            return
        self._ws.column_dimensions[get_column_letter(col + 1)].width = width

    def group_rows(self, start: int, end: int, collapse: bool = False) -> None:
        self._ws.row_dimensions.group(start + 1, end + 1, outline_level=1, hidden=collapse)

    def group_cols(self, start: int, end: int, collapse: bool = False) -> None:
        self._ws.column_dimensions.group(
            get_column_letter(start + 1),
            get_column_letter(end + 1),
            outline_level=1,
            hidden=collapse,
        )

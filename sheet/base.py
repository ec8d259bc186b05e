"""
Spreadsheet object model boundary.

The engine only touches a sheet through ``SheetOps``.  All coordinates on
this interface are 0-based; implementations translate to whatever their
object model uses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

# (top, left, bottom, right), 0-based inclusive
Region = Tuple[int, int, int, int]


class SheetOps(ABC):
    """Capabilities the transformation engine needs from a worksheet."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    # -------------------------------------------------------------------
    # Cells
    # -------------------------------------------------------------------

    @abstractmethod
    def get_value(self, row: int, col: int) -> Any:
        ...

    @abstractmethod
    def set_value(self, row: int, col: int, value: Any) -> None:
        ...

    @abstractmethod
    def cell(self, row: int, col: int) -> Any:
        """The native cell object, for style access."""
        ...

    @abstractmethod
    def is_immaterial(self, row: int, col: int) -> bool:
        """True when the cell is missing, or blank with the default style."""
        ...

    @abstractmethod
    def clear_cell(self, row: int, col: int) -> None:
        """Blank the value, keep the formatting."""
        ...

    @abstractmethod
    def remove_cell(self, row: int, col: int) -> None:
        """Blank the value and reset the formatting."""
        ...

    @abstractmethod
    def copy_cell(self, src_row: int, src_col: int, dst_row: int, dst_col: int) -> None:
        """Copy value, formatting, hyperlink and comment."""
        ...

    @abstractmethod
    def move_range(self, region: Region, d_rows: int, d_cols: int) -> None:
        """
        Move the cells in ``region`` by the given offsets, overwriting the
        destination.  Merged regions wholly inside ``region`` move too.
        """
        ...

    @abstractmethod
    def last_row(self) -> int:
        ...

    @abstractmethod
    def last_col(self) -> int:
        ...

    # -------------------------------------------------------------------
    # Merged regions
    # -------------------------------------------------------------------

    @abstractmethod
    def merged_regions(self) -> List[Region]:
        ...

    @abstractmethod
    def add_merged_region(self, region: Region) -> None:
        ...

    @abstractmethod
    def remove_merged_region(self, region: Region) -> None:
        ...

    # -------------------------------------------------------------------
    # Dimensions & grouping
    # -------------------------------------------------------------------

    @abstractmethod
    def get_row_height(self, row: int) -> Optional[float]:
        """Row height in points, ``None`` for the default."""
        ...

    @abstractmethod
    def set_row_height(self, row: int, height: Optional[float]) -> None:
        ...

    @abstractmethod
    def get_column_width(self, col: int) -> Optional[float]:
        """Column width in characters, ``None`` for the default."""
        ...

    @abstractmethod
    def set_column_width(self, col: int, width: Optional[float]) -> None:
        ...

    @abstractmethod
    def group_rows(self, start: int, end: int, collapse: bool = False) -> None:
        ...

    @abstractmethod
    def group_cols(self, start: int, end: int, collapse: bool = False) -> None:
        ...

"""
Worksheet access for the transformation engine.

``SheetOps`` is the capability set the engine needs; ``OpenpyxlSheet``
provides it over an openpyxl worksheet.  Block-level operations (delete,
shift, copy, past-end handling) live in ``sheet.blocks``.
"""

from sheet.base import Region, SheetOps
from sheet.cell_ref_map import CellRefMap
from sheet.openpyxl_sheet import OpenpyxlSheet

__all__ = [
    "CellRefMap",
    "OpenpyxlSheet",
    "Region",
    "SheetOps",
]

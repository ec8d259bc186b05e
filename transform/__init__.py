"""
Transformation of sheets, blocks and cells.

``WorkbookTransformer`` (in ``transform.workbook``) is the entry point; it
walks every sheet with a ``BlockTransformer`` over the whole sheet, which
hands each cell to a ``CellTransformer``.
"""

from transform.block import BlockTransformer
from transform.cell import CellTransformer

__all__ = [
    "BlockTransformer",
    "CellTransformer",
]

from __future__ import annotations

import logging

from dto.context import TagContext, WorkbookContext
from transform.cell import CellTransformer

logger = logging.getLogger(__name__)


class BlockTransformer:
    """
    Transform every cell of the context's block, row by row.

    The block may grow or shrink while its cells are processed (nested loops
    copy content, removed blocks pull content back), so the bounds are read
    again on every step.  A cell whose processing returns ``False`` had its
    own block removed and is visited again, since other content moved in.
    """

    def transform(self, context: TagContext, workbook_context: WorkbookContext) -> None:
        block = context.block
        transformer = CellTransformer()
        logger.debug("Transforming block: %s", block)

        row = block.top
        while row <= block.bottom:
            col = block.left
            while col <= block.right and row <= block.bottom:
                if transformer.transform(context, workbook_context, row, col):
                    col += 1
            row += 1

        logger.debug("End: %s", block)

"""
Loop transformation engine.

One ``LoopEngine`` runs one invocation of a loop tag:

  1. bump the workbook sequence number (it tells the copies of different
     loops apart in the cell-reference map);
  2. with zero iterations, remove the block (or, for fixed loops, clear or
     delete it in place) and report the anchor cell as not transformed;
  3. otherwise make room for the copies unless fixed, copy the block once
     per iteration and transform each copy with its item bound, letting the
     copies still pending react to the growth of each processed one;
  4. finally grow the tag's block over all copies and group them if asked.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from dto.block import Block
from dto.events import TagLoopEvent
from dto.loop import GroupDir, PastEndAction
from exceptions import InternalStateError
from loops.status import LoopTagStatus
from sheet import blocks
from transform.block import BlockTransformer

if TYPE_CHECKING:
    from loops.base import BaseLoopTag

logger = logging.getLogger(__name__)


class LoopEngine:
    def __init__(self, tag: "BaseLoopTag"):
        self.tag = tag
        self.context = tag.context
        self.workbook_context = tag.workbook_context

    # -------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------

    def run(self) -> bool:
        """``True`` when the tag's cell was transformed, ``False`` to revisit it."""
        tag = self.tag
        block = self.context.block
        seq_nbr = self.workbook_context.next_sequence_nbr()
        fixed = self._is_fixed()
        num_iterations = tag.num_iterations()
        logger.debug("Loop %s: %d iterations (fixed=%s, seq=%d)", tag, num_iterations, fixed, seq_nbr)

        if num_iterations == 0:
            self._handle_no_iterations(block, fixed)
            return False

        if not fixed:
            blocks.shift_for_block(self.context, self.workbook_context, block, num_iterations)
        copies: List[Block] = [
            blocks.copy_block(self.context, self.workbook_context, block, i)
            for i in range(num_iterations)
        ]

        status: Optional[LoopTagStatus] = None
        beans = self.context.beans
        if tag.var_status:
            status = tag.status_object(self)
            beans[tag.var_status] = status

        collection_size = tag.collection_size()
        for index, item in enumerate(tag.loop_iterator()):
            if index >= num_iterations:
                break
            current = copies[index]
            if index >= collection_size:
                self._past_end(current)

            tag.before_item(self.context, current, item, index)
            if not self._fire_before(current, index):
                # Vetoed copies keep their template text.
                self._mark_processed(current)
            else:
                right, bottom = current.right, current.bottom
                block_context = self.context.derive(
                    current,
                    current_tag=tag,
                    formula_suffix=f"{self.context.formula_suffix}[{seq_nbr},{index}]",
                )
                logger.debug("Block before: %s", current)
                BlockTransformer().transform(block_context, self.workbook_context)
                logger.debug("Block after: %s", current)

                col_growth = current.right - right
                row_growth = current.bottom - bottom
                if col_growth or row_growth:
                    for pending in copies[index + 1:]:
                        pending.react_to_growth(current, col_growth, row_growth)
                self._fire_after(current, index)
            tag.after_item(self.context, current, item, index)
            if status is not None:
                status._advance(self)

        if status is not None:
            beans.pop(tag.var_status, None)

        # Vetoed copies count too.
        max_right = max(c.right for c in copies)
        max_bottom = max(c.bottom for c in copies)
        block.expand(max_right - block.right, max_bottom - block.bottom)
        self._group(block, copies[-1])
        return True

    # -------------------------------------------------------------------
    # Pieces
    # -------------------------------------------------------------------

    def _is_fixed(self) -> bool:
        if self.tag.fixed:
            return True
        names = self.tag.collection_names() or []
        return any(name in names for name in self.workbook_context.fixed_size_collection_names)

    def _handle_no_iterations(self, block: Block, fixed: bool) -> None:
        tag = self.tag
        if not fixed:
            tag.remove_block()
            return
        action = tag.past_end_action
        if action == PastEndAction.CLEAR_CELL:
            tag.clear_block()
        elif action == PastEndAction.REMOVE_CELL:
            tag.delete_block()
        elif action == PastEndAction.REPLACE_EXPR:
            blocks.take_past_end_action(
                self.context, self.workbook_context, block, tag.var_names(), action, tag.replace_value
            )
            block.collapse()
        else:
            raise InternalStateError(f"Unknown past end action: {action}", location=tag.location)

    def _past_end(self, block: Block) -> None:
        """The copy is beyond the collection: the whole copy is past the end."""
        action = self.tag.past_end_action
        if action == PastEndAction.CLEAR_CELL:
            blocks.clear_block(self.context, self.workbook_context, block)
        elif action == PastEndAction.REMOVE_CELL:
            blocks.delete_block(self.context, self.workbook_context, block)
        elif action == PastEndAction.REPLACE_EXPR:
            blocks.take_past_end_action(
                self.context, self.workbook_context, block, self.tag.var_names(), action, self.tag.replace_value
            )
        else:
            raise InternalStateError(f"Unknown past end action: {action}", location=self.tag.location)

    def _fire_before(self, block: Block, index: int) -> bool:
        listener = self.tag.loop_listener
        if listener is None:
            return True
        event = TagLoopEvent(sheet=self.context.sheet, block=block, beans=self.context.beans, index=index)
        return listener.fire_before(event)

    def _fire_after(self, block: Block, index: int) -> None:
        listener = self.tag.loop_listener
        if listener is not None:
            event = TagLoopEvent(sheet=self.context.sheet, block=block, beans=self.context.beans, index=index)
            listener.fire_after(event)

    def _group(self, first: Block, last: Block) -> None:
        if self.tag.group_dir == GroupDir.ROWS:
            blocks.group_rows(self.context, first.top, last.bottom, self.tag.collapse)
        elif self.tag.group_dir == GroupDir.COLS:
            blocks.group_cols(self.context, first.left, last.right, self.tag.collapse)

    def _mark_processed(self, block: Block) -> None:
        for row in range(block.top, block.bottom + 1):
            for col in range(block.left, block.right + 1):
                self.context.processed_cells.add((row, col))

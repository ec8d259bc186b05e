"""
Block-level sheet operations used by the loop engine.

Every operation works on the cells of one ``Block`` and keeps the merged
regions, row heights / column widths and the cell-reference map in step with
the cells it moves.  Shifting also grows or shrinks the ancestor blocks whose
edges line up with the moved content.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from dto.block import Block, Direction
from dto.context import TagContext, WorkbookContext
from dto.loop import PastEndAction
from exceptions import InternalStateError
from expressions.evaluator import find_expressions
from utils.cells import cell_location
from utils.rich_text import is_rich, plain_text, replace_all

logger = logging.getLogger(__name__)

BEGIN_FORMULA = "$["
END_FORMULA = "]"

EMPTY_LIST_EXPR = "${[]}"
_ITEMS_ATTR_PREFIX = 'items="'


def _cells(block: Block):
    for row in range(block.top, block.bottom + 1):
        for col in range(block.left, block.right + 1):
            yield row, col


def _inside(block: Block, region) -> bool:
    top, left, bottom, right = region
    return block.top <= top and bottom <= block.bottom and block.left <= left and right <= block.right


# -------------------------------------------------------------------
# Removing content
# -------------------------------------------------------------------

def delete_block(context: TagContext, workbook_context: WorkbookContext, block: Block) -> None:
    """Remove every cell of the block and the merged regions inside it."""
    sheet = context.sheet
    logger.debug("Deleting %s on %s", block, sheet.name)
    for region in sheet.merged_regions():
        if _inside(block, region):
            sheet.remove_merged_region(region)
    for row, col in _cells(block):
        sheet.remove_cell(row, col)
    workbook_context.cell_ref_map.remove_in_range(sheet.name, block)


def clear_block(context: TagContext, workbook_context: WorkbookContext, block: Block) -> None:
    """Blank every cell of the block, keeping formatting and merges."""
    sheet = context.sheet
    logger.debug("Clearing %s on %s", block, sheet.name)
    for row, col in _cells(block):
        sheet.clear_cell(row, col)


def get_shift_ending_ancestor(block: Block, num_rows: int, num_cols: int) -> Optional[Block]:
    """
    Walk up through ancestors that share the block's direction and edges,
    growing each by the given amounts, and return the first one that does
    not line up.  Content is shifted only as far as that ancestor's edge.
    """
    ancestor = block.parent
    while ancestor is not None:
        if ancestor.direction != block.direction:
            break
        if block.direction == Direction.VERTICAL and (
            ancestor.left != block.left or ancestor.right != block.right
        ):
            break
        if block.direction == Direction.HORIZONTAL and (
            ancestor.top != block.top or ancestor.bottom != block.bottom
        ):
            break
        if num_rows or num_cols:
            logger.debug("Growing ancestor %s by %d rows, %d cols", ancestor, num_rows, num_cols)
            ancestor.expand(num_cols, num_rows)
        ancestor = ancestor.parent
    return ancestor


def _shift(context: TagContext, workbook_context: WorkbookContext, region: Block, d_rows: int, d_cols: int) -> None:
    if region.is_collapsed:
        return
    sheet = context.sheet
    sheet.move_range((region.top, region.left, region.bottom, region.right), d_rows, d_cols)
    workbook_context.cell_ref_map.shift_in_range(sheet.name, region, d_rows, d_cols)


def remove_block(context: TagContext, workbook_context: WorkbookContext, block: Block) -> None:
    """Delete the block and close the gap by shifting later content."""
    sheet = context.sheet
    logger.debug("Removing %s on %s", block, sheet.name)

    if block.direction == Direction.VERTICAL:
        num_rows = block.height
        ancestor = get_shift_ending_ancestor(block, -num_rows, 0)
        bottom = ancestor.bottom if ancestor is not None else sheet.last_row()
        delete_block(context, workbook_context, block)
        if ancestor is not None and ancestor.parent is None and (
            block.left == ancestor.left and block.right == ancestor.right
        ):
            logger.debug("Shrinking root %s by %d rows", ancestor, num_rows)
            ancestor.expand(0, -num_rows)
            _copy_row_heights(context, block.bottom + 1, bottom, -num_rows)
        to_shift = Block(left=block.left, right=block.right, top=block.bottom + 1, bottom=bottom)
        _shift(context, workbook_context, to_shift, -num_rows, 0)

    elif block.direction == Direction.HORIZONTAL:
        num_cols = block.width
        ancestor = get_shift_ending_ancestor(block, 0, -num_cols)
        right = ancestor.right if ancestor is not None else sheet.last_col()
        delete_block(context, workbook_context, block)
        if ancestor is not None and ancestor.parent is None and (
            block.top == ancestor.top and block.bottom == ancestor.bottom
        ):
            logger.debug("Shrinking root %s by %d columns", ancestor, num_cols)
            ancestor.expand(-num_cols, 0)
            _copy_column_widths(context, block.right + 1, right, -num_cols)
        to_shift = Block(left=block.right + 1, right=right, top=block.top, bottom=block.bottom)
        _shift(context, workbook_context, to_shift, 0, -num_cols)

    else:
        delete_block(context, workbook_context, block)


# -------------------------------------------------------------------
# Making room for copies
# -------------------------------------------------------------------

def _empty_rows_at_bottom(context: TagContext, region: Block) -> int:
    empty = 0
    for row in range(region.bottom, region.top - 1, -1):
        if all(context.sheet.is_immaterial(row, col) for col in range(region.left, region.right + 1)):
            empty += 1
        else:
            break
    return empty


def _empty_cols_at_right(context: TagContext, region: Block) -> int:
    empty = 0
    for col in range(region.right, region.left - 1, -1):
        if all(context.sheet.is_immaterial(row, col) for row in range(region.top, region.bottom + 1)):
            empty += 1
        else:
            break
    return empty


def shift_for_block(
    context: TagContext,
    workbook_context: WorkbookContext,
    block: Block,
    num_blocks: int,
) -> None:
    """
    Shift the content after ``block`` out of the way so that ``num_blocks``
    copies of it fit.

    Content is shifted up to each shift-ending ancestor in turn; empty rows
    (or columns) at the end of an ancestor absorb part of the shift.  The
    shifts run innermost-last so outer content moves before inner content
    lands on top of it.
    """
    parent = block.parent
    pending: List[tuple] = []

    if block.direction == Direction.VERTICAL:
        translate = (num_blocks - 1) * block.height
        prev, ancestor = block, get_shift_ending_ancestor(block, translate, 0)
        while translate > 0 and ancestor is not None:
            left, right = prev.left, prev.right
            if prev.direction == Direction.HORIZONTAL:
                left, right = ancestor.left, ancestor.right
            top = prev.bottom + 1
            if pending:
                top -= pending[-1][1]
            region = Block(left=left, right=right, top=top, bottom=ancestor.bottom)
            empty = _empty_rows_at_bottom(context, region)
            region.bottom -= empty
            pending.append((region, translate))
            translate -= empty
            if translate > 0:
                logger.debug("Growing ancestor %s by %d rows", ancestor, translate)
                ancestor.expand(0, translate)
            if ancestor.parent is None:
                break
            prev, ancestor = ancestor, get_shift_ending_ancestor(ancestor, translate, 0)

        copy_heights = parent is None or parent.direction != Direction.HORIZONTAL or parent.iteration_nbr == 0
        while pending:
            region, amount = pending.pop()
            if copy_heights:
                _copy_row_heights(context, region.top, region.bottom, amount)
            _shift(context, workbook_context, region, amount, 0)

    elif block.direction == Direction.HORIZONTAL:
        translate = (num_blocks - 1) * block.width
        prev, ancestor = block, get_shift_ending_ancestor(block, 0, translate)
        while translate > 0 and ancestor is not None:
            top, bottom = prev.top, prev.bottom
            left = prev.right + 1
            if pending:
                left -= pending[-1][1]
            region = Block(left=left, right=ancestor.right, top=top, bottom=bottom)
            empty = _empty_cols_at_right(context, region)
            region.right -= empty
            pending.append((region, translate))
            translate -= empty
            if translate > 0:
                logger.debug("Growing ancestor %s by %d columns", ancestor, translate)
                ancestor.expand(translate, 0)
            if ancestor.parent is None:
                break
            prev, ancestor = ancestor, get_shift_ending_ancestor(ancestor, 0, translate)

        copy_widths = parent is None or parent.direction != Direction.VERTICAL or parent.iteration_nbr == 0
        while pending:
            region, amount = pending.pop()
            if copy_widths:
                _copy_column_widths(context, region.left, region.right, amount)
            _shift(context, workbook_context, region, 0, amount)


def _copy_row_heights(context: TagContext, top: int, bottom: int, amount: int) -> None:
    sheet = context.sheet
    rows = range(bottom, top - 1, -1) if amount > 0 else range(top, bottom + 1)
    for row in rows:
        height = sheet.get_row_height(row)
        if height is not None:
            sheet.set_row_height(row + amount, height)


def _copy_column_widths(context: TagContext, left: int, right: int, amount: int) -> None:
    sheet = context.sheet
    cols = range(right, left - 1, -1) if amount > 0 else range(left, right + 1)
    for col in cols:
        width = sheet.get_column_width(col)
        if width is not None:
            sheet.set_column_width(col + amount, width)


# -------------------------------------------------------------------
# Copying
# -------------------------------------------------------------------

def _suffix_formula(text: str, suffix: str, iteration: int) -> Optional[str]:
    start = text.find(BEGIN_FORMULA)
    end = text.rfind(END_FORMULA)
    if start < 0 or end < 0 or start >= end:
        return None
    if iteration > 0:
        # The copied text already carries the first iteration's suffix.
        idx = text.rfind("[")
        if idx > -1:
            text = text[:idx]
    return text + suffix


def copy_block(
    context: TagContext,
    workbook_context: WorkbookContext,
    block: Block,
    iteration: int,
) -> Optional[Block]:
    """
    Copy the block ``iteration`` block-lengths away in its direction.

    Iteration 0 is the block itself.  Formula text (``$[...]``) in each copy
    gets the ``[seq,iteration]`` suffix that identifies the copy.
    """
    if block.direction == Direction.NONE:
        return None

    sheet = context.sheet
    seq_nbr = workbook_context.sequence_nbr
    new_suffix = f"[{seq_nbr},{iteration}]"
    vertical = block.direction == Direction.VERTICAL
    d_rows = iteration * block.height if vertical else 0
    d_cols = 0 if vertical else iteration * block.width

    logger.debug("Copying %s by (%d rows, %d cols), suffix %s", block, d_rows, d_cols, new_suffix)
    for row, col in _cells(block):
        new_row, new_col = row + d_rows, col + d_cols
        if iteration > 0:
            sheet.copy_cell(row, col, new_row, new_col)
        value = sheet.get_value(new_row, new_col)
        if isinstance(value, str):
            suffixed = _suffix_formula(value, new_suffix, iteration)
            if suffixed is not None:
                sheet.set_value(new_row, new_col, suffixed)

    workbook_context.cell_ref_map.copy_for_block(
        sheet.name, block, d_rows, d_cols, context.formula_suffix, new_suffix
    )
    if iteration == 0:
        return block

    for top, left, bottom, right in sheet.merged_regions():
        if _inside(block, (top, left, bottom, right)):
            sheet.add_merged_region((top + d_rows, left + d_cols, bottom + d_rows, right + d_cols))

    parent = block.parent
    if vertical:
        if parent is None or parent.direction != Direction.HORIZONTAL or parent.iteration_nbr == 0:
            _copy_row_heights(context, block.top, block.bottom, d_rows)
    else:
        if parent is None or parent.direction != Direction.VERTICAL or parent.iteration_nbr == 0:
            _copy_column_widths(context, block.left, block.right, d_cols)

    new_block = Block(
        left=block.left + d_cols,
        right=block.right + d_cols,
        top=block.top + d_rows,
        bottom=block.bottom + d_rows,
        parent=parent,
        iteration_nbr=iteration,
        direction=block.direction,
    )
    return new_block


# -------------------------------------------------------------------
# Past end of collection
# -------------------------------------------------------------------

def _references(expression: str, name: str) -> bool:
    return re.search(r"(?<![\w.])" + re.escape(name) + r"(?!\w)", expression) is not None


def replace_past_end_expressions(value, past_end_refs: List[str], replacement: str):
    text = plain_text(value)
    result = value
    for start, end in reversed(find_expressions(text)):
        marker = text[start:end]
        if not any(_references(marker[2:-1], ref) for ref in past_end_refs):
            continue
        new = replacement
        if text[:start].endswith(_ITEMS_ATTR_PREFIX) and text[end:].startswith('"'):
            # A nested loop over a past-end item loops over nothing.
            new = EMPTY_LIST_EXPR
        if is_rich(result):
            result = replace_all(result, marker, new)
        else:
            result = result[:start] + new + result[end:]
    return result


def take_past_end_action(
    context: TagContext,
    workbook_context: WorkbookContext,
    block: Block,
    past_end_refs: List[str],
    action: PastEndAction,
    replacement_value: str = "",
) -> None:
    """
    Apply the past-end action to every cell of the block whose expressions
    reference one of ``past_end_refs`` (loop variables with no item).
    """
    sheet = context.sheet
    logger.debug("Past end action %s on %s for %s", action, block, past_end_refs)
    for row, col in _cells(block):
        value = sheet.get_value(row, col)
        if not isinstance(value, str) and not is_rich(value):
            continue
        text = plain_text(value)
        hit = any(
            _references(text[s + 2:e - 1], ref)
            for s, e in find_expressions(text)
            for ref in past_end_refs
        )
        if not hit:
            continue
        if action == PastEndAction.CLEAR_CELL:
            sheet.clear_cell(row, col)
        elif action == PastEndAction.REMOVE_CELL:
            sheet.remove_cell(row, col)
        elif action == PastEndAction.REPLACE_EXPR:
            sheet.set_value(row, col, replace_past_end_expressions(value, past_end_refs, replacement_value))
        else:
            raise InternalStateError(
                f"Unknown past end action: {action}",
                location=cell_location(sheet.name, row, col),
            )


# -------------------------------------------------------------------
# Grouping
# -------------------------------------------------------------------

def group_rows(context: TagContext, begin: int, end: int, collapse: bool) -> None:
    logger.debug("Grouping rows %d-%d on %s (collapsed=%s)", begin, end, context.sheet.name, collapse)
    context.sheet.group_rows(begin, end, collapse)


def group_cols(context: TagContext, begin: int, end: int, collapse: bool) -> None:
    logger.debug("Grouping cols %d-%d on %s (collapsed=%s)", begin, end, context.sheet.name, collapse)
    context.sheet.group_cols(begin, end, collapse)

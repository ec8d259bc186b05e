from __future__ import annotations

from dto.block import Block, Direction
from dto.cell_ref import CellRef
from dto.loop import PastEndAction
from sheet import blocks
from sheet.cell_ref_map import CellRefMap, split_key
from tests.helpers import fill
from utils.cells import existing_cell, existing_cells

# -------------------------------------------------------------------
# Block geometry
# -------------------------------------------------------------------


def test_block_dimensions_and_collapse() -> None:
    block = Block(left=1, right=3, top=2, bottom=2)
    assert (block.width, block.height) == (3, 1)
    assert block.contains(2, 3) and not block.contains(3, 3)
    block.collapse()
    assert block.is_collapsed
    assert (block.right, block.bottom) == (0, 1)


def test_vertical_copy_reacts_to_growth() -> None:
    grown = Block(left=0, right=8, top=0, bottom=8)
    pending = Block(left=0, right=5, top=6, bottom=11, direction=Direction.VERTICAL)
    pending.react_to_growth(grown, 3, 3)
    assert (pending.left, pending.right, pending.top, pending.bottom) == (0, 8, 9, 14)


def test_horizontal_copy_never_shrinks() -> None:
    sibling = Block(left=0, right=3, top=0, bottom=2, direction=Direction.HORIZONTAL)
    pending = Block(left=6, right=11, top=0, bottom=5, direction=Direction.HORIZONTAL)
    pending.react_to_growth(sibling, -2, -3)
    assert (pending.left, pending.right, pending.top, pending.bottom) == (4, 9, 0, 5)


def test_bodiless_block_has_no_direction() -> None:
    block = Block.bodiless(None, 4, 2)
    assert block.direction == Direction.NONE
    assert (block.left, block.right, block.top, block.bottom) == (2, 2, 4, 4)


# -------------------------------------------------------------------
# Cell reference map
# -------------------------------------------------------------------


def test_split_key() -> None:
    assert split_key("Sheet1!B3[0,1][2,0]") == ("Sheet1!B3", "[0,1][2,0]")
    assert split_key("Sheet1!B3") == ("Sheet1!B3", "")


def test_cell_ref_map_follows_shifts_and_removals() -> None:
    refs = CellRefMap()
    refs.register_sheet("Sheet1", [(2, 1), (0, 0)])
    assert refs.get("Sheet1!B3") == [CellRef.from_string("Sheet1!B3")]

    refs.shift_in_range("Sheet1", Block(left=0, right=3, top=2, bottom=10), 2, 0)
    assert refs.get("Sheet1!B3") == [CellRef.from_string("Sheet1!B5")]
    assert refs.get("Sheet1!A1") == [CellRef.from_string("Sheet1!A1")]

    refs.remove_in_range("Sheet1", Block(left=0, right=0, top=0, bottom=0))
    assert refs.get("Sheet1!A1") == []


def test_cell_ref_map_other_sheet_untouched() -> None:
    refs = CellRefMap()
    refs.register_sheet("Other", [(2, 1)])
    refs.shift_in_range("Sheet1", Block(left=0, right=3, top=0, bottom=10), 5, 0)
    assert refs.get("Other!B3") == [CellRef.from_string("Other!B3")]


def test_cell_ref_map_records_copies() -> None:
    refs = CellRefMap()
    refs.register_sheet("Sheet1", [(2, 1)])
    block = Block(left=0, right=3, top=2, bottom=2)
    refs.copy_for_block("Sheet1", block, 0, 0, "", "[0,0]")
    refs.copy_for_block("Sheet1", block, 1, 0, "", "[0,1]")
    assert refs.get("Sheet1!B3[0,0]") == [CellRef.from_string("Sheet1!B3")]
    assert refs.get("Sheet1!B3[0,1]") == [CellRef.from_string("Sheet1!B4")]
    assert len(refs) == 3


# -------------------------------------------------------------------
# Block operations
# -------------------------------------------------------------------


def test_remove_block_pulls_content_up(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["a"], ["b"], ["c"], ["d"]])
    context, workbook_context = make_context()
    root = context.block
    block = Block(left=0, right=0, top=1, bottom=1, parent=root)

    blocks.remove_block(context, workbook_context, block)

    assert [sheet.get_value(r, 0) for r in range(4)] == ["a", "c", "d", None]
    assert root.bottom == 2


def test_shift_and_copy_block(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["${x}", "keep"], ["after", None]])
    context, workbook_context = make_context()
    workbook_context.next_sequence_nbr()
    block = Block(left=0, right=0, top=0, bottom=0, parent=context.block)

    blocks.shift_for_block(context, workbook_context, block, 3)
    copies = [blocks.copy_block(context, workbook_context, block, i) for i in range(3)]

    assert [sheet.get_value(r, 0) for r in range(4)] == ["${x}", "${x}", "${x}", "after"]
    assert sheet.get_value(0, 1) == "keep"
    assert copies[0] is block
    assert [(c.top, c.iteration_nbr) for c in copies[1:]] == [(1, 1), (2, 2)]
    assert context.block.bottom == 3


def test_shift_absorbed_by_empty_rows(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["${x}"], [None], [None], ["end"]])
    context, workbook_context = make_context()
    # Wider than the loop block, so the shift stops at its bottom edge.
    parent = Block(left=0, right=1, top=0, bottom=2, parent=context.block)
    block = Block(left=0, right=0, top=0, bottom=0, parent=parent)

    blocks.shift_for_block(context, workbook_context, block, 2)

    assert sheet.get_value(3, 0) == "end"
    assert parent.bottom == 2


def test_copy_block_suffixes_formulas(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["$[SUM(B1)]"]])
    context, workbook_context = make_context()
    workbook_context.next_sequence_nbr()
    block = Block(left=0, right=0, top=0, bottom=0, parent=context.block)

    blocks.copy_block(context, workbook_context, block, 0)
    blocks.copy_block(context, workbook_context, block, 1)

    assert sheet.get_value(0, 0) == "$[SUM(B1)][0,0]"
    assert sheet.get_value(1, 0) == "$[SUM(B1)][0,1]"


def test_copy_block_copies_merged_regions(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["wide", None]])
    workbook.active.merge_cells("A1:B1")
    context, workbook_context = make_context()
    block = Block(left=0, right=1, top=0, bottom=0, parent=context.block)

    blocks.copy_block(context, workbook_context, block, 1)

    assert (1, 0, 1, 1) in sheet.merged_regions()
    assert sheet.get_value(1, 0) == "wide"


def test_delete_block_removes_merged_regions(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["wide", None], ["x", "y"]])
    workbook.active.merge_cells("A1:B1")
    context, workbook_context = make_context()

    blocks.delete_block(context, workbook_context, Block(left=0, right=1, top=0, bottom=0))

    assert sheet.merged_regions() == []
    assert sheet.get_value(0, 0) is None
    assert sheet.get_value(1, 1) == "y"


def test_clear_block_keeps_merges(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["wide", None]])
    workbook.active.merge_cells("A1:B1")
    context, workbook_context = make_context()

    blocks.clear_block(context, workbook_context, Block(left=0, right=1, top=0, bottom=0))

    assert sheet.merged_regions() == [(0, 0, 0, 1)]
    assert sheet.get_value(0, 0) is None


def test_past_end_replace_expression(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["Name: ${e.name}", "static", "${other}"]])
    context, workbook_context = make_context()
    block = Block(left=0, right=2, top=0, bottom=0)

    blocks.take_past_end_action(context, workbook_context, block, ["e"], PastEndAction.REPLACE_EXPR, "-")

    assert [sheet.get_value(0, c) for c in range(3)] == ["Name: -", "static", "${other}"]


def test_past_end_clear(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["${e.name}", "${employee.name}"]])
    context, workbook_context = make_context()
    block = Block(left=0, right=1, top=0, bottom=0)

    blocks.take_past_end_action(context, workbook_context, block, ["e"], PastEndAction.CLEAR_CELL)

    assert sheet.get_value(0, 0) is None
    assert sheet.get_value(0, 1) == "${employee.name}"


def test_past_end_nested_loop_gets_empty_list() -> None:
    text = '<jt:forEach items="${e.kids}" var="k">${k}'
    result = blocks.replace_past_end_expressions(text, ["e"], "")
    assert result == '<jt:forEach items="${[]}" var="k">${k}'


def test_group_rows(workbook, make_context) -> None:
    context, _ = make_context()
    blocks.group_rows(context, 1, 3, True)
    dimension = workbook.active.row_dimensions[2]
    assert dimension.outline_level == 1
    assert dimension.hidden


def test_reading_does_not_create_cells(workbook, sheet) -> None:
    fill(workbook.active, [["a"]])
    assert sheet.get_value(40, 10) is None
    assert (workbook.active.max_row, workbook.active.max_column) == (1, 1)
    assert [c.coordinate for c in existing_cells(workbook.active)] == ["A1"]
    assert existing_cell(workbook.active, 0, 0).value == "a"

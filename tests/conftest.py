from __future__ import annotations

from typing import Any, Callable

import pytest
from openpyxl import Workbook

from dto.block import Block, Direction
from dto.context import TagContext, WorkbookContext
from expressions.evaluator import JinjaExpressionEvaluator
from sheet.openpyxl_sheet import OpenpyxlSheet
from transform.workbook import WorkbookTransformer


@pytest.fixture
def workbook() -> Workbook:
    wb = Workbook()
    wb.active.title = "Sheet1"
    return wb


@pytest.fixture
def sheet(workbook: Workbook) -> OpenpyxlSheet:
    return OpenpyxlSheet(workbook.active)


@pytest.fixture
def evaluator() -> JinjaExpressionEvaluator:
    return JinjaExpressionEvaluator()


@pytest.fixture
def transformer() -> WorkbookTransformer:
    return WorkbookTransformer(namespace="jt", fixed_size_collection_names=())


@pytest.fixture
def make_context(workbook: Workbook, sheet: OpenpyxlSheet, transformer: WorkbookTransformer) -> Callable[..., Any]:
    """Build a ``(TagContext, WorkbookContext)`` pair over the active sheet."""

    def _make(beans: dict[str, Any] | None = None, block: Block | None = None) -> tuple[TagContext, WorkbookContext]:
        workbook_context = transformer.create_context(workbook)
        if block is None:
            block = Block(
                left=0,
                right=sheet.last_col(),
                top=0,
                bottom=sheet.last_row(),
                direction=Direction.NONE,
            )
        context = TagContext(sheet=sheet, block=block, beans=dict(beans or {}))
        return context, workbook_context

    return _make

"""
Workbook and sheet entry points.

``WorkbookTransformer(...).transform(workbook, beans)`` renders every sheet
of an in-memory openpyxl workbook in place:

  1. sheets whose title holds a collection expression
     (``${depts.name}$@i=idx``) are copied once per item first;
  2. ``$[...]`` formulas are scanned so the cells they reference can be
     tracked through the transformation (``WorkbookContext.cell_ref_map``);
  3. each sheet is transformed as one root block.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from dto.block import Block, Direction
from dto.context import TagContext, WorkbookContext
from dto.events import TagListener
from dto.loop import PAST_END, PastEndAction
from expressions.attributes import evaluate_non_negative_int
from expressions.evaluator import ExpressionEvaluator, JinjaExpressionEvaluator
from loops.status import LoopTagStatus
from parsers.formula import FormulaParser
from parsers.metadata import SheetNameMetadataParser
from parsers.style import StyleParser
from sheet import blocks
from sheet.openpyxl_sheet import OpenpyxlSheet
from styles.cache import CellStyleCache, FontCache
from tags.registry import default_registry
from transform.block import BlockTransformer
from transform.collections import find_implicit_collections, implicit_var_names, rename_in_expressions
from transform.constants import FIXED_SIZE_COLLECTIONS, TAG_NAMESPACE
from utils.cells import cell_key, cell_location
from utils.rich_text import is_rich, plain_text

logger = logging.getLogger(__name__)

SHEET_BEAN = "sheet"
SHEET_METADATA_MARKER = "$@"
FORMULA_BEGIN = "$["
FORMULA_END = "]"


# -------------------------------------------------------------------
# Sheet
# -------------------------------------------------------------------


class SheetTransformer:
    def transform(self, worksheet: Worksheet, workbook_context: WorkbookContext, beans: Dict[str, Any]) -> None:
        sheet = OpenpyxlSheet(worksheet)
        beans[SHEET_BEAN] = worksheet
        logger.info("Transforming sheet %s", sheet.name)

        self._gather_formulas(sheet, workbook_context)

        root = Block(left=0, right=sheet.last_col(), top=0, bottom=sheet.last_row(), direction=Direction.NONE)
        context = TagContext(sheet=sheet, block=root, beans=beans, processed_cells=set())
        BlockTransformer().transform(context, workbook_context)
        logger.info("Finished sheet %s", sheet.name)

    @staticmethod
    def _gather_formulas(sheet: OpenpyxlSheet, workbook_context: WorkbookContext) -> None:
        """Record the references of every ``$[...]`` formula and seed the cell-reference map."""
        positions: Dict[str, List[Tuple[int, int]]] = {}
        for row in range(sheet.last_row() + 1):
            for col in range(sheet.last_col() + 1):
                value = sheet.get_value(row, col)
                if not isinstance(value, str) and not is_rich(value):
                    continue
                text = plain_text(value)
                start = text.find(FORMULA_BEGIN)
                end = text.rfind(FORMULA_END)
                if start < 0 or end <= start:
                    continue
                refs = FormulaParser(text[start + len(FORMULA_BEGIN):end], cell_location(sheet.name, row, col)).parse()
                workbook_context.formula_map[cell_key(sheet.name, row, col)] = refs
                for ref in refs:
                    positions.setdefault(ref.sheet_name or sheet.name, []).append((ref.row, ref.col))
        for sheet_name, cells in positions.items():
            workbook_context.cell_ref_map.register_sheet(sheet_name, cells)
        if positions:
            logger.debug("Formulas on %s reference %d sheets", sheet.name, len(positions))


# -------------------------------------------------------------------
# Workbook
# -------------------------------------------------------------------


class WorkbookTransformer:
    """
    Render a template workbook.

    ``namespace`` and ``fixed_size_collection_names`` default to the
    ``TAG_NAMESPACE`` / ``FIXED_SIZE_COLLECTIONS`` settings.  ``style_sheet``
    is CSS-like text whose classes ``jt:style`` tags refer to;
    ``tag_listeners`` maps namespaced tag names to listeners fired around
    every tag of that name; ``extra_tags`` registers custom tag classes.
    """

    def __init__(
        self,
        evaluator: Optional[ExpressionEvaluator] = None,
        namespace: Optional[str] = None,
        fixed_size_collection_names: Optional[Iterable[str]] = None,
        style_sheet: Optional[str] = None,
        tag_listeners: Optional[Dict[str, TagListener]] = None,
        extra_tags: Optional[Iterable[type]] = None,
    ):
        self.evaluator = evaluator or JinjaExpressionEvaluator()
        self.namespace = namespace or TAG_NAMESPACE
        if fixed_size_collection_names is None:
            fixed_size_collection_names = FIXED_SIZE_COLLECTIONS
        self.fixed_size_collection_names = tuple(fixed_size_collection_names)
        self.style_sheet = style_sheet
        self.tag_listeners = dict(tag_listeners or {})
        self.extra_tags = list(extra_tags or [])

    def create_context(self, workbook: Workbook) -> WorkbookContext:
        style_map = StyleParser(self.style_sheet).parse() if self.style_sheet else {}
        return WorkbookContext(
            evaluator=self.evaluator,
            tag_registry=default_registry(self.namespace, self.extra_tags),
            namespace=self.namespace,
            fixed_size_collection_names=self.fixed_size_collection_names,
            style_map=style_map,
            cell_style_cache=CellStyleCache(workbook),
            font_cache=FontCache(workbook),
            tag_listeners=self.tag_listeners,
        )

    def transform(self, workbook: Workbook, beans: Dict[str, Any]) -> WorkbookContext:
        """
        Transform ``workbook`` in place and return the context, whose
        cell-reference and formula maps describe where template cells went.
        """
        workbook_context = self.create_context(workbook)
        logger.info("Transforming workbook with %d sheets", len(workbook.worksheets))

        sheets: List[Tuple[Worksheet, Dict[str, Any]]] = []
        for worksheet in list(workbook.worksheets):
            sheets.extend(self._expand_sheet(workbook, worksheet, beans, workbook_context))

        transformer = SheetTransformer()
        for worksheet, sheet_beans in sheets:
            transformer.transform(worksheet, workbook_context, sheet_beans)

        logger.info(
            "Workbook done: %d cell styles, %d fonts, %d tracked cells",
            workbook_context.cell_style_cache.num_entries,
            workbook_context.font_cache.num_entries,
            len(workbook_context.cell_ref_map),
        )
        return workbook_context

    # -------------------------------------------------------------------
    # Sheet-name loops
    # -------------------------------------------------------------------

    def _expand_sheet(
        self,
        workbook: Workbook,
        worksheet: Worksheet,
        beans: Dict[str, Any],
        workbook_context: WorkbookContext,
    ) -> List[Tuple[Worksheet, Dict[str, Any]]]:
        """
        One ``(worksheet, beans)`` pair per sheet to transform.

        A title that iterates a collection becomes one sheet per item, the
        template sheet being the first.  Each sheet gets its own beans with
        the item, and the optional index and status, bound.
        """
        title = worksheet.title
        before, metadata_text = title, None
        idx = title.find(SHEET_METADATA_MARKER)
        if idx >= 0:
            before, metadata_text = title[:idx], title[idx + len(SHEET_METADATA_MARKER):]

        evaluator = workbook_context.evaluator
        collection_names = find_implicit_collections(evaluator, before, beans)
        if not collection_names:
            return [(worksheet, dict(beans))]

        location = f" in sheet name {title}"
        metadata = SheetNameMetadataParser(metadata_text, location).parse() if metadata_text else None
        collections = [list(evaluator.evaluate(name, beans) or []) for name in collection_names]
        max_size = max(len(c) for c in collections)
        limit = max_size
        if metadata is not None and metadata.limit is not None:
            limit = evaluate_non_negative_int(evaluator, metadata.limit, beans, "limit", max_size, location)
        index_var = metadata.index_var if metadata is not None else None
        status_var = metadata.var_status if metadata is not None else None
        replace_value = metadata.replace_value if metadata is not None else ""
        var_names = implicit_var_names(collection_names)
        logger.info("Sheet %s loops over %s (%d sheets)", title, collection_names, limit)

        renamed = before
        for name, var in zip(collection_names, var_names):
            renamed = rename_in_expressions(renamed, name, var)

        if limit == 0:
            self._rename_cells(worksheet, collection_names, var_names)
            self._past_end_cells(worksheet, workbook_context, dict(beans), var_names, replace_value)
            self._retitle(worksheet, self._past_end_title(renamed, var_names, replace_value))
            return [(worksheet, dict(beans))]

        position = workbook.index(worksheet)
        sheets: List[Worksheet] = [worksheet]
        for i in range(1, limit):
            copied = workbook.copy_worksheet(worksheet)
            workbook.move_sheet(copied, offset=position + i - workbook.index(copied))
            sheets.append(copied)

        result: List[Tuple[Worksheet, Dict[str, Any]]] = []
        for i, sheet in enumerate(sheets):
            self._rename_cells(sheet, collection_names, var_names)
            sheet_beans = dict(beans)
            past_end_refs: List[str] = []
            for var, collection in zip(var_names, collections):
                if i < len(collection):
                    sheet_beans[var] = collection[i]
                else:
                    sheet_beans[var] = PAST_END
                    past_end_refs.append(var)
            if index_var:
                sheet_beans[index_var] = i
            if status_var:
                sheet_beans[status_var] = LoopTagStatus(self, limit, i)

            if past_end_refs:
                self._past_end_cells(sheet, workbook_context, sheet_beans, past_end_refs, replace_value)
            new_title = self._past_end_title(renamed, past_end_refs, replace_value)
            self._retitle(sheet, plain_text(evaluator.evaluate_text(new_title, sheet_beans)))
            logger.debug("Sheet %d of %s is %s", i, title, sheet.title)
            result.append((sheet, sheet_beans))
        return result

    @staticmethod
    def _rename_cells(worksheet: Worksheet, collection_names: List[str], var_names: List[str]) -> None:
        for row in worksheet.iter_rows():
            for cell in row:
                value = cell.value
                if not isinstance(value, str) and not is_rich(value):
                    continue
                renamed = value
                for name, var in zip(collection_names, var_names):
                    renamed = rename_in_expressions(renamed, name, var)
                if renamed is not value:
                    cell.value = renamed

    @staticmethod
    def _past_end_title(title: str, past_end_refs: List[str], replace_value: str) -> str:
        if not past_end_refs:
            return title
        return blocks.replace_past_end_expressions(title, past_end_refs, replace_value)

    @staticmethod
    def _past_end_cells(
        worksheet: Worksheet,
        workbook_context: WorkbookContext,
        beans: Dict[str, Any],
        past_end_refs: List[str],
        replace_value: str,
    ) -> None:
        sheet = OpenpyxlSheet(worksheet)
        whole = Block(left=0, right=sheet.last_col(), top=0, bottom=sheet.last_row(), direction=Direction.NONE)
        context = TagContext(sheet=sheet, block=whole, beans=beans)
        blocks.take_past_end_action(
            context, workbook_context, whole, past_end_refs, PastEndAction.REPLACE_EXPR, replace_value
        )

    @staticmethod
    def _retitle(worksheet: Worksheet, title: str) -> None:
        if not title:
            logger.warning("Sheet name %s evaluates to nothing; keeping it", worksheet.title)
            return
        worksheet.title = title

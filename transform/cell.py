"""
Cell transformer.

Decides what a single cell is: the start of a tag (find its end tag, build
the tag's block, process the tag), a cell that touches an implicit
collection (hand it to ``CollectionsTransformer``), or ordinary text whose
``${...}`` expressions are evaluated in place.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from dto.block import Block
from dto.context import TagContext, WorkbookContext
from dto.tag import TagInfo
from exceptions import TagParseError, TemplateError, TransformError
from parsers.metadata import split_metadata
from parsers.tag import TagParser
from transform.collections import CollectionsTransformer, find_implicit_collections
from utils.cells import cell_location
from utils.rich_text import CellText, is_rich, plain_text, remove_range

logger = logging.getLogger(__name__)

CELL_BEAN = "cell"


def _is_text(value) -> bool:
    return isinstance(value, str) or is_rich(value)


class CellTransformer:
    def transform(self, context: TagContext, workbook_context: WorkbookContext, row: int, col: int) -> bool:
        """
        Transform the cell at ``(row, col)``.

        Returns ``False`` when the cell must be visited again: its tag's
        block was removed, or an implicit loop replaced its content.
        """
        key = (row, col)
        if key in context.processed_cells:
            return True

        sheet = context.sheet
        value = sheet.get_value(row, col)
        if value is None:
            return True

        context.beans[CELL_BEAN] = sheet.cell(row, col)
        processed = True
        if _is_text(value):
            text = plain_text(value)
            tag_info = None
            if "<" in text:
                tag_info = TagParser(value, location=cell_location(sheet.name, row, col)).parse()
            if tag_info is not None and tag_info.is_tag and not tag_info.is_end_tag:
                processed = self._transform_tag(context, workbook_context, row, col, value, tag_info)
            else:
                before_metadata, _ = split_metadata(text)
                if find_implicit_collections(workbook_context.evaluator, before_metadata, context.beans):
                    CollectionsTransformer().transform(context, workbook_context, row, col)
                    processed = False
                else:
                    result = workbook_context.evaluator.evaluate_text(value, context.beans)
                    if result is not value:
                        sheet.set_value(row, col, result)

        if processed:
            context.processed_cells.add(key)
        return processed

    # -------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------

    def _transform_tag(
        self,
        context: TagContext,
        workbook_context: WorkbookContext,
        row: int,
        col: int,
        value: CellText,
        tag_info: TagInfo,
    ) -> bool:
        sheet = context.sheet
        parent_block = context.block
        location = cell_location(sheet.name, row, col)
        tag = None
        try:
            if tag_info.is_bodiless:
                block = Block.bodiless(parent_block, row, col)
            else:
                sheet.set_value(row, col, remove_range(value, tag_info.tag_start_idx, tag_info.after_tag_idx))
                logger.debug('Cell text after tag removal is "%s"', plain_text(sheet.get_value(row, col)))
                match = self._find_matching_end_tag(context, row, col, tag_info.namespace_and_tag_name)
                if match is None:
                    raise TagParseError(
                        f"Matching tag not found for tag: {tag_info.tag_text}, located{location}, "
                        f"within block {parent_block}"
                    )
                logger.debug("Match found at row %d and column %d", match[0], match[1])
                block = Block.from_tag_cells(parent_block, row, col, match[0], match[1])

            tag_context = context.derive(block)
            tag_class = workbook_context.tag_registry.get(tag_info.namespace_and_tag_name)
            if tag_class is None:
                raise TagParseError(f"Invalid tag: {plain_text(value)}{location}")
            tag = tag_class(tag_context, workbook_context, tag_info)
            tag_context.current_tag = tag
            return tag.process_tag()
        except TemplateError:
            raise
        except Exception as exc:
            logger.exception("An error has occurred: %s", exc)
            raise TransformError(
                f"A {type(exc).__name__} was caught during transformation",
                location=tag.location if tag is not None else location,
            ) from exc

    def _find_matching_end_tag(
        self,
        context: TagContext,
        start_row: int,
        start_col: int,
        namespace_and_tag_name: str,
    ) -> Optional[Tuple[int, int]]:
        """
        Search right and down from the start tag, inside the parent block,
        for the end tag that closes it.  Tags opened and closed in between
        must nest properly.
        """
        parent = context.block
        inner_tags: List[Tuple[int, TagInfo]] = []
        logger.debug(
            "Matching tag %s in %s, start tag at row %d, col %d",
            namespace_and_tag_name, parent, start_row, start_col,
        )
        for row in range(start_row, parent.bottom + 1):
            for col in range(start_col, parent.right + 1):
                if self._is_matching_end_tag(context, row, col, namespace_and_tag_name, inner_tags):
                    return row, col
        return None

    def _is_matching_end_tag(
        self,
        context: TagContext,
        row: int,
        col: int,
        namespace_and_tag_name: str,
        inner_tags: List[Tuple[int, TagInfo]],
    ) -> bool:
        sheet = context.sheet
        value = sheet.get_value(row, col)
        if not _is_text(value):
            return False

        location = cell_location(sheet.name, row, col)
        info = TagParser(value, location=location).parse()
        while info.is_tag:
            if info.is_end_tag:
                if info.namespace_and_tag_name == namespace_and_tag_name and self._all_inner_tags_match(
                    inner_tags, col
                ):
                    sheet.set_value(row, col, remove_range(value, info.tag_start_idx, info.after_tag_idx))
                    return True
                if not inner_tags:
                    raise TagParseError(
                        f'End tag found "{info.namespace_and_tag_name}" does not match start tag '
                        f'"{namespace_and_tag_name}"{location}.'
                    )
                inner_tags.append((col, info))
            elif not info.is_bodiless:
                inner_tags.append((col, info))
            info = TagParser(value, info.after_tag_idx, location).parse()
        return False

    @staticmethod
    def _all_inner_tags_match(inner_tags: List[Tuple[int, TagInfo]], right_most_col: int) -> bool:
        stack: List[TagInfo] = []
        for col, info in inner_tags:
            if col > right_most_col:
                continue
            if info.is_end_tag:
                if not stack:
                    return False
                if info.namespace_and_tag_name == stack[-1].namespace_and_tag_name:
                    stack.pop()
            elif not info.is_bodiless:
                stack.append(info)
        return not stack

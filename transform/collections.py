"""
Implicit collection loops.

A cell such as ``${employees.name}`` where ``employees`` is a list in the
beans means "one row per employee".  The transformer finds every collection
referenced in the cells of the loop's block, renames those references to an
item variable (``employees__item.name``) and runs a ``multiForEach`` over
them.  Trailing ``?@key=value;...`` metadata on the first cell configures
the loop (extra rows, columns to the left and right, past-end action...).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from dto.block import Block
from dto.context import TagContext, WorkbookContext
from dto.metadata import LoopMetadata
from dto.tag import TagInfo
from exceptions import TagParseError
from expressions.evaluator import ExpressionEvaluator, find_expressions
from parsers.metadata import MetadataParser, split_metadata
from transform.constants import IMPLICIT_ITEM_SUFFIX
from utils.cells import cell_location
from utils.rich_text import CellText, is_rich, plain_text, remove_range, replace_all

logger = logging.getLogger(__name__)

MULTI_FOR_EACH = "multiForEach"

# Members that read a list without meaning "one row per item".
_SAFE_COLLECTION_MEMBERS = ("count", "index", "copy", "get", "keys", "values", "items")

# metadata field -> loop attribute
_METADATA_ATTRIBUTES = {
    "copy_right": "copyRight",
    "fixed": "fixed",
    "past_end_action": "pastEndAction",
    "replace_value": "replaceValue",
    "group_dir": "groupDir",
    "collapse": "collapse",
    "on_loop_processed": "onLoopProcessed",
    "on_processed": "onProcessed",
    "index_var": "indexVar",
    "limit": "limit",
    "var_status": "varStatus",
}


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _collection_in_path(evaluator: ExpressionEvaluator, path: str, beans: Dict[str, Any]) -> Optional[str]:
    """
    Longest prefix of a dotted path that is a collection and is followed by
    a property access, e.g. ``dept.employees`` in ``dept.employees.name``.
    """
    segments = path.split(".")
    for i in range(len(segments)):
        name = ".".join(segments[:i + 1])
        if not _is_collection(evaluator.evaluate(name, beans)):
            continue
        if i == len(segments) - 1:
            # The collection itself, not one property per item.
            return None
        following = segments[i + 1]
        if following.startswith(_SAFE_COLLECTION_MEMBERS) or following.isdigit():
            continue
        logger.debug('Found collection "%s" in "%s"', name, path)
        return name
    return None


def find_implicit_collections(evaluator: ExpressionEvaluator, text: str, beans: Dict[str, Any]) -> List[str]:
    """Collections accessed item by item in the ``${...}`` expressions of ``text``."""
    names: List[str] = []
    for start, end in find_expressions(text):
        for path in evaluator.referenced_paths(text[start + 2:end - 1]):
            name = _collection_in_path(evaluator, path, beans)
            if name:
                names.append(name)
                break
    return names


def implicit_var_names(collection_names: List[str]) -> List[str]:
    return [name.replace(".", "_") + IMPLICIT_ITEM_SUFFIX for name in collection_names]


def rename_in_expressions(value: CellText, old: str, new: str) -> CellText:
    pattern = re.compile(r"(?<![\w.])" + re.escape(old) + r"(?=\.)")
    text = plain_text(value)
    result = value
    for start, end in reversed(find_expressions(text)):
        marker = text[start:end]
        renamed = pattern.sub(new, marker)
        if renamed == marker:
            continue
        if is_rich(result):
            result = replace_all(result, marker, renamed)
        else:
            result = result[:start] + renamed + result[end:]
    return result


class CollectionsTransformer:
    def transform(self, context: TagContext, workbook_context: WorkbookContext, row: int, col: int) -> None:
        sheet = context.sheet
        parent = context.block
        beans = context.beans
        evaluator = workbook_context.evaluator
        location = cell_location(sheet.name, row, col)

        metadata: Optional[LoopMetadata] = None
        value = sheet.get_value(row, col)
        text = plain_text(value)
        before, metadata_text = split_metadata(text)
        if metadata_text is not None:
            logger.debug("Metadata found: %s on %s", metadata_text, location)
            metadata = MetadataParser(metadata_text, location).parse()
            sheet.set_value(row, col, remove_range(value, len(before), len(text)))

        left, right, top, bottom = parent.left, parent.right, row, row
        if metadata is not None:
            if metadata.extra_rows is not None:
                bottom += self._evaluate_offset(evaluator, metadata.extra_rows, beans, "extraRows", location)
            if metadata.defining_cols:
                left = col
                right = col
                if metadata.cols_left is not None:
                    left -= self._evaluate_offset(evaluator, metadata.cols_left, beans, "left", location)
                if metadata.cols_right is not None:
                    right += self._evaluate_offset(evaluator, metadata.cols_right, beans, "right", location)
                left = max(left, parent.left)
                right = min(right, parent.right)

        block = Block(left=left, right=right, top=top, bottom=bottom, parent=parent)
        logger.debug("Implicit multiForEach block: %s", block)

        collection_names = self._find_collections_in_block(context, workbook_context, block, row, col)
        var_names = implicit_var_names(collection_names)
        self._rename_references(context, block, collection_names, var_names)
        fixed = self._fixed_size(workbook_context, collection_names, var_names)

        attributes: Dict[str, str] = {
            "collections": ";".join("${" + name + "}" for name in collection_names),
            "vars": ";".join(var_names),
        }
        if metadata is not None:
            for field, attr in _METADATA_ATTRIBUTES.items():
                field_value = getattr(metadata, field)
                if field_value is not None:
                    attributes[attr] = field_value
        if fixed:
            attributes["fixed"] = "true"
        for attr, attr_value in attributes.items():
            logger.debug("attr: %s => %s", attr, attr_value)

        qualified = f"{workbook_context.namespace}:{MULTI_FOR_EACH}"
        tag_class = workbook_context.tag_registry.get(qualified)
        if tag_class is None:
            raise TagParseError(f"Invalid tag: {qualified}{location}")
        tag_context = context.derive(block)
        tag = tag_class(tag_context, workbook_context, TagInfo(
            is_tag=True,
            namespace=workbook_context.namespace,
            tag_name=MULTI_FOR_EACH,
            attributes=attributes,
        ))
        tag_context.current_tag = tag
        tag.process_tag()

    # -------------------------------------------------------------------
    # Pieces
    # -------------------------------------------------------------------

    @staticmethod
    def _evaluate_offset(
        evaluator: ExpressionEvaluator,
        lexeme: str,
        beans: Dict[str, Any],
        key: str,
        location: str,
    ) -> int:
        result = evaluator.evaluate_text(lexeme, beans)
        try:
            offset = int(result)
        except (TypeError, ValueError):
            offset = -1
        if offset < 0:
            raise TagParseError(f'Metadata key "{key}" needs to be a non-negative integer: {lexeme}{location}')
        return offset

    @staticmethod
    def _find_collections_in_block(
        context: TagContext,
        workbook_context: WorkbookContext,
        block: Block,
        start_row: int,
        start_col: int,
    ) -> List[str]:
        """Collections referenced from the start cell onwards, first seen first."""
        sheet = context.sheet
        names: List[str] = []
        for row in range(start_row, block.bottom + 1):
            first_col = start_col if row == start_row else block.left
            for col in range(first_col, block.right + 1):
                value = sheet.get_value(row, col)
                if not isinstance(value, str) and not is_rich(value):
                    continue
                text, _ = split_metadata(plain_text(value))
                for name in find_implicit_collections(workbook_context.evaluator, text, context.beans):
                    if name not in names:
                        names.append(name)
        return names

    @staticmethod
    def _rename_references(context: TagContext, block: Block, collection_names: List[str], var_names: List[str]):
        sheet = context.sheet
        for row in range(block.top, block.bottom + 1):
            for col in range(block.left, block.right + 1):
                value = sheet.get_value(row, col)
                if not isinstance(value, str) and not is_rich(value):
                    continue
                renamed = value
                for name, var in zip(collection_names, var_names):
                    renamed = rename_in_expressions(renamed, name, var)
                if renamed is not value:
                    sheet.set_value(row, col, renamed)

    @staticmethod
    def _fixed_size(workbook_context: WorkbookContext, collection_names: List[str], var_names: List[str]) -> bool:
        """
        Whether one of the loop's collections is declared fixed size.

        ``dept.employees`` declared fixed becomes ``dept__item.employees``
        for loops nested in an implicit loop over ``dept``.
        """
        declared = workbook_context.fixed_size_collection_names
        additions = []
        for name, var in zip(collection_names, var_names):
            for fixed_name in declared:
                if fixed_name.startswith(name + "."):
                    addition = var + fixed_name[len(name):]
                    if addition not in declared and addition not in additions:
                        additions.append(addition)
        if additions:
            workbook_context.fixed_size_collection_names = tuple(declared) + tuple(additions)
        matched = [name for name in collection_names if name in declared]
        if matched:
            logger.debug("Implicit loop is fixed because of fixed size collection %s", matched[0])
        return bool(matched)

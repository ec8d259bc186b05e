"""
Base class for every tag.

A tag owns a block (the cells between its start and end tag, or just its own
cell when bodiless).  ``process_tag`` checks the attributes, fires the
``before`` listeners, runs the tag's own logic and fires the ``after``
listeners.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from dto.context import TagContext, WorkbookContext
from dto.events import TagEvent, TagListener
from dto.tag import TagInfo
from exceptions import AttributeExpressionError
from expressions.attributes import evaluate_object
from sheet import blocks
from transform.block import BlockTransformer
from utils.cells import cell_location

logger = logging.getLogger(__name__)

ATTR_ON_PROCESSED = "onProcessed"


class BaseTag(ABC):
    #: Name of the tag within its namespace, e.g. ``forEach``.
    name: str = ""

    def __init__(self, context: TagContext, workbook_context: WorkbookContext, tag_info: Optional[TagInfo] = None):
        self.context = context
        self.workbook_context = workbook_context
        self.evaluator = workbook_context.evaluator
        self.attributes: Dict[str, str] = dict(tag_info.attributes) if tag_info is not None else {}
        self.bodiless = tag_info.is_bodiless if tag_info is not None else False
        self.parent_tag: Optional["BaseTag"] = context.current_tag
        self.location = cell_location(context.sheet.name, context.block.top, context.block.left)
        self._tag_listener: Optional[TagListener] = None

    # -------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------

    def required_attributes(self) -> List[str]:
        return []

    def optional_attributes(self) -> List[str]:
        return [ATTR_ON_PROCESSED]

    def check_attributes(self) -> None:
        """Reject missing required attributes and unknown ones, then validate."""
        required = self.required_attributes()
        optional = self.optional_attributes()
        for attr in required:
            if attr not in self.attributes:
                raise AttributeExpressionError(
                    f'Required attribute "{attr}" not found for tag "{self.name}"',
                    location=self.location,
                )
        for attr in self.attributes:
            if attr not in required and attr not in optional:
                raise AttributeExpressionError(
                    f'Unrecognized attribute "{attr}" for tag "{self.name}"',
                    location=self.location,
                )
        self.validate_attributes()

    def validate_attributes(self) -> None:
        self._tag_listener = evaluate_object(
            self.evaluator,
            self.attributes.get(ATTR_ON_PROCESSED),
            self.context.beans,
            ATTR_ON_PROCESSED,
            TagListener,
            location=self.location,
        )

    # -------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------

    def process_tag(self) -> bool:
        """
        Validate and process the tag.

        Returns ``True`` when the tag's cell is done, ``False`` when the
        tag's block was removed and whatever moved into its cell must be
        processed again.
        """
        self.check_attributes()

        listeners = [
            listener
            for listener in (
                self.workbook_context.tag_listeners.get(self._qualified_name()),
                self._tag_listener,
            )
            if listener is not None
        ]
        event = TagEvent(sheet=self.context.sheet, block=self.context.block, beans=self.context.beans)
        for listener in listeners:
            if not listener.fire_before(event):
                logger.debug("Tag %s%s skipped by listener", self.name, self.location)
                return True

        processed = self.process()

        event = TagEvent(sheet=self.context.sheet, block=self.context.block, beans=self.context.beans)
        for listener in listeners:
            listener.fire_after(event)
        return processed

    @abstractmethod
    def process(self) -> bool:
        ...

    def _qualified_name(self) -> str:
        return f"{self.workbook_context.namespace}:{self.name}"

    # -------------------------------------------------------------------
    # Block helpers
    # -------------------------------------------------------------------

    def transform_block(self) -> None:
        BlockTransformer().transform(self.context, self.workbook_context)

    def remove_block(self) -> None:
        blocks.remove_block(self.context, self.workbook_context, self.context.block)
        self.context.block.collapse()

    def delete_block(self) -> None:
        blocks.delete_block(self.context, self.workbook_context, self.context.block)
        self.context.block.collapse()

    def clear_block(self) -> None:
        blocks.clear_block(self.context, self.workbook_context, self.context.block)
        self.context.block.collapse()

    def __str__(self) -> str:
        return f"{self._qualified_name()}{self.location}"

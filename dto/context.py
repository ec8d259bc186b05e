"""
State handed down through a transformation.

``WorkbookContext`` lives for a whole workbook transformation; ``TagContext``
is created per block being processed and shares the beans dict and the set
of processed cells with the context it was derived from.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, Field, SkipValidation

from dto.block import Block
from dto.cell_ref import CellRef
from dto.events import TagListener
from dto.style import Style
from expressions.evaluator import ExpressionEvaluator
from sheet.base import SheetOps
from sheet.cell_ref_map import CellRefMap
from styles.cache import CellStyleCache, FontCache


class WorkbookContext(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    evaluator: ExpressionEvaluator
    # namespaced tag name (``jt:forEach``) -> tag class
    tag_registry: SkipValidation[Dict[str, type]]
    namespace: str = "jt"
    fixed_size_collection_names: Tuple[str, ...] = ()
    style_map: SkipValidation[Dict[str, Style]] = Field(default_factory=dict)
    cell_style_cache: Optional[CellStyleCache] = None
    font_cache: Optional[FontCache] = None
    cell_ref_map: CellRefMap = Field(default_factory=CellRefMap)
    # ``Sheet1!C7`` -> cell references found in the ``$[...]`` formula there
    formula_map: SkipValidation[Dict[str, List[CellRef]]] = Field(default_factory=dict)
    # namespaced tag name -> listener fired around every tag of that name
    tag_listeners: SkipValidation[Dict[str, TagListener]] = Field(default_factory=dict)
    sequence_nbr: int = -1

    def next_sequence_nbr(self) -> int:
        self.sequence_nbr += 1
        return self.sequence_nbr


class TagContext(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    sheet: SheetOps
    block: Block
    beans: SkipValidation[Dict[str, Any]]
    processed_cells: SkipValidation[Set[Tuple[int, int]]] = Field(default_factory=set)
    formula_suffix: str = ""
    current_tag: Optional[Any] = None

    def derive(self, block: Block, **overrides) -> "TagContext":
        """New context over ``block`` sharing this one's beans and processed cells."""
        values = {
            "sheet": self.sheet,
            "block": block,
            "beans": self.beans,
            "processed_cells": self.processed_cells,
            "formula_suffix": self.formula_suffix,
            "current_tag": self.current_tag,
        }
        values.update(overrides)
        return TagContext(**values)

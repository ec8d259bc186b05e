from __future__ import annotations

import logging
from typing import List, Optional

from dto.style import Style
from exceptions import TagParseError
from expressions.attributes import evaluate_list, evaluate_string
from parsers.style import StyleParser
from styles.apply import apply_style
from styles.cascade import resolve_style
from tags.base import BaseTag

logger = logging.getLogger(__name__)

ATTR_CLASS = "class"
ATTR_STYLE = "style"


class StyleTag(BaseTag):
    """
    ``<jt:style class="header money" style="font-weight: bold">...</jt:style>``

    Styles every cell of its body: the classes in order, then the inline
    style on top, then transforms the body as usual.
    """

    name = "style"

    def optional_attributes(self) -> List[str]:
        return super().optional_attributes() + [ATTR_CLASS, ATTR_STYLE]

    def validate_attributes(self) -> None:
        super().validate_attributes()
        if self.bodiless:
            raise TagParseError(f"Style tags must have a body. Bodiless style tag found{self.location}")

        beans = self.context.beans
        class_names: List[str] = []
        classes = evaluate_list(self.evaluator, self.attributes.get(ATTR_CLASS), beans)
        for entry in classes or []:
            # Space separated names are as good as ";" separated ones.
            class_names.extend(str(entry).split())

        inline: Optional[Style] = None
        line = evaluate_string(self.evaluator, self.attributes.get(ATTR_STYLE), beans)
        if line:
            inline = StyleParser(line).parse_inline()

        self.style = resolve_style(self.workbook_context.style_map, class_names, inline, self.location)

    def process(self) -> bool:
        block = self.context.block
        sheet = self.context.sheet
        if self.style.style_to_apply:
            logger.debug("Applying style to %s on %s", block, sheet.name)
            for row in range(block.top, block.bottom + 1):
                for col in range(block.left, block.right + 1):
                    apply_style(sheet, self.workbook_context, row, col, self.style)
        self.transform_block()
        return True

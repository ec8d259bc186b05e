"""
Canonicalization caches for fonts and cell formats.

Styling a cell produces a combination of visual properties.  Before creating
new openpyxl style objects for it, the caches are asked whether an equal
combination already exists, keyed by a fingerprint string that joins every
visual property with ``|``.  Both caches are seeded from the workbook's
existing cells when built and grow as new combinations are created, for the
lifetime of one workbook transformation.
"""

from __future__ import annotations

import logging
from copy import copy
from typing import Dict, Optional

from openpyxl.styles import Alignment, Border, Font, PatternFill, Protection
from openpyxl.workbook.workbook import Workbook
from pydantic import BaseModel

from utils.cells import existing_cells

logger = logging.getLogger(__name__)

SEP = "|"


def _color_key(color) -> str:
    if color is None:
        return ""
    if isinstance(color, str):
        return f"rgb:{color.upper()}"
    return f"{color.type}:{color.value}"


def _value_key(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _side_key(side) -> str:
    if side is None:
        return ""
    return _value_key(side.style) + ":" + _color_key(side.color)


def font_fingerprint(
    bold: bool,
    italic: bool,
    color: Optional[str],
    name: Optional[str],
    size: Optional[float],
    underline: Optional[str],
    strike: bool,
    vert_align: Optional[str],
    charset: Optional[int],
) -> str:
    return SEP.join([
        _value_key(bool(bold)),
        _value_key(bool(italic)),
        _color_key(color),
        _value_key(name),
        _value_key(size),
        _value_key(underline),
        _value_key(bool(strike)),
        _value_key(vert_align),
        _value_key(charset),
    ])


def font_key(font: Font) -> str:
    return font_fingerprint(
        font.b,
        font.i,
        font.color,
        font.name,
        font.sz,
        font.u,
        font.strike,
        font.vertAlign,
        font.charset,
    )


def _existing_cells(workbook: Workbook):
    for ws in workbook.worksheets:
        yield from existing_cells(ws)


# -------------------------------------------------------------------
# Fonts
# -------------------------------------------------------------------

class FontCache:
    def __init__(self, workbook: Optional[Workbook] = None):
        self._fonts: Dict[str, Font] = {}
        if workbook is not None:
            for cell in _existing_cells(workbook):
                self.cache_font(copy(cell.font))
        logger.debug("Font cache seeded with %d fonts", self.num_entries)

    @property
    def num_entries(self) -> int:
        return len(self._fonts)

    def retrieve_font(
        self,
        bold: bool,
        italic: bool,
        color: Optional[str],
        name: Optional[str],
        size: Optional[float],
        underline: Optional[str],
        strike: bool,
        vert_align: Optional[str],
        charset: Optional[int],
    ) -> Optional[Font]:
        key = font_fingerprint(bold, italic, color, name, size, underline, strike, vert_align, charset)
        return self._fonts.get(key)

    def cache_font(self, font: Font) -> None:
        key = font_key(font)
        if key not in self._fonts:
            self._fonts[key] = font


# -------------------------------------------------------------------
# Cell formats
# -------------------------------------------------------------------

class CellFormat(BaseModel):
    """The style objects that together make up a cell's visual format."""

    model_config = {"arbitrary_types_allowed": True}

    font: Font
    alignment: Alignment
    border: Border
    fill: PatternFill
    number_format: str = "General"
    protection: Protection

    @classmethod
    def from_cell(cls, cell) -> "CellFormat":
        # The cell hands out read-only proxies; copies are the real objects.
        fill = copy(cell.fill)
        if not isinstance(fill, PatternFill):
            fill = PatternFill()
        return cls(
            font=copy(cell.font),
            alignment=copy(cell.alignment),
            border=copy(cell.border),
            fill=fill,
            number_format=cell.number_format,
            protection=copy(cell.protection),
        )

    def apply_to(self, cell) -> None:
        cell.font = self.font
        cell.alignment = self.alignment
        cell.border = self.border
        cell.fill = self.fill
        cell.number_format = self.number_format
        cell.protection = self.protection

    def fingerprint(self) -> str:
        return self.fingerprint_with_font(self.font)

    def fingerprint_with_font(self, font: Font) -> str:
        a, b, f, p = self.alignment, self.border, self.fill, self.protection
        return SEP.join([
            font_key(font),
            _value_key(a.horizontal),
            _side_key(b.bottom),
            _side_key(b.left),
            _side_key(b.right),
            _side_key(b.top),
            _value_key(self.number_format),
            _value_key(bool(a.wrap_text)),
            _color_key(f.bgColor),
            _color_key(f.fgColor),
            _value_key(f.patternType),
            _value_key(a.vertical),
            _value_key(a.indent),
            _value_key(a.text_rotation),
            _value_key(p.locked),
            _value_key(p.hidden),
        ])


class CellStyleCache:
    def __init__(self, workbook: Optional[Workbook] = None):
        self._formats: Dict[str, CellFormat] = {}
        if workbook is not None:
            for cell in _existing_cells(workbook):
                self.cache_cell_style(CellFormat.from_cell(cell))
        logger.debug("Cell style cache seeded with %d formats", self.num_entries)

    @property
    def num_entries(self) -> int:
        return len(self._formats)

    def retrieve_cell_style(self, fmt: CellFormat) -> Optional[CellFormat]:
        """The cached format equal to ``fmt``, if there is one."""
        return self._formats.get(fmt.fingerprint())

    def cache_cell_style(self, fmt: CellFormat) -> CellFormat:
        """Cache ``fmt`` unless an equal format exists; return the cached one."""
        return self._formats.setdefault(fmt.fingerprint(), fmt)

    def find_cell_style_with_font(self, fmt: CellFormat, font: Font) -> CellFormat:
        """The format equal to ``fmt`` except for its font, created if needed."""
        key = fmt.fingerprint_with_font(font)
        found = self._formats.get(key)
        if found is None:
            found = fmt.model_copy(update={"font": font})
            self._formats[key] = found
        return found

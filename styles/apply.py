"""
Apply a resolved ``Style`` to one cell.

Properties left as ``None`` keep the cell's current values.  The ``"none"``
marker means the property was explicitly switched off (``border: none``).
The resulting font and format go through the workbook's caches so equal
combinations share one set of style objects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from openpyxl.cell.cell import MergedCell
from openpyxl.styles import Alignment, Border, Font, PatternFill, Protection, Side

from dto.style import Style
from parsers.style import NONE_VALUE
from sheet.base import SheetOps
from styles.cache import CellFormat
from styles.colors import to_argb

if TYPE_CHECKING:
    from dto.context import WorkbookContext

logger = logging.getLogger(__name__)

TWIPS_PER_POINT = 20
WIDTH_UNITS_PER_CHAR = 256


def _pick(new, current):
    if new is None:
        return current
    if new == NONE_VALUE:
        return None
    return new


def _rotation(value: Optional[int]) -> Optional[int]:
    # openpyxl spells -1..-90 degrees as 91..180.
    if value is not None and value < 0:
        return 90 - value
    return value


def _color(new: Optional[str], current):
    if new is None:
        return current
    if new == NONE_VALUE:
        return None
    argb = to_argb(new)
    return current if argb is None else argb


def _build_font(workbook_context: WorkbookContext, style: Style, current: Font) -> Font:
    bold = current.b if style.font_bold is None else style.font_bold
    italic = current.i if style.font_italic is None else style.font_italic
    color = _color(style.font_color, current.color)
    name = current.name if style.font_name is None else style.font_name
    size = current.sz if style.font_height_in_points is None else style.font_height_in_points
    underline = _pick(style.font_underline, current.u)
    strike = current.strike if style.font_strikeout is None else style.font_strikeout
    vert_align = _pick(style.font_type_offset, current.vertAlign)
    charset = current.charset if style.font_charset is None else style.font_charset

    cache = workbook_context.font_cache
    if cache is not None:
        found = cache.retrieve_font(bold, italic, color, name, size, underline, strike, vert_align, charset)
        if found is not None:
            return found
    font = Font(
        name=name,
        sz=size,
        b=bold,
        i=italic,
        color=color,
        u=underline,
        strike=strike,
        vertAlign=vert_align,
        charset=charset,
    )
    if cache is not None:
        cache.cache_font(font)
    return font


def _side(style_value: Optional[str], color_value: Optional[str], current: Side) -> Side:
    return Side(
        style=_pick(style_value, current.style),
        color=_color(color_value, current.color),
    )


def apply_style(
    sheet: SheetOps,
    workbook_context: WorkbookContext,
    row: int,
    col: int,
    style: Style,
) -> None:
    """Apply ``style`` to the cell at ``(row, col)``, plus its row height and column width."""
    if not style.style_to_apply:
        return
    cell = sheet.cell(row, col)
    if isinstance(cell, MergedCell):
        logger.debug("Not styling merged cell %s!%s", sheet.name, cell.coordinate)
        return

    current = CellFormat.from_cell(cell)
    font = current.font
    if style.has_font_properties:
        font = _build_font(workbook_context, style, current.font)

    a = current.alignment
    alignment = Alignment(
        horizontal=_pick(style.alignment, a.horizontal),
        vertical=_pick(style.vertical_alignment, a.vertical),
        wrap_text=a.wrap_text if style.wrap_text is None else style.wrap_text,
        indent=a.indent if style.indention is None else style.indention,
        text_rotation=a.text_rotation if style.rotation is None else _rotation(style.rotation),
        shrink_to_fit=a.shrink_to_fit,
    )

    b = current.border
    border = Border(
        left=_side(style.border_left, style.border_left_color, b.left),
        right=_side(style.border_right, style.border_right_color, b.right),
        top=_side(style.border_top, style.border_top_color, b.top),
        bottom=_side(style.border_bottom, style.border_bottom_color, b.bottom),
    )

    f = current.fill
    fill = f
    fill_props = (style.fill_pattern, style.fill_foreground_color, style.fill_background_color)
    if any(v is not None for v in fill_props):
        fg = _color(style.fill_foreground_color, None) or f.fgColor
        bg = _color(style.fill_background_color, None) or f.bgColor
        fill = PatternFill(patternType=_pick(style.fill_pattern, f.patternType), fgColor=fg, bgColor=bg)

    p = current.protection
    protection = Protection(
        locked=p.locked if style.locked is None else style.locked,
        hidden=p.hidden if style.hidden is None else style.hidden,
    )

    fmt = CellFormat(
        font=font,
        alignment=alignment,
        border=border,
        fill=fill,
        number_format=current.number_format if style.data_format is None else style.data_format,
        protection=protection,
    )
    cache = workbook_context.cell_style_cache
    if cache is not None:
        fmt = cache.cache_cell_style(fmt)
    fmt.apply_to(cell)

    if style.row_height is not None:
        sheet.set_row_height(row, style.row_height / TWIPS_PER_POINT)
    if style.column_width is not None:
        sheet.set_column_width(col, style.column_width / WIDTH_UNITS_PER_CHAR)

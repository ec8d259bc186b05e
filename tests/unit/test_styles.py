from __future__ import annotations

import logging

from openpyxl.styles import Font

from dto.style import Style
from parsers.style import StyleParser
from styles.apply import apply_style
from styles.cache import CellFormat, CellStyleCache, FontCache, font_key
from styles.cascade import resolve_style
from styles.colors import to_argb
from tests.helpers import fill


def test_to_argb() -> None:
    assert to_argb("#1F4E78") == "FF1F4E78"
    assert to_argb("80FF0000") == "80FF0000"
    assert to_argb("dark blue") == "FF000080"
    assert to_argb("no such color") is None
    assert to_argb(None) is None


def test_later_class_and_inline_style_win() -> None:
    style_map = StyleParser(
        ".a { font-weight: bold; alignment: left } .b { alignment: center; font-italic: true }"
    ).parse()
    inline = StyleParser("font-weight: normal").parse_inline()

    style = resolve_style(style_map, ["a", "b"], inline)

    assert style.alignment == "center"
    assert style.font_italic is True
    assert style.font_bold is False
    assert style.style_to_apply


def test_unknown_style_class_is_skipped(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        style = resolve_style({"a": Style(wrap_text=True)}, ["missing", "a"], location=" at Sheet1!A1")
    assert style.wrap_text is True
    assert "missing" in caplog.text


def test_nothing_to_apply() -> None:
    assert not resolve_style({}, []).style_to_apply


def test_font_cache_reuses_fonts(workbook) -> None:
    cache = FontCache(workbook)
    font = Font(name="Arial", sz=12, b=True)
    cache.cache_font(font)
    cache.cache_font(Font(name="Arial", sz=12, b=True))
    found = cache.retrieve_font(True, False, None, "Arial", 12, None, False, None, None)
    assert found is font
    assert font_key(found) == font_key(Font(name="Arial", sz=12, b=True))


def test_cell_style_cache_deduplicates(workbook) -> None:
    cache = CellStyleCache()
    cell = workbook.active["A1"]
    first = cache.cache_cell_style(CellFormat.from_cell(cell))
    second = cache.cache_cell_style(CellFormat.from_cell(cell))
    assert first is second
    assert cache.num_entries == 1
    assert cache.retrieve_cell_style(CellFormat.from_cell(cell)) is first


def test_apply_style_to_cell(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["x", "y"]])
    _, workbook_context = make_context()
    style = StyleParser(
        "font-weight: bold; font-color: red; fill-pattern: solid; fill-foreground-color: #FFFF00; "
        "alignment: center; border: thin; data-format: 0.00; column-width-in-chars: 12"
    ).parse_inline()

    apply_style(sheet, workbook_context, 0, 0, style)

    cell = workbook.active["A1"]
    assert cell.font.b is True
    assert cell.font.color.rgb == "FFFF0000"
    assert cell.fill.patternType == "solid"
    assert cell.fill.fgColor.rgb == "FFFFFF00"
    assert cell.alignment.horizontal == "center"
    assert cell.border.top.style == "thin"
    assert cell.number_format == "0.00"
    assert workbook.active.column_dimensions["A"].width == 12
    # Untouched neighbour
    assert workbook.active["B1"].font.b is False


def test_explicit_none_overrides(workbook, sheet, make_context) -> None:
    fill(workbook.active, [["x"]])
    _, workbook_context = make_context()
    apply_style(sheet, workbook_context, 0, 0, StyleParser("border: thick").parse_inline())
    apply_style(sheet, workbook_context, 0, 0, StyleParser("border-top: none").parse_inline())

    border = workbook.active["A1"].border
    assert border.top.style is None
    assert border.bottom.style == "thick"

"""
CSS-like style parser.

Style sheets define named classes:

    .header { font-weight: bold; fill-pattern: solid; fill-foreground-color: #D9E1F2 }
    /* comments are allowed */
    .money  { data-format: #,##0.00; alignment: right }

Inline styles (the ``style`` attribute of ``jt:style``) are the same property
list without the selector and braces.

Unknown properties and unusable values are logged at DEBUG and skipped, so a
typo in one property never breaks the rest of the sheet.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional

from dto.style import Style
from exceptions import StyleParseError
from scanners.style import StyleScanner, StyleToken

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Property names
# -------------------------------------------------------------------

PROPERTY_ALIGNMENT = "alignment"
PROPERTY_BORDER = "border"
PROPERTY_BORDER_BOTTOM = "border-bottom"
PROPERTY_BORDER_LEFT = "border-left"
PROPERTY_BORDER_RIGHT = "border-right"
PROPERTY_BORDER_TOP = "border-top"
PROPERTY_BORDER_COLOR = "border-color"
PROPERTY_BOTTOM_BORDER_COLOR = "bottom-border-color"
PROPERTY_LEFT_BORDER_COLOR = "left-border-color"
PROPERTY_RIGHT_BORDER_COLOR = "right-border-color"
PROPERTY_TOP_BORDER_COLOR = "top-border-color"
PROPERTY_COLUMN_WIDTH_IN_CHARS = "column-width-in-chars"
PROPERTY_DATA_FORMAT = "data-format"
PROPERTY_FILL_BACKGROUND_COLOR = "fill-background-color"
PROPERTY_FILL_FOREGROUND_COLOR = "fill-foreground-color"
PROPERTY_FILL_PATTERN = "fill-pattern"
PROPERTY_HIDDEN = "hidden"
PROPERTY_INDENTION = "indention"
PROPERTY_LOCKED = "locked"
PROPERTY_ROTATION = "rotation"
PROPERTY_ROW_HEIGHT_IN_POINTS = "row-height-in-points"
PROPERTY_VERTICAL_ALIGNMENT = "vertical-alignment"
PROPERTY_WRAP_TEXT = "wrap-text"
PROPERTY_FONT_BOLDWEIGHT = "font-weight"
PROPERTY_FONT_CHARSET = "font-charset"
PROPERTY_FONT_COLOR = "font-color"
PROPERTY_FONT_HEIGHT_IN_POINTS = "font-height-in-points"
PROPERTY_FONT_NAME = "font-name"
PROPERTY_FONT_ITALIC = "font-italic"
PROPERTY_FONT_STRIKEOUT = "font-strikeout"
PROPERTY_FONT_TYPE_OFFSET = "font-type-offset"
PROPERTY_FONT_UNDERLINE = "font-underline"

ROTATION_STACKED = "STACKED"
OPENPYXL_ROTATION_STACKED = 255


# -------------------------------------------------------------------
# Value vocabularies (template spelling -> openpyxl spelling)
# -------------------------------------------------------------------

HORIZONTAL_ALIGNMENTS = {
    "GENERAL": "general",
    "LEFT": "left",
    "CENTER": "center",
    "RIGHT": "right",
    "FILL": "fill",
    "JUSTIFY": "justify",
    "CENTER_SELECTION": "centerContinuous",
    "DISTRIBUTED": "distributed",
}
HORIZONTAL_ALIGNMENT_ALIASES = {"CENTERSELECTION": "CENTER_SELECTION"}

VERTICAL_ALIGNMENTS = {
    "TOP": "top",
    "CENTER": "center",
    "BOTTOM": "bottom",
    "JUSTIFY": "justify",
    "DISTRIBUTED": "distributed",
}

BORDER_STYLES = {
    "NONE": None,
    "THIN": "thin",
    "MEDIUM": "medium",
    "DASHED": "dashed",
    "DOTTED": "dotted",
    "THICK": "thick",
    "DOUBLE": "double",
    "HAIR": "hair",
    "MEDIUM_DASHED": "mediumDashed",
    "DASH_DOT": "dashDot",
    "MEDIUM_DASH_DOT": "mediumDashDot",
    "DASH_DOT_DOT": "dashDotDot",
    "MEDIUM_DASH_DOT_DOT": "mediumDashDotDot",
    "SLANTED_DASH_DOT": "slantDashDot",
}
BORDER_STYLE_ALIASES = {
    "DASHDOT": "DASH_DOT",
    "MEDIUMDASHDOT": "MEDIUM_DASH_DOT",
    "DASHDOTDOT": "DASH_DOT_DOT",
    "MEDIUMDASHDOTDOT": "MEDIUM_DASH_DOT_DOT",
    "SLANTEDDASHDOT": "SLANTED_DASH_DOT",
}

FILL_PATTERNS = {
    "NO_FILL": None,
    "SOLID_FOREGROUND": "solid",
    "FINE_DOTS": "mediumGray",
    "ALT_BARS": "darkGray",
    "SPARSE_DOTS": "lightGray",
    "THICK_HORZ_BANDS": "darkHorizontal",
    "THICK_VERT_BANDS": "darkVertical",
    "THICK_BACKWARD_DIAG": "darkUp",
    "THICK_FORWARD_DIAG": "darkDown",
    "BIG_SPOTS": "darkGrid",
    "BRICKS": "darkTrellis",
    "THIN_HORZ_BANDS": "lightHorizontal",
    "THIN_VERT_BANDS": "lightVertical",
    "THIN_BACKWARD_DIAG": "lightUp",
    "THIN_FORWARD_DIAG": "lightDown",
    "SQUARES": "lightGrid",
    "DIAMONDS": "lightTrellis",
    "LESS_DOTS": "gray125",
    "LEAST_DOTS": "gray0625",
}
FILL_PATTERN_ALIASES = {
    "NOFILL": "NO_FILL",
    "SOLID": "SOLID_FOREGROUND",
    "GRAY50PERCENT": "FINE_DOTS",
    "GRAY75PERCENT": "ALT_BARS",
    "GRAY25PERCENT": "SPARSE_DOTS",
    "HORIZONTALSTRIPE": "THICK_HORZ_BANDS",
    "VERTICALSTRIPE": "THICK_VERT_BANDS",
    "REVERSEDIAGONALSTRIPE": "THICK_BACKWARD_DIAG",
    "DIAGONALSTRIPE": "THICK_FORWARD_DIAG",
    "DIAGONALCROSSHATCH": "BIG_SPOTS",
    "THICKDIAGONALCROSSHATCH": "BRICKS",
    "THINHORIZONTALSTRIPE": "THIN_HORZ_BANDS",
    "THINVERTICALSTRIPE": "THIN_VERT_BANDS",
    "THINREVERSEDIAGONALSTRIPE": "THIN_BACKWARD_DIAG",
    "THINDIAGONALSTRIPE": "THIN_FORWARD_DIAG",
    "THINHORIZONTALCROSSHATCH": "SQUARES",
    "THINDIAGONALCROSSHATCH": "DIAMONDS",
    "GRAY12PERCENT": "LESS_DOTS",
    "GRAY6PERCENT": "LEAST_DOTS",
}

FONT_UNDERLINES = {
    "SINGLE": "single",
    "DOUBLE": "double",
    "SINGLE_ACCOUNTING": "singleAccounting",
    "DOUBLE_ACCOUNTING": "doubleAccounting",
    "NONE": None,
}
FONT_UNDERLINE_ALIASES = {
    "SINGLEACCOUNTING": "SINGLE_ACCOUNTING",
    "DOUBLEACCOUNTING": "DOUBLE_ACCOUNTING",
}

FONT_TYPE_OFFSETS = {
    "NONE": "baseline",
    "SUB": "subscript",
    "SUPER": "superscript",
}

FONT_CHARSETS = {
    "ANSI": 0,
    "DEFAULT": 1,
    "SYMBOL": 2,
    "MAC": 77,
    "SHIFTJIS": 128,
    "HANGEUL": 129,
    "JOHAB": 130,
    "GB2312": 134,
    "CHINESEBIG5": 136,
    "GREEK": 161,
    "TURKISH": 162,
    "VIETNAMESE": 163,
    "HEBREW": 177,
    "ARABIC": 178,
    "BALTIC": 186,
    "RUSSIAN": 204,
    "THAI": 222,
    "EASTEUROPE": 238,
    "OEM": 255,
}

# An explicit NONE is still an explicit choice: it must override a
# cascaded value, so it is stored as this marker rather than None.
NONE_VALUE = "none"


def _lookup(table: Dict[str, Optional[str]], aliases: Dict[str, str], value: str) -> str:
    key = aliases.get(value, value)
    if key not in table:
        raise ValueError(value)
    mapped = table[key]
    return NONE_VALUE if mapped is None else mapped


def _to_bool(value: str) -> bool:
    return value == "TRUE"


# -------------------------------------------------------------------
# Property dispatcher
# -------------------------------------------------------------------

def _set_border(style: Style, value: str, *sides: str) -> None:
    border = _lookup(BORDER_STYLES, BORDER_STYLE_ALIASES, value)
    style.set(**{f"border_{side}": border for side in sides})


def _set_border_color(style: Style, value: str, *sides: str) -> None:
    style.set(**{f"border_{side}_color": value for side in sides})


def _set_rotation(style: Style, value: str) -> None:
    if value == ROTATION_STACKED:
        style.set(rotation=OPENPYXL_ROTATION_STACKED)
    else:
        style.set(rotation=int(value))


_ALL_SIDES = ("bottom", "left", "right", "top")

_PROPERTY_SETTERS: Dict[str, Callable[[Style, str], None]] = {
    PROPERTY_FONT_BOLDWEIGHT: lambda s, v: s.set(font_bold=v in ("BOLD", "TRUE")),
    PROPERTY_FONT_ITALIC: lambda s, v: s.set(font_italic=_to_bool(v)),
    PROPERTY_FONT_COLOR: lambda s, v: s.set(font_color=v),
    PROPERTY_FONT_HEIGHT_IN_POINTS: lambda s, v: s.set(font_height_in_points=float(v)),
    PROPERTY_ALIGNMENT: lambda s, v: s.set(
        alignment=_lookup(HORIZONTAL_ALIGNMENTS, HORIZONTAL_ALIGNMENT_ALIASES, v)
    ),
    PROPERTY_BORDER: lambda s, v: _set_border(s, v, *_ALL_SIDES),
    PROPERTY_FONT_UNDERLINE: lambda s, v: s.set(
        font_underline=_lookup(FONT_UNDERLINES, FONT_UNDERLINE_ALIASES, v)
    ),
    PROPERTY_FONT_STRIKEOUT: lambda s, v: s.set(font_strikeout=_to_bool(v)),
    PROPERTY_WRAP_TEXT: lambda s, v: s.set(wrap_text=_to_bool(v)),
    PROPERTY_FILL_BACKGROUND_COLOR: lambda s, v: s.set(fill_background_color=v),
    PROPERTY_FILL_FOREGROUND_COLOR: lambda s, v: s.set(fill_foreground_color=v),
    PROPERTY_FILL_PATTERN: lambda s, v: s.set(
        fill_pattern=_lookup(FILL_PATTERNS, FILL_PATTERN_ALIASES, v)
    ),
    PROPERTY_VERTICAL_ALIGNMENT: lambda s, v: s.set(
        vertical_alignment=_lookup(VERTICAL_ALIGNMENTS, {}, v)
    ),
    PROPERTY_INDENTION: lambda s, v: s.set(indention=int(v)),
    PROPERTY_ROTATION: _set_rotation,
    PROPERTY_COLUMN_WIDTH_IN_CHARS: lambda s, v: s.set(column_width=round(256 * float(v))),
    PROPERTY_ROW_HEIGHT_IN_POINTS: lambda s, v: s.set(row_height=round(20 * float(v))),
    PROPERTY_BORDER_COLOR: lambda s, v: _set_border_color(s, v, *_ALL_SIDES),
    PROPERTY_FONT_CHARSET: lambda s, v: s.set(font_charset=FONT_CHARSETS[v]),
    PROPERTY_FONT_TYPE_OFFSET: lambda s, v: s.set(font_type_offset=FONT_TYPE_OFFSETS[v]),
    PROPERTY_LOCKED: lambda s, v: s.set(locked=_to_bool(v)),
    PROPERTY_HIDDEN: lambda s, v: s.set(hidden=_to_bool(v)),
    PROPERTY_BORDER_BOTTOM: lambda s, v: _set_border(s, v, "bottom"),
    PROPERTY_BORDER_LEFT: lambda s, v: _set_border(s, v, "left"),
    PROPERTY_BORDER_RIGHT: lambda s, v: _set_border(s, v, "right"),
    PROPERTY_BORDER_TOP: lambda s, v: _set_border(s, v, "top"),
    PROPERTY_BOTTOM_BORDER_COLOR: lambda s, v: _set_border_color(s, v, "bottom"),
    PROPERTY_LEFT_BORDER_COLOR: lambda s, v: _set_border_color(s, v, "left"),
    PROPERTY_RIGHT_BORDER_COLOR: lambda s, v: _set_border_color(s, v, "right"),
    PROPERTY_TOP_BORDER_COLOR: lambda s, v: _set_border_color(s, v, "top"),
}

def add_style(style: Style, prop: str, value: str) -> None:
    """Apply one ``property: value`` pair to ``style``."""
    logger.debug("property: %s, value: %s", prop, value)
    prop = prop.strip().lower()
    value = value.strip()

    # Free-text values keep their case.
    if prop == PROPERTY_FONT_NAME:
        style.set(font_name=value)
        return
    if prop == PROPERTY_DATA_FORMAT:
        style.set(data_format=value)
        return

    setter = _PROPERTY_SETTERS.get(prop)
    if setter is None:
        logger.debug("Unknown style property %r ignored", prop)
        return
    try:
        setter(style, value.upper())
    except (KeyError, ValueError) as exc:
        logger.debug("Illegal value %r for style property %s: %s", value, prop, exc)


# -------------------------------------------------------------------
# State machine
# -------------------------------------------------------------------

class _State(Enum):
    START = 1
    EXPECT_STYLE_NAME = 2
    EXPECT_BEGIN_BRACE = 3
    EXPECT_PROPERTY_NAME = 4
    EXPECT_COLON = 5
    EXPECT_VALUE = 6
    EXPECT_SEMICOLON_OR_END_BRACE = 7


class StyleParser:
    def __init__(self, css_text: str):
        self._text = css_text or ""

    def _error(self, message: str) -> StyleParseError:
        return StyleParseError(message, self._text)

    def parse(self) -> Dict[str, Style]:
        """Parse class definitions into a ``name -> Style`` map."""
        styles: Dict[str, Style] = {}
        self._run(_State.START, styles)
        return styles

    def parse_inline(self) -> Style:
        """Parse a bare ``prop: value; ...`` list into a single Style."""
        styles: Dict[str, Style] = {}
        return self._run(_State.EXPECT_PROPERTY_NAME, styles, inline=True)

    def _run(self, state: _State, styles: Dict[str, Style], inline: bool = False) -> Style:
        scanner = StyleScanner(self._text)
        style_name: Optional[str] = None
        style = Style()
        prop: Optional[str] = None
        value = ""

        token = scanner.next_token()
        while token != StyleToken.EOI:
            lexeme = scanner.current_lexeme

            if token == StyleToken.WHITESPACE:
                if state == _State.EXPECT_SEMICOLON_OR_END_BRACE:
                    value += lexeme
            elif token == StyleToken.STRING:
                if state == _State.EXPECT_STYLE_NAME:
                    style_name = lexeme
                    state = _State.EXPECT_BEGIN_BRACE
                elif state == _State.EXPECT_PROPERTY_NAME:
                    prop = lexeme
                    state = _State.EXPECT_COLON
                elif state == _State.EXPECT_VALUE:
                    value = lexeme
                    state = _State.EXPECT_SEMICOLON_OR_END_BRACE
                elif state == _State.EXPECT_SEMICOLON_OR_END_BRACE:
                    value += lexeme
                elif state == _State.START:
                    raise self._error(f"Expected new style definition, got {lexeme}")
                elif state == _State.EXPECT_BEGIN_BRACE:
                    raise self._error(f"Expected '{{', got {lexeme}")
                else:
                    raise self._error(f"Expected ':', got {lexeme}")
            elif token == StyleToken.PERIOD:
                if state == _State.START:
                    state = _State.EXPECT_STYLE_NAME
                elif state == _State.EXPECT_VALUE:
                    # Decimal values such as ".5"
                    value = lexeme
                    state = _State.EXPECT_SEMICOLON_OR_END_BRACE
                elif state == _State.EXPECT_SEMICOLON_OR_END_BRACE:
                    value += lexeme
                else:
                    raise self._error("Unexpected '.'")
            elif token == StyleToken.SEMICOLON:
                if state != _State.EXPECT_SEMICOLON_OR_END_BRACE:
                    raise self._error("Unexpected ';'")
                add_style(style, prop, value)
                prop, value = None, ""
                state = _State.EXPECT_PROPERTY_NAME
            elif token == StyleToken.BEGIN_BRACE:
                if state != _State.EXPECT_BEGIN_BRACE or inline:
                    raise self._error("Unexpected '{'")
                state = _State.EXPECT_PROPERTY_NAME
            elif token == StyleToken.END_BRACE:
                if inline or state not in (
                    _State.EXPECT_SEMICOLON_OR_END_BRACE,
                    _State.EXPECT_PROPERTY_NAME,
                ):
                    raise self._error("Unexpected '}'")
                if state == _State.EXPECT_SEMICOLON_OR_END_BRACE:
                    add_style(style, prop, value)
                styles[style_name] = style
                logger.debug("Style class %s defined", style_name)
                style_name, style, prop, value = None, Style(), None, ""
                state = _State.START
            elif token == StyleToken.COLON:
                if state != _State.EXPECT_COLON:
                    raise self._error("Unexpected ':'")
                state = _State.EXPECT_VALUE
            elif token == StyleToken.ERROR_EOI_IN_COMMENT:
                raise self._error("End of input reached while scanning comment")
            else:
                raise self._error("Parse error occurred")
            token = scanner.next_token()

        if inline:
            if state == _State.EXPECT_SEMICOLON_OR_END_BRACE:
                add_style(style, prop, value)
            elif state != _State.EXPECT_PROPERTY_NAME:
                raise self._error("Found end of input before end of style definition")
            return style

        if state != _State.START:
            raise self._error("Found end of input before end of style definition")
        return style
